#!/usr/bin/env python3
"""Release Linker CLI - Main entry point"""

# Rich-Click: CLI help with colors
import rich_click as click

from release_linker import __version__
from release_linker.commands import deploy, hosts

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.MAX_WIDTH = 100

click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_ARGUMENT = "bold yellow"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"
click.rich_click.STYLE_COMMANDS_PANEL_BORDER = "cyan"


@click.group()
@click.version_option(__version__, prog_name="release-linker")
def cli():
    """
    Safe SSH deployments: versioned releases with symlink cutover

    \b
    Every host gets {remote_dir}/{project}/releases/{version}/ and a
    "website" symlink switched atomically to the new release.
    """


cli.add_command(deploy)
cli.add_command(hosts)


def main():
    cli()


if __name__ == "__main__":
    main()
