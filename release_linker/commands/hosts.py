"""Release Linker - Validate host specs without connecting"""

import os
from typing import Mapping, Optional, Sequence

import click
from rich.console import Console
from rich.table import Table

from release_linker.base import BaseCommand
from release_linker.constants import HIDDEN_VALUE, INVALID_SPEC_REASON
from release_linker.exceptions import ConfigurationError, HostSpecError
from release_linker.services.deployment_service import invalid_entry_label
from release_linker.services.host_parser import HostSpecParser, split_host_specs


class HostsCommand(BaseCommand):
    """Parse host specs and show them masked."""

    def __init__(
        self,
        hosts: Sequence[str] = (),
        environ: Optional[Mapping[str, str]] = None,
        verbose: bool = False,
        json_output: bool = False,
        console: Optional[Console] = None,
    ):
        super().__init__(verbose=verbose, json_output=json_output, console=console)
        self.hosts = list(hosts)
        self.environ = os.environ if environ is None else environ

    def collect_tokens(self):
        """Host tokens from the arguments, else from DEPLOY_HOSTS."""
        tokens = []
        for item in self.hosts:
            tokens.extend(split_host_specs(item))
        if not tokens:
            raw = self.environ.get("INPUT_DEPLOY_HOSTS") or self.environ.get("DEPLOY_HOSTS", "")
            tokens = split_host_specs(raw)
        if not tokens:
            raise ConfigurationError(
                "DEPLOY_HOSTS is empty. Please provide at least one deploy host."
            )
        return tokens

    def execute(self) -> None:
        """Execute hosts command."""
        parser = HostSpecParser()
        rows = []

        for position, token in enumerate(self.collect_tokens(), start=1):
            rule, _ = parser.match_rule(token)
            try:
                target = parser.parse(token)
            except HostSpecError as e:
                rows.append(
                    {
                        "position": position,
                        "valid": False,
                        "host": invalid_entry_label(position),
                        "form": "-",
                        "auth": "-",
                        "reason": e.context or INVALID_SPEC_REASON,
                    }
                )
                continue
            rows.append(
                {
                    "position": position,
                    "valid": True,
                    "host": target.masked_host,
                    "form": rule.name,
                    "auth": "password" if target.uses_password else "key",
                    "reason": "",
                }
            )

        invalid = sum(1 for row in rows if not row["valid"])
        exit_code = 1 if invalid else 0

        if self.json_output:
            self.output_json({"hosts": rows, "invalid": invalid}, exit_code=exit_code)
            return

        self.show_header(title="Host Specs", details={"Entries": len(rows)})

        table = Table(show_header=True, header_style="bold cyan", padding=(0, 1))
        table.add_column("#", style="dim", no_wrap=True)
        table.add_column("Status", no_wrap=True)
        table.add_column("User")
        table.add_column("Host", style="white")
        table.add_column("Port")
        table.add_column("Form", style="magenta")
        table.add_column("Auth")
        table.add_column("Reason", style="dim")

        for row in rows:
            status = "[green]✓ valid[/green]" if row["valid"] else "[yellow]⚠ skipped[/yellow]"
            hidden = HIDDEN_VALUE if row["valid"] else "-"
            table.add_row(
                str(row["position"]),
                status,
                hidden,
                row["host"],
                hidden,
                row["form"],
                row["auth"],
                row["reason"] or "-",
            )

        self.console.print(table)

        if exit_code:
            raise SystemExit(exit_code)


@click.command(name="hosts")
@click.argument("hosts", nargs=-1)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def hosts(hosts, json_output):
    """
    Check host specs without connecting (reads DEPLOY_HOSTS when no argument is given)

    \b
    Examples:
      release-linker hosts deploy@10.0.0.5 ubuntu:secret@web1:2222
      DEPLOY_HOSTS="deploy@web1 deploy@web2" release-linker hosts
    """
    cmd = HostsCommand(hosts, json_output=json_output)
    cmd.run()
