"""
Release Linker - UI Components
Standardized headers, status lines and summary tables
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from release_linker.models.results import DeploymentReport, OutcomeStatus

BRAND = "release-linker"

# Color scheme
BRAND_COLOR = "cyan"
SUCCESS_COLOR = "green"
WARNING_COLOR = "yellow"
ERROR_COLOR = "red"

STATUS_STYLES = {
    OutcomeStatus.SUCCESS: ("✓", SUCCESS_COLOR),
    OutcomeStatus.SKIPPED: ("⚠", WARNING_COLOR),
    OutcomeStatus.FAILED: ("✗", ERROR_COLOR),
}


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Display a standardized command header.

    Args:
        title: Main title (e.g., "Deploy Release")
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)
    """
    if console is None:
        console = Console()

    prefix = f" [bold color(214)]{BRAND}[/bold color(214)] [dim]›[/dim]"
    console.print(f"{prefix} [bold white]{escape(title)}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{escape(subtitle)}[/dim]")

    if details:
        for key, value in details.items():
            console.print(
                f"{prefix} {escape(str(key))}: [cyan]{escape(str(value))}[/cyan]",
                highlight=False,
            )

    console.print()


def render_report(report: DeploymentReport, console: Optional[Console] = None):
    """Print one line per host and a summary table."""
    if console is None:
        console = Console()

    table = Table(
        title="Deployment Summary",
        show_header=True,
        header_style=f"bold {BRAND_COLOR}",
        padding=(0, 1),
    )
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("Host", style="white")
    table.add_column("Status", no_wrap=True)
    table.add_column("Step", style="magenta")
    table.add_column("Upload attempts", justify="right")
    table.add_column("Reason", style="dim")

    for position, outcome in enumerate(report, start=1):
        icon, color = STATUS_STYLES[outcome.status]
        table.add_row(
            str(position),
            escape(outcome.label),
            f"[{color}]{icon} {outcome.status.value}[/{color}]",
            outcome.step.value if outcome.step else "-",
            str(outcome.upload_attempts or "-"),
            escape(outcome.reason or "-"),
        )

    console.print()
    console.print(table)

    summary = (
        f"{report.succeeded} succeeded, {report.failed} failed, {report.skipped} skipped"
    )
    if report.is_success:
        console.print(f"\n[bold {SUCCESS_COLOR}]✓ All deployments completed![/bold {SUCCESS_COLOR}] [dim]{summary}[/dim]\n")
    else:
        console.print(f"\n[bold {ERROR_COLOR}]✗ Deployment finished with errors[/bold {ERROR_COLOR}] [dim]{summary}[/dim]\n")
