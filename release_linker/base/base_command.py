"""
Base Command Class

Abstract base for all release linker CLI commands.
Provides common functionality and structure.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rich.console import Console
from rich.markup import escape

from release_linker.exceptions import ReleaseLinkerError
from release_linker.logger import DeployLogger
from release_linker.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling and exit codes
    - JSON output support
    """

    def __init__(
        self,
        verbose: bool = False,
        json_output: bool = False,
        console: Optional[Console] = None,
    ):
        self.verbose = verbose
        self.json_output = json_output
        self.console = console or Console()
        self.logger: Optional[DeployLogger] = None

    def init_logger(
        self,
        project_name: str,
        command_name: str,
        log_dir: Optional[Union[str, Path]] = None,
    ) -> DeployLogger:
        """
        Initialize command logger.

        In JSON mode the console output goes to stderr so stdout stays
        machine readable.

        Args:
            project_name: Project name
            command_name: Command name
            log_dir: Root directory for log files (None for console only)

        Returns:
            DeployLogger instance
        """
        console = Console(stderr=True) if self.json_output else self.console
        self.logger = DeployLogger(
            project_name,
            command_name,
            verbose=self.verbose,
            log_dir=log_dir,
            console=console,
        )
        return self.logger

    def output_json(self, data: Dict[str, Any], exit_code: int = 0) -> None:
        """
        Output data as JSON and exit on error.

        Args:
            data: Data to output as JSON
            exit_code: Exit code (0 for success, non-zero for error)
        """
        print(json.dumps(data, indent=2))
        if exit_code != 0:
            raise SystemExit(exit_code)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON mode)."""
        if not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                details=details,
                console=self.console,
            )

    def print_error(self, message: str) -> None:
        """Print error message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[red]✗ {escape(message)}[/red]")

    def print_dim(self, message: str) -> None:
        """Print dim message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def _fail(self, title: str, error: Exception) -> None:
        if self.logger:
            self.logger.log_error(f"{title}: {error}")
            if self.logger.log_path:
                self.print_dim(f"Logs saved to: {self.logger.log_path}")
        elif not self.json_output:
            self.console.print(
                f"\n[bold red]✗ {escape(title)}:[/bold red] {escape(str(error))}\n"
            )
        if self.json_output:
            self.output_json({"error": title, "details": str(error)}, exit_code=1)
        raise SystemExit(1)

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            if self.logger and self.logger.log_path:
                self.print_dim(f"Logs saved to: {self.logger.log_path}")
            raise SystemExit(130)
        except SystemExit:
            raise
        except (ReleaseLinkerError, FileNotFoundError, PermissionError, ValueError) as e:
            self._fail(type(e).__name__, e)
        finally:
            if self.logger:
                self.logger.close()
