"""
Logging system for release linker
Provides real-time logging to files with clean console output
"""

import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO, Union

from rich.console import Console
from rich.markup import escape

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class DeployLogger:
    """
    Manages logging for deployment runs
    - Writes all output to a log file in real-time (when a log dir is set)
    - Shows clean progress UI in console (unless verbose)
    - Captures errors with context
    """

    def __init__(
        self,
        project_name: str,
        operation: str,
        verbose: bool = False,
        log_dir: Optional[Union[str, Path]] = None,
        console: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            project_name: Name of project being deployed
            operation: Operation name (e.g., 'deploy')
            verbose: If True, show all output in console
            log_dir: Root directory for log files, None for console only
            console: Rich Console to print to (a new Console by default)
        """
        self.project_name = project_name
        self.operation = operation
        self.verbose = verbose
        self.console = console or Console()
        self.log_file: Optional[TextIO] = None
        self.log_path: Optional[Path] = None
        self.has_errors = False
        self._lock = threading.Lock()

        if log_dir:
            # Structure: {log_dir}/{project}/{date}/{time}_{operation}.log
            now = datetime.now()
            project_logs_dir = Path(log_dir) / project_name / now.strftime("%Y-%m-%d")
            project_logs_dir.mkdir(parents=True, exist_ok=True)

            self.log_path = project_logs_dir / f"{now.strftime('%H-%M-%S')}_{operation}.log"
            self.log_file = open(self.log_path, "w", buffering=1)
            self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
Release Linker Deployment Log
{"=" * 80}
Project: {self.project_name}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self._write(header)

    def _write(self, text: str):
        if self.log_file:
            with self._lock:
                self.log_file.write(text)
                self.log_file.flush()

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        timestamp = datetime.now().strftime("%H:%M:%S")
        self._write(f"[{timestamp}] [{level}] {message}\n")

        if self.verbose:
            if level == "ERROR":
                self.console.print(f"[red]{escape(message)}[/red]", highlight=False)
            elif level == "WARNING":
                self.console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)
            elif level == "DEBUG":
                self.console.print(f"[dim]{escape(message)}[/dim]", highlight=False)
            else:
                self.console.print(escape(message), highlight=False)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output

        Always written to the log file, shown in console only if verbose.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
        """
        if not output or not output.strip():
            return

        clean_output = ANSI_ESCAPE.sub("", output)
        self._write(
            "".join(f"  [{stream}] {line}\n" for line in clean_output.splitlines())
        )

        if self.verbose:
            self.console.print(output.rstrip(), markup=False, highlight=False)

    def info(self, message: str):
        """Log an informational line (shown in console)"""
        self.log(message, "INFO")

        if not self.verbose:
            self.console.print(f"  [blue]ℹ[/blue] [dim]{escape(message)}[/dim]", highlight=False)

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., command output)
        """
        self.has_errors = True

        error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{error}
"""
        if context:
            error_block += f"\nContext: {context}\n"
        error_block += f"{'!' * 80}\n\n"
        self._write(error_block)

        self.console.print(f"  [bold red]✗ {escape(error)}[/bold red]", highlight=False)
        if context:
            self.console.print(f"    [color(208)]{escape(context)}[/color(208)]", highlight=False)

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self.console.print(
                f"[color(214)]▶[/color(214)] [white]{escape(step_name)}[/white]", highlight=False
            )

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            self.console.print(f"  [dim]✓ {escape(message)}[/dim]", highlight=False)

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            self.console.print(
                f"  [yellow]⚠[/yellow] [dim]{escape(message)}[/dim]", highlight=False
            )

    def divider(self):
        """Visual separator between hosts"""
        self._write(f"{'-' * 50}\n")
        self.console.rule(style="dim")

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self._write(footer)
            self.log_file.close()
            self.log_file = None

    def for_host(self, label: str) -> "HostLogger":
        """Logger view that tags every line with a host label"""
        return HostLogger(self, label)


class HostLogger:
    """
    Per host view of a DeployLogger

    Hosts deployed in parallel share one logger, so every line carries the
    masked host label to keep interleaved output readable.
    """

    def __init__(self, logger: DeployLogger, label: str):
        self.logger = logger
        self.label = label

    def _tag(self, message: str) -> str:
        return f"[{self.label}] {message}"

    def log(self, message: str, level: str = "INFO"):
        self.logger.log(self._tag(message), level)

    def log_command(self, command: str):
        self.logger.log(self._tag(f"Executing: {command}"), "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        if not output or not output.strip():
            return
        tagged = "\n".join(self._tag(line) for line in output.splitlines())
        self.logger.log_output(tagged, stream)

    def info(self, message: str):
        self.logger.info(self._tag(message))

    def log_error(self, error: str, context: Optional[str] = None):
        self.logger.log_error(self._tag(error), context=context)

    def step(self, step_name: str):
        self.logger.step(self._tag(step_name))

    def success(self, message: str):
        self.logger.success(self._tag(message))

    def warning(self, message: str):
        self.logger.warning(self._tag(message))
