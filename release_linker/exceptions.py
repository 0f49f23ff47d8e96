"""
Release Linker Exception Hierarchy

Clean exception hierarchy for consistent error handling across the CLI.
"""

from typing import Optional


class ReleaseLinkerError(Exception):
    """Base exception for all release linker errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class ConfigurationError(ReleaseLinkerError):
    """Raised when configuration is invalid or missing."""

    pass


class PackagingError(ReleaseLinkerError):
    """Raised when the local artifact cannot be built."""

    pass


class HostSpecError(ReleaseLinkerError):
    """Raised when a host spec token does not match any supported form."""

    pass


class SSHError(ReleaseLinkerError):
    """Raised when SSH operations fail."""

    pass


class UploadError(SSHError):
    """Raised when the artifact upload fails after all attempts."""

    def __init__(self, message: str, attempts: int = 0, context: Optional[str] = None):
        self.attempts = attempts
        super().__init__(message, context)


class PreconditionError(ReleaseLinkerError):
    """Raised when the remote layout makes activation unsafe."""

    pass


class RemoteCommandError(ReleaseLinkerError):
    """Raised when a remote command returns a failure."""

    def __init__(self, step: str, message: str, output: str = ""):
        self.step = step
        self.output = output
        super().__init__(message, output or None)
