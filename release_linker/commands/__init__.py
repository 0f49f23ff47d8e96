"""Release Linker CLI commands."""

from .deploy import deploy
from .hosts import hosts

__all__ = [
    "deploy",
    "hosts",
]
