"""
Host Target Models

Dataclass models describing a remote deployment target and how to
authenticate against it.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Union

from release_linker.constants import DEFAULT_SSH_PORT, HIDDEN_VALUE

_IPV4_PATTERN = re.compile(r"^(\d+)\.(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True)
class Password:
    """Password credential, supplied to ssh non-interactively."""

    secret: str = field(repr=False)

    def __repr__(self) -> str:
        return f"Password({HIDDEN_VALUE})"


@dataclass(frozen=True)
class KeyBased:
    """Key based credential relying on the ambient agent or identity files."""


Credential = Union[Password, KeyBased]


def mask_host(host: str) -> str:
    """
    Partially mask a host for status output.

    IPv4 addresses keep the first and last octet (10.**.**.7), host names
    keep the first character of the first label and the remaining labels
    (w**.example.com).
    """
    match = _IPV4_PATTERN.match(host)
    if match:
        return f"{match.group(1)}.**.**.{match.group(4)}"

    first, _, rest = host.partition(".")
    masked = first[:1] + "**" if len(first) > 1 else first
    return f"{masked}.{rest}" if rest else masked


@dataclass(frozen=True)
class HostTarget:
    """A parsed remote target. Immutable for the whole run."""

    user: str
    host: str
    port: int = DEFAULT_SSH_PORT
    credential: Credential = field(default_factory=KeyBased)

    def __post_init__(self):
        if not self.user:
            raise ValueError("HostTarget.user must not be empty")
        if not self.host:
            raise ValueError("HostTarget.host must not be empty")
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ValueError(f"HostTarget.port must be in 1..65535, got {self.port!r}")

    @property
    def password(self) -> Optional[str]:
        """Password secret, or None for key based targets."""
        if isinstance(self.credential, Password):
            return self.credential.secret
        return None

    @property
    def uses_password(self) -> bool:
        """Check if the target authenticates with a password."""
        return isinstance(self.credential, Password)

    @property
    def connection_string(self) -> str:
        """Get SSH connection string (user@host)."""
        return f"{self.user}@{self.host}"

    @property
    def masked_host(self) -> str:
        """Host identifier safe to print."""
        return mask_host(self.host)

    def describe(self) -> dict:
        """Masked key/value description for status output."""
        return {
            "User": HIDDEN_VALUE,
            "Host": self.masked_host,
            "Port": HIDDEN_VALUE,
            "Password": HIDDEN_VALUE if self.uses_password else "-",
        }

    def __repr__(self) -> str:
        auth = "password" if self.uses_password else "key"
        return f"HostTarget(host={self.masked_host}, auth={auth})"

    __str__ = __repr__
