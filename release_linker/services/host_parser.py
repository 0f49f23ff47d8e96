"""
Host Spec Parser

Turns compact host spec tokens into HostTarget values.

Supported forms, tried in order (first match wins):

    user:pass@host:port
    user:pass@host
    user@host:port
    user@host

Known grammar limitations: passwords cannot contain "@", and hosts cannot
contain ":" (so IPv6 literals are unsupported). Such tokens fail to parse
rather than being split in the wrong place.
"""

import re
from dataclasses import dataclass
from typing import List, Pattern

from release_linker.constants import DEFAULT_SSH_PORT
from release_linker.exceptions import HostSpecError
from release_linker.models.host import HostTarget, KeyBased, Password


@dataclass(frozen=True)
class HostSpecRule:
    """One grammar form of the host spec."""

    name: str
    pattern: Pattern
    has_password: bool
    has_port: bool


HOST_SPEC_RULES = (
    HostSpecRule(
        name="user:pass@host:port",
        pattern=re.compile(
            r"^(?P<user>[^:@]+):(?P<password>[^@]+)@(?P<host>[^:@]+):(?P<port>[0-9]+)$"
        ),
        has_password=True,
        has_port=True,
    ),
    HostSpecRule(
        name="user:pass@host",
        pattern=re.compile(r"^(?P<user>[^:@]+):(?P<password>[^@]+)@(?P<host>[^:@]+)$"),
        has_password=True,
        has_port=False,
    ),
    HostSpecRule(
        name="user@host:port",
        pattern=re.compile(r"^(?P<user>[^:@]+)@(?P<host>[^:@]+):(?P<port>[0-9]+)$"),
        has_password=False,
        has_port=True,
    ),
    HostSpecRule(
        name="user@host",
        pattern=re.compile(r"^(?P<user>[^:@]+)@(?P<host>[^:@]+)$"),
        has_password=False,
        has_port=False,
    ),
)


def split_host_specs(raw: str) -> List[str]:
    """
    Split the raw host list on ASCII spaces.

    There is no quoting support; runs of spaces produce no empty entries.
    """
    if not raw:
        return []
    return [token for token in raw.split(" ") if token]


class HostSpecParser:
    """Ordered rule based parser for host spec tokens."""

    def __init__(self, rules=HOST_SPEC_RULES):
        self.rules = rules

    def match_rule(self, token: str):
        """Return (rule, match) for the first rule accepting the token."""
        for rule in self.rules:
            match = rule.pattern.match(token)
            if match:
                return rule, match
        return None, None

    def parse(self, token: str) -> HostTarget:
        """
        Parse one host spec token.

        Args:
            token: Host spec such as "deploy@10.0.0.5:2222"

        Returns:
            HostTarget

        Raises:
            HostSpecError: If the token matches none of the supported forms
        """
        # The token itself is never part of the error, it may carry a password
        rule, match = self.match_rule(token or "")
        if rule is None:
            raise HostSpecError(
                "invalid host spec",
                context="Expected user:pass@host[:port] or user@host[:port]",
            )

        port = DEFAULT_SSH_PORT
        if rule.has_port:
            port = int(match.group("port"))
            if not 0 < port < 65536:
                raise HostSpecError(
                    "invalid host spec", context=f"Port out of range ({rule.name})"
                )

        credential = (
            Password(match.group("password")) if rule.has_password else KeyBased()
        )

        return HostTarget(
            user=match.group("user"),
            host=match.group("host"),
            port=port,
            credential=credential,
        )
