"""SSH service for executing commands on remote hosts."""

import os
import shutil
import subprocess
import tempfile
import time
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from release_linker.constants import (
    REMOTE_SHELL_PRELUDE,
    SSH_COMMAND_TIMEOUT,
    SSH_CONNECTION_TIMEOUT,
)
from release_linker.exceptions import SSHError
from release_linker.models.host import HostTarget
from release_linker.models.results import SSHResult

# ssh reserves exit status 255 for its own errors (connection, auth)
SSH_TRANSPORT_ERROR_CODE = 255


@contextmanager
def ephemeral_known_hosts() -> Iterator[str]:
    """
    Disposable known_hosts file for a single ssh/rsync invocation.

    Nothing is read from or written to ~/.ssh/known_hosts, so runs never
    accumulate stale host keys. The file is removed on every exit path.
    """
    with tempfile.TemporaryDirectory(prefix="release-linker-ssh-") as scope:
        known_hosts = os.path.join(scope, "known_hosts")
        open(known_hosts, "w").close()
        yield known_hosts


def ssh_options(
    target: HostTarget,
    known_hosts: str,
    connect_timeout: int = SSH_CONNECTION_TIMEOUT,
) -> List[str]:
    """Common ssh options shared by remote commands and uploads."""
    options = [
        "-q",
        "-o",
        f"UserKnownHostsFile={known_hosts}",
        "-o",
        "StrictHostKeyChecking=no",
        "-o",
        "LogLevel=ERROR",
        "-o",
        f"ConnectTimeout={connect_timeout}",
    ]
    if not target.uses_password:
        # Never fall back to an interactive prompt
        options.extend(["-o", "BatchMode=yes"])
    options.extend(["-p", str(target.port)])
    return options


def with_password(target: HostTarget, argv: List[str]) -> List[str]:
    """Prefix argv with sshpass when the target uses a password."""
    if target.uses_password:
        return ["sshpass", "-e"] + argv
    return argv


def subprocess_env(target: HostTarget) -> Optional[Dict[str, str]]:
    """
    Environment for the child process.

    The password travels in SSHPASS so it never shows up in argv.
    """
    if target.uses_password:
        return {**os.environ, "SSHPASS": target.password}
    return None


class SSHService:
    """Service for SSH operations."""

    def __init__(
        self,
        timeout: Optional[int] = SSH_COMMAND_TIMEOUT,
        connect_timeout: int = SSH_CONNECTION_TIMEOUT,
    ):
        """
        Initialize SSH service.

        Args:
            timeout: Per command timeout in seconds (None disables it)
            connect_timeout: ssh ConnectTimeout in seconds
        """
        self.timeout = timeout
        self.connect_timeout = connect_timeout

    @staticmethod
    def wrap_command(command: str) -> str:
        """Run the command under a fail fast shell discipline."""
        return f"{REMOTE_SHELL_PRELUDE}; {command}"

    def build_command(
        self, target: HostTarget, command: str, known_hosts: str
    ) -> List[str]:
        """Build full argv for a remote command."""
        argv = (
            ["ssh"]
            + ssh_options(target, known_hosts, self.connect_timeout)
            + [target.connection_string, self.wrap_command(command)]
        )
        return with_password(target, argv)

    def execute(self, target: HostTarget, command: str) -> SSHResult:
        """
        Execute command on remote host via SSH.

        Connection and authentication failures are reported the same way as
        a failing remote command, with a message telling them apart.

        Args:
            target: Remote host
            command: Shell command to run remotely

        Returns:
            SSHResult with execution details
        """
        start_time = time.time()

        with ephemeral_known_hosts() as known_hosts:
            argv = self.build_command(target, command, known_hosts)
            try:
                result = subprocess.run(
                    argv,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=self.timeout,
                    env=subprocess_env(target),
                )
            except subprocess.TimeoutExpired:
                return SSHResult(
                    returncode=-1,
                    stderr=f"SSH command timed out after {self.timeout}s",
                    host=target.masked_host,
                    command=command,
                    duration_seconds=time.time() - start_time,
                )
            except OSError as e:
                return SSHResult(
                    returncode=-1,
                    stderr=f"SSH command could not be started: {e}",
                    host=target.masked_host,
                    command=command,
                    duration_seconds=time.time() - start_time,
                )

        stderr = result.stderr
        if result.returncode == SSH_TRANSPORT_ERROR_CODE and not stderr.strip():
            stderr = "SSH connection failed (unreachable host or authentication rejected)"

        return SSHResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=stderr,
            host=target.masked_host,
            command=command,
            duration_seconds=time.time() - start_time,
        )


def ensure_local_tools(tools: List[str]) -> None:
    """
    Check that the local binaries needed for the run are installed.

    Raises:
        SSHError: If any of the tools is missing from PATH
    """
    missing = [tool for tool in tools if shutil.which(tool) is None]
    if missing:
        raise SSHError(
            f"Required tools not found: {', '.join(missing)}",
            context="Install openssh-client, rsync and sshpass (for password hosts)",
        )
