"""Upload service for copying the release artifact to remote hosts."""

import shlex
import subprocess
import time
from pathlib import Path
from typing import Callable, List, Optional, Union

from release_linker.constants import (
    SSH_CONNECTION_TIMEOUT,
    UPLOAD_MAX_ATTEMPTS,
    UPLOAD_RETRY_DELAY,
    UPLOAD_TIMEOUT,
)
from release_linker.models.host import HostTarget
from release_linker.models.results import UploadResult
from release_linker.services.ssh_service import (
    ephemeral_known_hosts,
    ssh_options,
    subprocess_env,
    with_password,
)


class UploadService:
    """
    rsync based file transfer with bounded retry.

    Every attempt is a complete, fresh transfer (no --partial and
    --whole-file), so a retry overwrites whatever an earlier attempt left.
    """

    def __init__(
        self,
        max_attempts: int = UPLOAD_MAX_ATTEMPTS,
        retry_delay: float = UPLOAD_RETRY_DELAY,
        timeout: Optional[int] = UPLOAD_TIMEOUT,
        connect_timeout: int = SSH_CONNECTION_TIMEOUT,
        on_retry: Optional[Callable[[HostTarget, int, str], None]] = None,
    ):
        """
        Initialize upload service.

        Args:
            max_attempts: Total number of attempts
            retry_delay: Seconds to sleep between attempts
            timeout: Per attempt timeout in seconds (None disables it)
            connect_timeout: ssh ConnectTimeout in seconds
            on_retry: Called with (target, failed attempt number, error) before sleeping
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.on_retry = on_retry

    def build_command(
        self,
        target: HostTarget,
        local_path: Union[str, Path],
        remote_path: str,
        known_hosts: str,
    ) -> List[str]:
        """Build full rsync argv for one attempt."""
        remote_shell = shlex.join(
            ["ssh"] + ssh_options(target, known_hosts, self.connect_timeout)
        )
        argv = [
            "rsync",
            "-az",
            "--whole-file",
            "--protect-args",
            "-e",
            remote_shell,
            str(local_path),
            f"{target.connection_string}:{remote_path}",
        ]
        return with_password(target, argv)

    def _attempt(
        self, target: HostTarget, local_path: Union[str, Path], remote_path: str
    ) -> Optional[str]:
        """Run one transfer. Returns None on success, else an error message."""
        with ephemeral_known_hosts() as known_hosts:
            argv = self.build_command(target, local_path, remote_path, known_hosts)
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
                return f"Upload timed out after {self.timeout}s"
            except OSError as e:
                return f"Upload could not be started: {e}"

        if result.returncode != 0:
            output = f"{result.stdout}\n{result.stderr}".strip()
            return f"rsync exited with {result.returncode}" + (
                f": {output}" if output else ""
            )
        return None

    def upload(
        self, target: HostTarget, local_path: Union[str, Path], remote_path: str
    ) -> UploadResult:
        """
        Copy a local file to a remote path, retrying on failure.

        Args:
            target: Remote host
            local_path: Local file to send
            remote_path: Destination path on the remote host

        Returns:
            UploadResult with success flag and number of attempts made
        """
        start_time = time.time()
        error = ""

        for attempt in range(1, self.max_attempts + 1):
            error = self._attempt(target, local_path, remote_path)
            if error is None:
                return UploadResult(
                    success=True,
                    attempts=attempt,
                    host=target.masked_host,
                    duration_seconds=time.time() - start_time,
                )

            if attempt < self.max_attempts:
                if self.on_retry:
                    self.on_retry(target, attempt, error)
                time.sleep(self.retry_delay)

        return UploadResult(
            success=False,
            attempts=self.max_attempts,
            host=target.masked_host,
            error=error,
            duration_seconds=time.time() - start_time,
        )
