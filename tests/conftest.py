"""Pytest configuration and fixtures."""

import io
import os
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest
from rich.console import Console

from release_linker.logger import DeployLogger
from release_linker.models import (
    DeploymentPlan,
    HostTarget,
    KeyBased,
    Password,
    SSHResult,
    UploadResult,
)


class FakeSSHService:
    """Records remote commands; fails those containing a configured marker."""

    def __init__(self, fail_on: Optional[Dict[str, Tuple[int, str]]] = None):
        self.fail_on = fail_on or {}
        self.calls: List[Tuple[HostTarget, str]] = []

    @property
    def commands(self) -> List[str]:
        return [command for _, command in self.calls]

    def execute(self, target: HostTarget, command: str) -> SSHResult:
        self.calls.append((target, command))
        for marker, (returncode, stderr) in self.fail_on.items():
            if marker in command:
                return SSHResult(returncode=returncode, stderr=stderr, command=command)
        return SSHResult(returncode=0, command=command)


class FakeUploadService:
    """Upload stub that fails for the configured hosts."""

    def __init__(self, fail_hosts: Optional[Set[str]] = None, attempts: int = 3):
        self.fail_hosts = fail_hosts or set()
        self.attempts = attempts
        self.calls: List[Tuple[HostTarget, Path, str]] = []

    def upload(self, target, local_path, remote_path) -> UploadResult:
        self.calls.append((target, local_path, remote_path))
        if target.host in self.fail_hosts:
            return UploadResult(
                success=False, attempts=self.attempts, error="connection refused"
            )
        return UploadResult(success=True, attempts=1)


@pytest.fixture
def key_target() -> HostTarget:
    return HostTarget(user="deploy", host="10.0.0.5", port=22, credential=KeyBased())


@pytest.fixture
def password_target() -> HostTarget:
    return HostTarget(
        user="ubuntu", host="web1.example.com", port=2222, credential=Password("s3cret")
    )


@pytest.fixture
def plan(tmp_path) -> DeploymentPlan:
    artifact = tmp_path / "shop_20240101120000.tar.gz"
    artifact.write_bytes(b"artifact")
    return DeploymentPlan(
        project_name="shop",
        version="20240101120000",
        remote_base_dir="/data/apps",
        local_artifact_path=artifact,
        artifact_file_name=artifact.name,
    )


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(console_buffer) -> DeployLogger:
    """Console only logger writing into a buffer."""
    console = Console(file=console_buffer, width=200, color_system=None)
    return DeployLogger("shop", "deploy", console=console)


@pytest.fixture
def fake_ssh() -> FakeSSHService:
    return FakeSSHService()


@pytest.fixture
def fake_upload() -> FakeUploadService:
    return FakeUploadService()


@pytest.fixture
def make_ssh():
    """Factory for FakeSSHService with failure markers."""
    return FakeSSHService


@pytest.fixture
def make_upload():
    """Factory for FakeUploadService with failing hosts."""
    return FakeUploadService


@pytest.fixture
def fake_binary(tmp_path, monkeypatch):
    """Factory that puts a shell script under the given name first on PATH."""
    if os.name != "posix":
        pytest.skip("shell script stand-ins need a POSIX shell")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    monkeypatch.setenv("PATH", f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")

    def install(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(0o755)
        return script

    return install
