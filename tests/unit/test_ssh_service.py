"""Unit tests for the SSH remote executor."""

import os
import subprocess
from unittest.mock import patch

import pytest

from release_linker.exceptions import SSHError
from release_linker.services.ssh_service import (
    SSHService,
    ensure_local_tools,
    ephemeral_known_hosts,
)


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class TestEphemeralKnownHosts:
    """Tests for the disposable trust scope."""

    def test_file_exists_inside_scope_and_is_removed(self):
        with ephemeral_known_hosts() as known_hosts:
            assert os.path.isfile(known_hosts)
            assert ".ssh" not in known_hosts
        assert not os.path.exists(known_hosts)
        assert not os.path.exists(os.path.dirname(known_hosts))

    def test_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with ephemeral_known_hosts() as known_hosts:
                raise RuntimeError("boom")
        assert not os.path.exists(known_hosts)


class TestSSHService:
    """Tests for SSHService.execute."""

    @pytest.fixture
    def service(self) -> SSHService:
        return SSHService(timeout=5)

    def test_key_based_command(self, service, key_target):
        with patch("subprocess.run", return_value=completed(stdout="ok")) as run:
            result = service.execute(key_target, "echo ok")

        argv = run.call_args.args[0]
        assert argv[0] == "ssh"
        assert "BatchMode=yes" in argv
        assert "StrictHostKeyChecking=no" in argv
        assert argv[argv.index("-p") + 1] == "22"
        assert argv[-2] == "deploy@10.0.0.5"
        assert argv[-1] == "set -euo pipefail; echo ok"
        assert run.call_args.kwargs["env"] is None
        assert run.call_args.kwargs["timeout"] == 5
        assert result.is_success
        assert result.stdout == "ok"

    def test_password_goes_through_environment(self, service, password_target):
        with patch("subprocess.run", return_value=completed()) as run:
            service.execute(password_target, "true")

        argv = run.call_args.args[0]
        assert argv[:3] == ["sshpass", "-e", "ssh"]
        assert "s3cret" not in " ".join(argv)
        assert "BatchMode=yes" not in argv
        assert argv[argv.index("-p") + 1] == "2222"
        assert run.call_args.kwargs["env"]["SSHPASS"] == "s3cret"

    def test_known_hosts_is_private_and_discarded(self, service, key_target):
        with patch("subprocess.run", return_value=completed()) as run:
            service.execute(key_target, "true")

        argv = run.call_args.args[0]
        option = next(a for a in argv if a.startswith("UserKnownHostsFile="))
        path = option.split("=", 1)[1]
        assert not os.path.exists(path)

    def test_remote_failure_keeps_output(self, service, key_target):
        with patch("subprocess.run", return_value=completed(2, "", "tar: error")):
            result = service.execute(key_target, "tar -xzf x")
        assert result.is_failure
        assert result.returncode == 2
        assert "tar: error" in result.output

    def test_connection_failure_has_message(self, service, key_target):
        with patch("subprocess.run", return_value=completed(255)):
            result = service.execute(key_target, "true")
        assert result.is_failure
        assert "SSH connection failed" in result.stderr

    def test_timeout_is_a_failure_not_an_exception(self, service, key_target):
        with patch(
            "subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="ssh", timeout=5)
        ):
            result = service.execute(key_target, "sleep 100")
        assert result.is_failure
        assert "timed out" in result.stderr

    def test_missing_binary_is_a_failure(self, service, key_target):
        with patch("subprocess.run", side_effect=FileNotFoundError("ssh")):
            result = service.execute(key_target, "true")
        assert result.is_failure
        assert "could not be started" in result.stderr

    def test_result_host_is_masked(self, service, key_target):
        with patch("subprocess.run", return_value=completed()):
            result = service.execute(key_target, "true")
        assert result.host == "10.**.**.5"

    def test_undecodable_output_is_replaced(self, service, key_target, fake_binary):
        fake_binary(
            "ssh",
            r"printf 'caf\351 \377\n'" + "\n" + r"printf 'locale \377\n' >&2" + "\nexit 1",
        )
        result = service.execute(key_target, "ls -al")

        assert result.returncode == 1
        assert result.stdout == "caf\ufffd \ufffd\n"
        assert result.stderr == "locale \ufffd\n"


class TestEnsureLocalTools:
    """Tests for local tool checks."""

    def test_missing_tool_raises(self):
        with patch("shutil.which", side_effect=lambda tool: None if tool == "sshpass" else "/usr/bin/" + tool):
            with pytest.raises(SSHError) as exc_info:
                ensure_local_tools(["ssh", "sshpass"])
        assert "sshpass" in exc_info.value.message

    def test_all_present(self):
        with patch("shutil.which", return_value="/usr/bin/x"):
            ensure_local_tools(["ssh", "rsync"])
