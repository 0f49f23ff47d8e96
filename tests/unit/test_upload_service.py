"""Unit tests for the rsync upload transport."""

import shlex
import subprocess
from unittest.mock import patch

import pytest

from release_linker.services.upload_service import UploadService


def completed(returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout="", stderr=stderr)


class TestUploadService:
    """Tests for UploadService retry policy and argv."""

    def test_succeeds_first_time(self, key_target, tmp_path):
        service = UploadService()
        with patch("subprocess.run", return_value=completed()) as run, patch(
            "time.sleep"
        ) as sleep:
            result = service.upload(key_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")

        assert result.success
        assert result.attempts == 1
        assert run.call_count == 1
        sleep.assert_not_called()

    def test_retries_until_third_attempt(self, key_target, tmp_path):
        service = UploadService()
        responses = [completed(12, "broken pipe"), completed(12, "broken pipe"), completed()]
        with patch("subprocess.run", side_effect=responses) as run, patch(
            "time.sleep"
        ) as sleep:
            result = service.upload(key_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")

        assert result.success
        assert result.attempts == 3
        assert run.call_count == 3
        assert sleep.call_count == 2
        sleep.assert_called_with(2)

    def test_gives_up_after_three_attempts(self, key_target, tmp_path):
        service = UploadService()
        with patch("subprocess.run", return_value=completed(255, "refused")) as run, patch(
            "time.sleep"
        ) as sleep:
            result = service.upload(key_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")

        assert not result.success
        assert result.attempts == 3
        assert run.call_count == 3
        # No sleep after the final attempt
        assert sleep.call_count == 2
        assert "refused" in result.error

    def test_timeout_counts_as_failed_attempt(self, key_target, tmp_path):
        service = UploadService(max_attempts=2, retry_delay=0)
        responses = [subprocess.TimeoutExpired(cmd="rsync", timeout=1), completed()]
        with patch("subprocess.run", side_effect=responses), patch("time.sleep"):
            result = service.upload(key_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")
        assert result.success
        assert result.attempts == 2

    def test_on_retry_callback(self, key_target, tmp_path):
        seen = []
        service = UploadService(
            on_retry=lambda target, attempt, error: seen.append((target.masked_host, attempt))
        )
        with patch("subprocess.run", return_value=completed(1)), patch("time.sleep"):
            service.upload(key_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")
        assert seen == [("10.**.**.5", 1), ("10.**.**.5", 2)]

    def test_each_attempt_is_a_whole_transfer(self, key_target, tmp_path):
        service = UploadService()
        with patch("subprocess.run", return_value=completed()) as run:
            service.upload(key_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")

        argv = run.call_args.args[0]
        assert argv[0] == "rsync"
        assert "--whole-file" in argv
        assert "--partial" not in argv
        assert argv[-2] == str(tmp_path / "a.tar.gz")
        assert argv[-1] == "deploy@10.0.0.5:/srv/a.tar.gz"

        remote_shell = shlex.split(argv[argv.index("-e") + 1])
        assert remote_shell[0] == "ssh"
        assert "StrictHostKeyChecking=no" in remote_shell
        assert remote_shell[remote_shell.index("-p") + 1] == "22"

    def test_password_target_uses_sshpass(self, password_target, tmp_path):
        service = UploadService()
        with patch("subprocess.run", return_value=completed()) as run:
            service.upload(password_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")

        argv = run.call_args.args[0]
        assert argv[:3] == ["sshpass", "-e", "rsync"]
        assert "s3cret" not in " ".join(argv)
        assert run.call_args.kwargs["env"]["SSHPASS"] == "s3cret"

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            UploadService(max_attempts=0)

    def test_undecodable_rsync_output_is_an_error_message(self, key_target, tmp_path, fake_binary):
        fake_binary("rsync", r"printf 'rsync: caf\351 \377 denied\n' >&2" + "\nexit 12")
        service = UploadService(max_attempts=2, retry_delay=0)
        with patch("time.sleep"):
            result = service.upload(key_target, tmp_path / "a.tar.gz", "/srv/a.tar.gz")

        assert not result.success
        assert result.attempts == 2
        assert result.error.startswith("rsync exited with 12: rsync: caf\ufffd")
