"""Unit tests for multi host orchestration."""

import pytest

from release_linker.models import DeploymentStep, OutcomeStatus
from release_linker.services.deployment_service import DeploymentOrchestrator
from release_linker.services.release_service import ReleaseService
from release_linker.services.ssh_service import SSHService


@pytest.fixture
def orchestrator_factory(fake_ssh, logger):
    def build(upload, parallel=1):
        release_service = ReleaseService(fake_ssh, upload, logger=logger)
        return DeploymentOrchestrator(release_service, logger=logger, parallel=parallel)

    return build


class TestDeploymentOrchestrator:
    """Tests for DeploymentOrchestrator.run."""

    def test_failure_does_not_short_circuit(self, orchestrator_factory, make_upload, plan):
        upload = make_upload(fail_hosts={"10.0.0.1"})
        report = orchestrator_factory(upload).run(["a@10.0.0.1", "b@10.0.0.2"], plan)

        assert len(report) == 2
        first, second = report.outcomes
        assert first.status == OutcomeStatus.FAILED
        assert first.step == DeploymentStep.UPLOAD
        assert first.label == "10.**.**.1"
        assert second.status == OutcomeStatus.SUCCESS
        assert second.label == "10.**.**.2"
        assert report.exit_code == 1

    def test_invalid_tokens_are_skipped(self, orchestrator_factory, fake_upload, plan):
        tokens = ["not-a-valid-spec", "", "alice:secret@10.0.0.1:2222", "bob@host.example"]
        report = orchestrator_factory(fake_upload).run(tokens, plan)

        statuses = [o.status for o in report]
        assert statuses == [
            OutcomeStatus.SKIPPED,
            OutcomeStatus.SKIPPED,
            OutcomeStatus.SUCCESS,
            OutcomeStatus.SUCCESS,
        ]
        assert report.outcomes[0].reason == "invalid host spec"
        assert report.outcomes[0].label == "host #1"
        assert len(fake_upload.calls) == 2

    def test_invalid_token_is_never_printed(
        self, orchestrator_factory, fake_upload, plan, console_buffer
    ):
        orchestrator_factory(fake_upload).run(["alice:hunter2@bad:host:1"], plan)
        assert "hunter2" not in console_buffer.getvalue()

    def test_status_output_is_masked(self, orchestrator_factory, fake_upload, plan, console_buffer):
        orchestrator_factory(fake_upload).run(["alice:hunter2@192.168.7.9:2200"], plan)
        output = console_buffer.getvalue()
        assert "hunter2" not in output
        assert "192.168.7.9" not in output
        assert "2200" not in output
        assert "192.**.**.9" in output

    def test_all_success(self, orchestrator_factory, fake_upload, plan):
        report = orchestrator_factory(fake_upload).run(["a@h1", "b@h2", "c@h3"], plan)
        assert report.is_success
        assert report.exit_code == 0
        assert [call[0].host for call in fake_upload.calls] == ["h1", "h2", "h3"]

    def test_parallel_keeps_input_order(self, orchestrator_factory, make_upload, plan):
        upload = make_upload(fail_hosts={"h2", "h4"})
        tokens = ["a@h1", "a@h2", "bad", "a@h4", "a@h5"]
        report = orchestrator_factory(upload, parallel=3).run(tokens, plan)

        assert [o.status for o in report] == [
            OutcomeStatus.SUCCESS,
            OutcomeStatus.FAILED,
            OutcomeStatus.SKIPPED,
            OutcomeStatus.FAILED,
            OutcomeStatus.SUCCESS,
        ]
        assert report.outcomes[2].label == "host #3"

    def test_rejects_zero_parallel(self, fake_ssh, fake_upload):
        with pytest.raises(ValueError):
            DeploymentOrchestrator(ReleaseService(fake_ssh, fake_upload), parallel=0)

    def test_parallel_output_names_each_host(
        self, orchestrator_factory, make_upload, plan, console_buffer
    ):
        upload = make_upload(fail_hosts={"10.0.0.2"})
        tokens = ["a@10.0.0.1", "a@10.0.0.2", "a@10.0.0.3"]
        orchestrator_factory(upload, parallel=3).run(tokens, plan)

        lines = [line.strip() for line in console_buffer.getvalue().splitlines()]
        untar = [line for line in lines if "Remote untar" in line]
        assert sorted(untar) == ["▶ [10.**.**.1] Remote untar", "▶ [10.**.**.3] Remote untar"]

        per_host = [
            line
            for line in lines
            if any(
                message in line
                for message in ("Uploading package", "Upload completed", "Upload failed", "Deployment succeeded")
            )
        ]
        assert len(per_host) == 8
        assert all("[10.**.**." in line for line in per_host)
        assert any(line.startswith("✗ [10.**.**.2] Upload failed") for line in per_host)


class TestUndecodableRemoteOutput:
    """Remote output that is not valid UTF-8 stays inside its host."""

    def test_second_host_still_deploys(self, fake_binary, fake_upload, logger, plan):
        fake_binary(
            "ssh",
            "\n".join(
                [
                    'case "$*" in',
                    r"  *a@h1*) printf 'caf\351 \377\n' >&2; exit 1 ;;",
                    "esac",
                    r"printf 'caf\351\n'",
                ]
            ),
        )
        release_service = ReleaseService(SSHService(timeout=10), fake_upload, logger=logger)
        report = DeploymentOrchestrator(release_service, logger=logger).run(
            ["a@h1", "b@h2"], plan
        )

        first, second = report.outcomes
        assert first.status == OutcomeStatus.FAILED
        assert first.step == DeploymentStep.PRECONDITION
        assert second.status == OutcomeStatus.SUCCESS
        assert [call[0].host for call in fake_upload.calls] == ["h2"]
