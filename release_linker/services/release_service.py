"""
Release Service

Drives one host through the release pipeline:

    precondition -> upload -> extract -> activate -> post deploy

A failing step stops the pipeline for that host only. Errors never leave
deploy(); they become the host's DeploymentOutcome.
"""

import time
from typing import Optional

from release_linker.constants import ACTIVE_LINK_OCCUPIED_EXIT_CODE
from release_linker.exceptions import (
    PreconditionError,
    ReleaseLinkerError,
    RemoteCommandError,
    UploadError,
)
from release_linker.logger import DeployLogger, HostLogger
from release_linker.models.host import HostTarget
from release_linker.models.plan import DeploymentPlan
from release_linker.models.results import DeploymentOutcome, DeploymentStep
from release_linker.services.remote_commands import RemoteCommandBuilder
from release_linker.services.ssh_service import SSHService
from release_linker.services.upload_service import UploadService


class ReleaseService:
    """Per host release lifecycle on top of SSHService and UploadService."""

    def __init__(
        self,
        ssh_service: SSHService,
        upload_service: UploadService,
        logger: Optional[DeployLogger] = None,
        keep_failed_release: bool = False,
    ):
        """
        Initialize release service.

        Args:
            ssh_service: Remote command executor
            upload_service: Artifact transport
            logger: Optional DeployLogger for step output
            keep_failed_release: Leave a partially extracted release in place
        """
        self.ssh_service = ssh_service
        self.upload_service = upload_service
        self.logger = logger
        self.keep_failed_release = keep_failed_release

    def _log(self, target: HostTarget) -> Optional[HostLogger]:
        return self.logger.for_host(target.masked_host) if self.logger else None

    def _run(
        self, target: HostTarget, step: DeploymentStep, command: str, failure: str
    ) -> str:
        log = self._log(target)
        if log:
            log.log_command(command)

        result = self.ssh_service.execute(target, command)

        if log:
            log.log_output(result.stdout, "stdout")
            log.log_output(result.stderr, "stderr")

        if result.is_failure:
            raise RemoteCommandError(step.value, failure, result.output)
        return result.stdout

    def check_preconditions(
        self, target: HostTarget, plan: DeploymentPlan, commands: RemoteCommandBuilder
    ) -> None:
        """
        Ensure the release dir exists and the activation point is safe.

        Raises:
            PreconditionError: If the active link path is a real file or directory
            RemoteCommandError: If the check itself could not run
        """
        log = self._log(target)
        if log:
            log.step(
                f"Checking remote dir {plan.remote_release_dir} and symlink {plan.remote_active_link}"
            )

        command = commands.prepare_release()
        if log:
            log.log_command(command)
        result = self.ssh_service.execute(target, command)

        if result.returncode == ACTIVE_LINK_OCCUPIED_EXIT_CODE:
            raise PreconditionError(
                f"{plan.remote_active_link} exists and is not a symbolic link",
                context="Refusing to replace a real file or directory at the activation point",
            )
        if result.is_failure:
            raise RemoteCommandError(
                DeploymentStep.PRECONDITION.value,
                "Preparing the release directory failed",
                result.output,
            )

    def upload_artifact(self, target: HostTarget, plan: DeploymentPlan) -> int:
        """
        Send the artifact, returns the number of attempts used.

        Raises:
            UploadError: If every attempt failed
        """
        log = self._log(target)
        if log:
            log.step(f"Uploading package to remote {plan.remote_artifact_path}")

        result = self.upload_service.upload(
            target, plan.local_artifact_path, plan.remote_artifact_path
        )
        if not result.success:
            raise UploadError(
                f"Upload failed after {result.attempts} attempts, skipping this host",
                attempts=result.attempts,
                context=result.error or None,
            )

        if log:
            log.success("Upload completed")
        return result.attempts

    def extract(
        self, target: HostTarget, plan: DeploymentPlan, commands: RemoteCommandBuilder
    ) -> None:
        log = self._log(target)
        if log:
            log.step("Remote untar")
        try:
            self._run(
                target,
                DeploymentStep.EXTRACT,
                commands.extract(),
                "Extracting the package failed",
            )
        except RemoteCommandError:
            if not self.keep_failed_release:
                self.discard_release(target, commands)
            raise

    def discard_release(self, target: HostTarget, commands: RemoteCommandBuilder) -> None:
        """Best effort removal of the uploaded archive and the partial release."""
        log = self._log(target)
        result = self.ssh_service.execute(target, commands.discard_release())
        if log:
            if result.is_success:
                log.warning("Removed partially extracted release")
            else:
                log.warning(f"Could not remove partially extracted release: {result.output}")

    def activate(
        self, target: HostTarget, plan: DeploymentPlan, commands: RemoteCommandBuilder
    ) -> None:
        log = self._log(target)
        if log:
            log.step(f"Updating symlink to {plan.remote_release_dir}")
        self._run(
            target,
            DeploymentStep.ACTIVATE,
            commands.activate(),
            "Switching the active release failed",
        )

    def post_deploy(
        self, target: HostTarget, plan: DeploymentPlan, commands: RemoteCommandBuilder
    ) -> None:
        log = self._log(target)
        if log:
            log.step("Executing post deploy command")
        self._run(
            target,
            DeploymentStep.POST_DEPLOY,
            commands.post_deploy(),
            "Post deploy command failed (release is already active)",
        )

    def deploy(
        self, target: HostTarget, plan: DeploymentPlan, label: Optional[str] = None
    ) -> DeploymentOutcome:
        """
        Deploy the plan to one host.

        Args:
            target: Parsed host target
            plan: Deployment plan for the run
            label: Display name for the outcome (defaults to the masked host)

        Returns:
            DeploymentOutcome, never raises for per host failures
        """
        label = label or target.masked_host
        log = self._log(target)
        commands = RemoteCommandBuilder(plan)
        start_time = time.time()
        step = DeploymentStep.PRECONDITION
        activated = False
        attempts = 0

        try:
            self.check_preconditions(target, plan, commands)

            step = DeploymentStep.UPLOAD
            attempts = self.upload_artifact(target, plan)

            step = DeploymentStep.EXTRACT
            self.extract(target, plan, commands)

            step = DeploymentStep.ACTIVATE
            self.activate(target, plan, commands)
            activated = True

            if plan.has_post_deploy_command:
                step = DeploymentStep.POST_DEPLOY
                self.post_deploy(target, plan, commands)
        except (ReleaseLinkerError, OSError) as e:
            if isinstance(e, UploadError):
                attempts = e.attempts
            reason = e.message if isinstance(e, ReleaseLinkerError) else str(e)
            if log:
                log.log_error(reason, context=getattr(e, "context", None))
            return DeploymentOutcome.failed(
                label,
                step,
                reason,
                activated=activated,
                upload_attempts=attempts,
                duration_seconds=time.time() - start_time,
            )

        if log:
            log.success("Deployment succeeded")
        return DeploymentOutcome.success(
            label,
            upload_attempts=attempts,
            duration_seconds=time.time() - start_time,
        )
