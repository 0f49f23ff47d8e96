"""
Deployment Orchestrator

Runs the release pipeline for every host entry and folds the results into
an ordered DeploymentReport. One host's failure never stops the others.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from release_linker.constants import INVALID_SPEC_REASON
from release_linker.exceptions import HostSpecError
from release_linker.logger import DeployLogger
from release_linker.models.plan import DeploymentPlan
from release_linker.models.results import DeploymentOutcome, DeploymentReport
from release_linker.services.host_parser import HostSpecParser
from release_linker.services.release_service import ReleaseService


def invalid_entry_label(position: int) -> str:
    """Label for an entry that failed to parse (the raw token is never shown)."""
    return f"host #{position}"


class DeploymentOrchestrator:
    """Deploys one plan to a list of host spec tokens."""

    def __init__(
        self,
        release_service: ReleaseService,
        parser: Optional[HostSpecParser] = None,
        logger: Optional[DeployLogger] = None,
        parallel: int = 1,
    ):
        """
        Initialize orchestrator.

        Args:
            release_service: Per host pipeline
            parser: Host spec parser (default rules when omitted)
            logger: Optional DeployLogger
            parallel: Number of hosts deployed at the same time
        """
        if parallel < 1:
            raise ValueError("parallel must be at least 1")
        self.release_service = release_service
        self.parser = parser or HostSpecParser()
        self.logger = logger
        self.parallel = parallel

    def deploy_entry(
        self, position: int, token: str, plan: DeploymentPlan
    ) -> DeploymentOutcome:
        """Parse and deploy a single host entry (1-based position)."""
        if self.logger:
            self.logger.divider()
            self.logger.step(f"Parsing host info #{position}")

        try:
            target = self.parser.parse(token)
        except HostSpecError as e:
            if self.logger:
                self.logger.log_error(
                    f"Invalid SSH info format, skipping host #{position}",
                    context=e.context,
                )
            return DeploymentOutcome.skipped(
                invalid_entry_label(position), INVALID_SPEC_REASON
            )

        if self.logger:
            host_log = self.logger.for_host(target.masked_host)
            for key, value in target.describe().items():
                host_log.info(f"{key}: {value}")

        return self.release_service.deploy(target, plan)

    def run(self, host_specs: Sequence[str], plan: DeploymentPlan) -> DeploymentReport:
        """
        Deploy the plan to every host entry, in order.

        Args:
            host_specs: Raw host spec tokens
            plan: Deployment plan for the run

        Returns:
            DeploymentReport with one outcome per entry, in input order
        """
        report = DeploymentReport()
        entries = list(enumerate(host_specs, start=1))

        if self.parallel == 1 or len(entries) < 2:
            for position, token in entries:
                report.add(self.deploy_entry(position, token, plan))
            return report

        with ThreadPoolExecutor(max_workers=self.parallel) as executor:
            outcomes: List[DeploymentOutcome] = list(
                executor.map(
                    lambda entry: self.deploy_entry(entry[0], entry[1], plan), entries
                )
            )
        for outcome in outcomes:
            report.add(outcome)
        return report
