"""
Result Models

Dataclass models for transport results and per-host deployment outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OutcomeStatus(Enum):
    """Final status of one host entry."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class DeploymentStep(Enum):
    """Steps of the per-host release pipeline, in execution order."""

    PRECONDITION = "precondition"
    UPLOAD = "upload"
    EXTRACT = "extract"
    ACTIVATE = "activate"
    POST_DEPLOY = "post_deploy"


@dataclass
class SSHResult:
    """Result of an SSH command execution."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    host: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if SSH command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if SSH command failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"SSHResult(host={self.host}, returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"


@dataclass
class UploadResult:
    """Result of an upload, across all attempts."""

    success: bool
    attempts: int
    host: str = ""
    error: str = ""
    duration_seconds: float = 0.0

    def __repr__(self) -> str:
        return f"UploadResult(host={self.host}, success={self.success}, attempts={self.attempts})"


@dataclass(frozen=True)
class DeploymentOutcome:
    """Outcome of one host entry. Never mutated after creation."""

    label: str
    status: OutcomeStatus
    reason: str = ""
    step: Optional[DeploymentStep] = None
    activated: bool = False
    upload_attempts: int = 0
    duration_seconds: float = 0.0

    @classmethod
    def success(cls, label: str, **kwargs) -> "DeploymentOutcome":
        return cls(label=label, status=OutcomeStatus.SUCCESS, activated=True, **kwargs)

    @classmethod
    def skipped(cls, label: str, reason: str) -> "DeploymentOutcome":
        return cls(label=label, status=OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(
        cls, label: str, step: DeploymentStep, reason: str, **kwargs
    ) -> "DeploymentOutcome":
        return cls(
            label=label, status=OutcomeStatus.FAILED, step=step, reason=reason, **kwargs
        )

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "host": self.label,
            "status": self.status.value,
            "step": self.step.value if self.step else None,
            "reason": self.reason,
            "activated": self.activated,
            "upload_attempts": self.upload_attempts,
            "duration_seconds": round(self.duration_seconds, 2),
        }

    def __repr__(self) -> str:
        step = f", step={self.step.value}" if self.step else ""
        return f"DeploymentOutcome(host={self.label}, status={self.status.value}{step})"


@dataclass
class DeploymentReport:
    """Ordered, append-only log of host outcomes for one run."""

    outcomes: List[DeploymentOutcome] = field(default_factory=list)

    def add(self, outcome: DeploymentOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def is_success(self) -> bool:
        """True only when every entry deployed successfully."""
        return bool(self.outcomes) and all(o.is_success for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.is_success else 1

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.is_success,
            "summary": {
                "total": len(self.outcomes),
                "succeeded": self.succeeded,
                "failed": self.failed,
                "skipped": self.skipped,
            },
            "hosts": [outcome.to_dict() for outcome in self.outcomes],
        }

    def __repr__(self) -> str:
        return f"DeploymentReport(total={len(self.outcomes)}, succeeded={self.succeeded}, failed={self.failed}, skipped={self.skipped})"
