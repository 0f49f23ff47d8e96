"""
Release Linker Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .host import (
    Credential,
    HostTarget,
    KeyBased,
    Password,
    mask_host,
)
from .plan import (
    ArchiveResult,
    DeploymentPlan,
)
from .results import (
    DeploymentOutcome,
    DeploymentReport,
    DeploymentStep,
    OutcomeStatus,
    SSHResult,
    UploadResult,
)

__all__ = [
    # Hosts
    "Credential",
    "HostTarget",
    "KeyBased",
    "Password",
    "mask_host",
    # Plan
    "ArchiveResult",
    "DeploymentPlan",
    # Results
    "DeploymentOutcome",
    "DeploymentReport",
    "DeploymentStep",
    "OutcomeStatus",
    "SSHResult",
    "UploadResult",
]
