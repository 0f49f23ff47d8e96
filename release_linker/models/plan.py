"""
Deployment Plan Models

Dataclass models for the per-run deployment plan and the local artifact.
"""

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from release_linker.constants import ACTIVE_LINK_NAME, RELEASES_DIR_NAME


@dataclass(frozen=True)
class ArchiveResult:
    """Packaged artifact produced for the run."""

    path: Path
    size_bytes: int

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def size_mb(self) -> float:
        """Artifact size in megabytes."""
        return self.size_bytes / (1024 * 1024)

    def __repr__(self) -> str:
        return f"ArchiveResult(file={self.file_name}, size={self.size_mb:.2f}MB)"


@dataclass(frozen=True)
class DeploymentPlan:
    """
    Everything a host pipeline needs to know about the release.

    All remote paths are derived from the plan and are identical for
    every host in the run.
    """

    project_name: str
    version: str
    remote_base_dir: str
    local_artifact_path: Path
    artifact_file_name: str
    post_deploy_command: Optional[str] = None

    @property
    def remote_app_dir(self) -> str:
        return posixpath.join(self.remote_base_dir, self.project_name)

    @property
    def remote_releases_dir(self) -> str:
        return posixpath.join(self.remote_app_dir, RELEASES_DIR_NAME)

    @property
    def remote_release_dir(self) -> str:
        return posixpath.join(self.remote_releases_dir, self.version)

    @property
    def remote_artifact_path(self) -> str:
        return posixpath.join(self.remote_release_dir, self.artifact_file_name)

    @property
    def remote_active_link(self) -> str:
        return posixpath.join(self.remote_app_dir, ACTIVE_LINK_NAME)

    @property
    def remote_staging_link(self) -> str:
        """Temporary link renamed over the active link during cutover."""
        return posixpath.join(
            self.remote_app_dir, f".{ACTIVE_LINK_NAME}.{self.version}.tmp"
        )

    @property
    def has_post_deploy_command(self) -> bool:
        return bool(self.post_deploy_command and self.post_deploy_command.strip())

    @classmethod
    def from_archive(
        cls,
        project_name: str,
        version: str,
        remote_base_dir: str,
        archive: ArchiveResult,
        post_deploy_command: Optional[str] = None,
    ) -> "DeploymentPlan":
        """Create a plan for an already packaged artifact."""
        return cls(
            project_name=project_name,
            version=version,
            remote_base_dir=remote_base_dir,
            local_artifact_path=archive.path,
            artifact_file_name=archive.file_name,
            post_deploy_command=post_deploy_command,
        )

    def describe(self) -> dict:
        """Key/value summary for the run banner."""
        return {
            "Project name": self.project_name,
            "Project version": self.version,
            "Package file name": self.artifact_file_name,
            "Local package path": str(self.local_artifact_path),
            "Remote deploy base dir": self.remote_base_dir,
            "Remote project dir": self.remote_app_dir,
            "Remote release dir": self.remote_release_dir,
            "Remote package path": self.remote_artifact_path,
            "Remote symlink path": self.remote_active_link,
            "Post deploy command": self.post_deploy_command or "None",
        }

    def __repr__(self) -> str:
        return f"DeploymentPlan(project={self.project_name}, version={self.version})"
