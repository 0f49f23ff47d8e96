"""
Release Linker Services Layer

Transport, release lifecycle and orchestration used by the CLI commands.
"""

from .archive_service import ArchiveService
from .deployment_service import DeploymentOrchestrator
from .host_parser import HostSpecParser, split_host_specs
from .release_service import ReleaseService
from .remote_commands import RemoteCommandBuilder
from .ssh_service import SSHService
from .upload_service import UploadService

__all__ = [
    "ArchiveService",
    "DeploymentOrchestrator",
    "HostSpecParser",
    "split_host_specs",
    "ReleaseService",
    "RemoteCommandBuilder",
    "SSHService",
    "UploadService",
]
