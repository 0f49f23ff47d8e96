"""Archive service for packaging the project into a single tarball."""

import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from release_linker.constants import ARCHIVE_SUFFIX, DEFAULT_TAR_CONTAIN
from release_linker.exceptions import PackagingError
from release_linker.models.plan import ArchiveResult


def artifact_file_name(project_name: str, version: str) -> str:
    """Name of the packaged artifact, e.g. shop_20240101120000.tar.gz."""
    return f"{project_name}_{version}{ARCHIVE_SUFFIX}"


class ArchiveService:
    """Builds the release artifact with the system tar."""

    def __init__(self, timeout: Optional[int] = None):
        self.timeout = timeout

    def build_command(
        self,
        output_path: Path,
        tar_args: str = "",
        tar_contain: str = DEFAULT_TAR_CONTAIN,
    ) -> List[str]:
        """
        Build tar argv.

        Args:
            output_path: Archive to create
            tar_args: Extra tar arguments, e.g. "--exclude=.git --exclude=node_modules"
            tar_contain: Space separated paths to include, relative to the project
        """
        includes = shlex.split(tar_contain or "") or [DEFAULT_TAR_CONTAIN]
        return ["tar", "-czf", str(output_path)] + shlex.split(tar_args or "") + includes

    def package(
        self,
        project_path: Union[str, Path],
        project_name: str,
        version: str,
        work_dir: Union[str, Path],
        tar_args: str = "",
        tar_contain: str = DEFAULT_TAR_CONTAIN,
    ) -> ArchiveResult:
        """
        Package the project directory.

        Args:
            project_path: Directory to package (tar runs inside it)
            project_name: Project name used in the artifact name
            version: Release version used in the artifact name
            work_dir: Directory receiving the artifact
            tar_args: Extra tar arguments
            tar_contain: Paths to include

        Returns:
            ArchiveResult with artifact path and size

        Raises:
            PackagingError: If the project dir is missing or tar fails
        """
        project_path = Path(project_path)
        if not project_path.is_dir():
            raise PackagingError(f"Project path does not exist: {project_path}")

        output_path = Path(work_dir) / artifact_file_name(project_name, version)
        try:
            command = self.build_command(output_path, tar_args, tar_contain)
        except ValueError as e:
            raise PackagingError("Invalid tar arguments", context=str(e))

        try:
            result = subprocess.run(
                command,
                cwd=project_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise PackagingError(f"Packaging timed out after {self.timeout}s")
        except OSError as e:
            raise PackagingError("Packaging failed", context=str(e))

        if result.returncode != 0 or not output_path.is_file():
            raise PackagingError(
                "Packaging failed",
                context=(result.stderr or result.stdout).strip() or None,
            )

        return ArchiveResult(path=output_path, size_bytes=output_path.stat().st_size)
