"""
Remote Command Builder

Shell command text for each release step. Every path or name taken from
the plan is quoted with shlex.quote; only the operator supplied post deploy
command is passed through as shell.
"""

from shlex import quote

from release_linker.constants import ACTIVE_LINK_OCCUPIED_EXIT_CODE
from release_linker.models.plan import DeploymentPlan


class RemoteCommandBuilder:
    """Builds remote shell commands for one deployment plan."""

    def __init__(self, plan: DeploymentPlan):
        self.plan = plan

    def prepare_release(self) -> str:
        """Create the release dir and refuse to continue if the link is a real path."""
        release_dir = quote(self.plan.remote_release_dir)
        link = quote(self.plan.remote_active_link)
        return (
            f"mkdir -p {release_dir}; "
            f"if [ -e {link} ] && [ ! -L {link} ]; then "
            f"echo {quote(self.plan.remote_active_link + ' is not a symlink, exiting')} >&2; "
            f"exit {ACTIVE_LINK_OCCUPIED_EXIT_CODE}; "
            f"fi"
        )

    def extract(self) -> str:
        """Unpack the artifact inside the release dir and drop the archive."""
        artifact = quote(self.plan.artifact_file_name)
        return (
            f"cd {quote(self.plan.remote_release_dir)} && "
            f"tar -xzf {artifact} && "
            f"rm -f {artifact}"
        )

    def activate(self) -> str:
        """
        Point the active link at the release dir.

        The new link is created under a temporary name and renamed over the
        active one, so readers always see either the old or the new release.
        """
        staging = quote(self.plan.remote_staging_link)
        return (
            f"ln -sfn {quote(self.plan.remote_release_dir)} {staging} && "
            f"mv -Tf {staging} {quote(self.plan.remote_active_link)}"
        )

    def post_deploy(self) -> str:
        """Run the post deploy command from inside the active release."""
        return f"cd {quote(self.plan.remote_active_link)} && {self.plan.post_deploy_command}"

    def discard_release(self) -> str:
        """Drop the uploaded archive, then the release dir unless it is the live one."""
        release_dir = quote(self.plan.remote_release_dir)
        link = quote(self.plan.remote_active_link)
        return (
            f"rm -f {quote(self.plan.remote_artifact_path)}; "
            f"if [ \"$(readlink {link} || true)\" != {release_dir} ]; then "
            f"rm -rf {release_dir}; "
            f"fi"
        )
