"""Release Linker - Deploy command"""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import click
from rich.console import Console

from release_linker.base import BaseCommand
from release_linker.core.config_loader import DeployConfig, load_config
from release_linker.core.workspace import temporary_workspace
from release_linker.exceptions import HostSpecError
from release_linker.logger import DeployLogger
from release_linker.models.plan import DeploymentPlan
from release_linker.services import (
    ArchiveService,
    DeploymentOrchestrator,
    HostSpecParser,
    ReleaseService,
    SSHService,
    UploadService,
)
from release_linker.services.ssh_service import ensure_local_tools
from release_linker.ui_components import render_report


def required_tools(host_specs: Sequence[str]) -> List[str]:
    """Local binaries needed to deploy to the given host entries."""
    tools = ["tar", "ssh", "rsync"]
    parser = HostSpecParser()
    for token in host_specs:
        try:
            if parser.parse(token).uses_password:
                tools.append("sshpass")
                break
        except HostSpecError:
            continue
    return tools


class DeployCommand(BaseCommand):
    """Package the project and release it to every host."""

    def __init__(
        self,
        overrides: Optional[Dict[str, Any]] = None,
        config_file: Optional[Path] = None,
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        verbose: bool = False,
        json_output: bool = False,
        console: Optional[Console] = None,
    ):
        super().__init__(verbose=verbose, json_output=json_output, console=console)
        self.overrides = overrides or {}
        self.config_file = config_file
        self.env_file = env_file
        self.environ = environ

    def build_orchestrator(
        self, config: DeployConfig, logger: DeployLogger
    ) -> DeploymentOrchestrator:
        """Wire the transport and release services for this run."""
        upload_service = UploadService(
            on_retry=lambda target, attempt, error: logger.for_host(
                target.masked_host
            ).warning(f"Upload attempt {attempt} failed, retrying...")
        )
        release_service = ReleaseService(
            SSHService(),
            upload_service,
            logger=logger,
            keep_failed_release=config.keep_failed_release,
        )
        return DeploymentOrchestrator(
            release_service, logger=logger, parallel=config.parallel
        )

    def execute(self) -> None:
        """Execute deploy command."""
        config = load_config(
            self.overrides,
            environ=self.environ,
            config_file=self.config_file,
            env_file=self.env_file,
        )

        self.show_header(title="Deploy Release", details=config.describe())
        logger = self.init_logger(config.project_name, "deploy", config.log_dir)

        ensure_local_tools(required_tools(config.deploy_hosts))

        with temporary_workspace() as work_dir:
            logger.step("Packaging project")
            archive = ArchiveService().package(
                config.project_path,
                config.project_name,
                config.project_version,
                work_dir,
                tar_args=config.tar_args,
                tar_contain=config.tar_contain,
            )
            logger.success("Project packaging completed")
            logger.info(f"Package file size: {archive.size_mb:.2f} MB")

            plan = DeploymentPlan.from_archive(
                project_name=config.project_name,
                version=config.project_version,
                remote_base_dir=config.remote_dir,
                archive=archive,
                post_deploy_command=config.post_deploy_cmd,
            )
            for key, value in plan.describe().items():
                logger.log(f"{key}: {value}")

            orchestrator = self.build_orchestrator(config, logger)
            report = orchestrator.run(config.deploy_hosts, plan)

        if self.json_output:
            self.output_json(report.to_dict(), exit_code=report.exit_code)
            return

        render_report(report, console=self.console)
        if logger.log_path:
            self.print_dim(f"Logs saved to: {logger.log_path}")
        if not report.is_success:
            raise SystemExit(report.exit_code)


@click.command(name="deploy")
@click.option("-p", "--project-path", type=click.Path(file_okay=False), help="Local project path (default: current directory)")
@click.option("-n", "--project-name", help="Project name (default: project directory name)")
@click.option("-V", "--project-version", help="Release version (default: YYYYMMDDHHMMSS timestamp)")
@click.option("--tar-args", help="Extra tar arguments, e.g. \"--exclude=.git --exclude=node_modules\"")
@click.option("--tar-contain", help="Paths to include in the package (default: '.')")
@click.option("-H", "--host", "hosts", multiple=True, help="Host spec user[:pass]@host[:port], repeatable")
@click.option("-r", "--remote-dir", help="Remote base directory (default: /data/apps)")
@click.option("-c", "--post-deploy-cmd", help="Command run inside the active release after cutover")
@click.option("-j", "--parallel", type=click.IntRange(min=1), help="Hosts deployed at the same time (default: 1)")
@click.option("--keep-failed-release", is_flag=True, default=None, help="Keep partially extracted releases")
@click.option("--log-dir", type=click.Path(file_okay=False), help="Write a log file under this directory")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), help="YAML deploy file")
@click.option("--env-file", type=click.Path(exists=True, dir_okay=False), help=".env file with settings")
@click.option("--verbose", "-v", is_flag=True, help="Show all command output")
@click.option("--json", "json_output", is_flag=True, help="Output the report in JSON format")
def deploy(
    project_path,
    project_name,
    project_version,
    tar_args,
    tar_contain,
    hosts,
    remote_dir,
    post_deploy_cmd,
    parallel,
    keep_failed_release,
    log_dir,
    config_file,
    env_file,
    verbose,
    json_output,
):
    """
    Package the project and release it to every host

    \b
    Examples:
      release-linker deploy -H deploy@10.0.0.5 -H ubuntu:secret@10.0.0.6:2222
      DEPLOY_HOSTS="deploy@web1 deploy@web2" release-linker deploy -c "sudo systemctl reload nginx"

    \b
    Remote layout:
      {remote_dir}/{project}/releases/{version}/   release payload
      {remote_dir}/{project}/website              symlink to the active release
    """
    overrides = {
        "project_path": project_path,
        "project_name": project_name,
        "project_version": project_version,
        "tar_args": tar_args,
        "tar_contain": tar_contain,
        "deploy_hosts": list(hosts),
        "remote_dir": remote_dir,
        "post_deploy_cmd": post_deploy_cmd,
        "deploy_parallel": parallel,
        "keep_failed_release": keep_failed_release,
        "log_dir": log_dir,
    }
    cmd = DeployCommand(
        overrides,
        config_file=Path(config_file) if config_file else None,
        env_file=Path(env_file) if env_file else None,
        verbose=verbose,
        json_output=json_output,
    )
    cmd.run()
