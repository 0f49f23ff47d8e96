"""Configuration management for release linker runs"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import dotenv_values

from release_linker.constants import (
    DEFAULT_REMOTE_DIR,
    DEFAULT_TAR_CONTAIN,
    VERSION_FORMAT,
)
from release_linker.exceptions import ConfigurationError
from release_linker.services.host_parser import split_host_specs

# Setting names, also the environment variable names (plain and INPUT_ prefixed)
SETTINGS = (
    "project_path",
    "project_name",
    "project_version",
    "tar_args",
    "tar_contain",
    "deploy_hosts",
    "remote_dir",
    "post_deploy_cmd",
    "deploy_parallel",
    "keep_failed_release",
    "log_dir",
)

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off", ""}


def default_version() -> str:
    """Sortable timestamp version, e.g. 20240131235959."""
    return datetime.now().strftime(VERSION_FORMAT)


@dataclass
class DeployConfig:
    """Resolved settings for one deployment run"""

    project_path: Path
    project_name: str
    project_version: str
    deploy_hosts: List[str]
    tar_args: str = ""
    tar_contain: str = DEFAULT_TAR_CONTAIN
    remote_dir: str = DEFAULT_REMOTE_DIR
    post_deploy_cmd: Optional[str] = None
    parallel: int = 1
    keep_failed_release: bool = False
    log_dir: Optional[Path] = None
    sources: Dict[str, str] = field(default_factory=dict)

    def describe(self) -> Dict[str, Any]:
        """Key/value summary for the run banner (no host details)."""
        return {
            "Project path": str(self.project_path),
            "Project name": self.project_name,
            "Project version": self.project_version,
            "Package exclude args": self.tar_args or "-",
            "Package include args": self.tar_contain,
            "Host entries": len(self.deploy_hosts),
            "Parallel hosts": self.parallel,
        }


def load_yaml_settings(path: Path) -> Dict[str, Any]:
    """
    Load settings from a YAML deploy file.

    Raises:
        ConfigurationError: If the file is missing or not a mapping
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file: {path}", context=str(e))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {path}", context=str(e))

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file must contain a mapping: {path}",
            context=f"Got {type(data).__name__}",
        )
    return {str(key).lower(): value for key, value in data.items()}


def load_env_file_settings(path: Path) -> Dict[str, Any]:
    """Load settings from a .env file."""
    if not path.is_file():
        raise ConfigurationError(f".env file not found: {path}")
    return {
        key.lower(): value
        for key, value in dotenv_values(path).items()
        if value is not None
    }


def _from_environment(name: str, environ: Mapping[str, str]) -> Optional[str]:
    upper = name.upper()
    for key in (f"INPUT_{upper}", upper):
        value = environ.get(key)
        if value:
            return value
    return None


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def _as_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}")


def _as_hosts(value: Any) -> List[str]:
    if isinstance(value, (list, tuple)):
        tokens: List[str] = []
        for item in value:
            tokens.extend(split_host_specs(str(item)))
        return tokens
    return split_host_specs(str(value))


def _validate_component(name: str, value: str) -> str:
    if not value or value in (".", "..") or "/" in value:
        raise ConfigurationError(
            f"Invalid {name}: {value!r}",
            context="Must be a single, non-empty path component",
        )
    return value


def resolve_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
    env_file: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Merge all configuration sources into a flat dict.

    Precedence: overrides (CLI) > INPUT_<NAME> > <NAME> > YAML file > .env file.
    Values that are None or empty strings do not override lower sources.
    A "_sources" key records where each value came from.
    """
    environ = os.environ if environ is None else environ
    layers = [
        ("cli", dict(overrides or {})),
        ("environment", {name: _from_environment(name, environ) for name in SETTINGS}),
        ("config file", load_yaml_settings(config_file) if config_file else {}),
        (".env file", load_env_file_settings(env_file) if env_file else {}),
    ]

    settings: Dict[str, Any] = {}
    sources: Dict[str, str] = {}
    for name in SETTINGS:
        for source, values in layers:
            value = values.get(name)
            if value is None or (isinstance(value, (str, list, tuple)) and not value):
                continue
            settings[name] = value
            sources[name] = source
            break
    settings["_sources"] = sources
    return settings


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[Path] = None,
    env_file: Optional[Path] = None,
) -> DeployConfig:
    """
    Resolve and validate the run configuration.

    Raises:
        ConfigurationError: On a missing host list or invalid values
    """
    settings = resolve_settings(overrides, environ, config_file, env_file)

    deploy_hosts = _as_hosts(settings.get("deploy_hosts", ""))
    if not deploy_hosts:
        raise ConfigurationError(
            "DEPLOY_HOSTS is empty. Please provide at least one deploy host.",
            context="Format: user:pass@host[:port] or user@host[:port], separated by spaces",
        )

    project_path = Path(settings.get("project_path") or Path.cwd()).expanduser().resolve()
    if not project_path.is_dir():
        raise ConfigurationError(f"Project path does not exist: {project_path}")

    project_name = _validate_component(
        "project name", str(settings.get("project_name") or project_path.name)
    )
    project_version = _validate_component(
        "project version", str(settings.get("project_version") or default_version())
    )

    remote_dir = str(settings.get("remote_dir") or DEFAULT_REMOTE_DIR)

    parallel = _as_int("deploy_parallel", settings.get("deploy_parallel", 1))
    if parallel < 1:
        raise ConfigurationError(f"deploy_parallel must be at least 1, got {parallel}")

    post_deploy_cmd = settings.get("post_deploy_cmd")
    log_dir = settings.get("log_dir")

    return DeployConfig(
        project_path=project_path,
        project_name=project_name,
        project_version=project_version,
        deploy_hosts=deploy_hosts,
        tar_args=str(settings.get("tar_args") or ""),
        tar_contain=str(settings.get("tar_contain") or DEFAULT_TAR_CONTAIN),
        remote_dir=remote_dir,
        post_deploy_cmd=str(post_deploy_cmd) if post_deploy_cmd else None,
        parallel=parallel,
        keep_failed_release=_as_bool(
            "keep_failed_release", settings.get("keep_failed_release", False)
        ),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        sources=settings["_sources"],
    )
