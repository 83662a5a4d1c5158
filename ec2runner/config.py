"""Runner configuration loading.

Every field defaults to the values the runner was first written against, so an
empty or missing runner.yaml provisions the stock t2.micro runner.
"""

import logging
import os
import sys
from dataclasses import dataclass, field

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "runner.yaml"
TRIGGER_MODES = ("always", "content")


@dataclass
class InstanceConfig:
    instance_type: str = "t2.micro"
    ami: str = "ami-0b0dcb5067f052a63"
    ssh_user: str = "ec2-user"


@dataclass
class NetworkConfig:
    description: str = "SSH and DNS"
    ingress: list[dict] | None = None  # None = SSH + DNS defaults
    egress: list[dict] | None = None  # None = allow all


@dataclass
class PackageConfig:
    source_dir: str = ".."  # tree to archive
    archive: str = "server.tar.gz"  # local archive path, relative to cwd
    excludes: list[str] = field(default_factory=lambda: [".bundle", "infrastructure"])


@dataclass
class InstallConfig:
    remote_dir: str = "server"
    script: str = "install.sh"
    args: list[str] = field(default_factory=lambda: ["root"])


@dataclass
class RunnerConfig:
    """All settings for one provisioning run."""

    project: str = "ec2-runner"
    stack: str = "dev"
    region: str = "us-east-1"
    rsa_bits: int = 4096
    triggers: str = "always"
    instance: InstanceConfig = field(default_factory=InstanceConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    package: PackageConfig = field(default_factory=PackageConfig)
    install: InstallConfig = field(default_factory=InstallConfig)

    @property
    def archive_name(self) -> str:
        return os.path.basename(self.package.archive)

    @classmethod
    def from_dict(cls, data: dict | None) -> "RunnerConfig":
        """Build a config from parsed YAML. Unknown keys are ignored."""
        data = data or {}
        config = cls(
            project=data.get("project", cls.project),
            stack=str(data.get("stack", cls.stack)),
            region=data.get("region", cls.region),
            rsa_bits=int(data.get("rsa_bits", cls.rsa_bits)),
            triggers=data.get("triggers", cls.triggers),
            instance=_section(InstanceConfig, data.get("instance")),
            network=_section(NetworkConfig, data.get("network")),
            package=_section(PackageConfig, data.get("package")),
            install=_section(InstallConfig, data.get("install")),
        )
        config.package.source_dir = _expand_path(config.package.source_dir)
        config.package.archive = _expand_path(config.package.archive)
        if config.triggers not in TRIGGER_MODES:
            raise ValueError(f"Unknown triggers mode '{config.triggers}'. Expected one of: {', '.join(TRIGGER_MODES)}")
        return config


def _section(cls, values):
    if not values:
        return cls()
    if not isinstance(values, dict):
        raise ValueError(f"section must be a mapping, got {type(values).__name__}")
    known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
    return cls(**known)


def _expand_path(path: str) -> str:
    """Expand user home directory and environment variables in path."""
    return os.path.expanduser(os.path.expandvars(path))


def load_config(config_path: str | None = None) -> RunnerConfig:
    """Load a RunnerConfig from a YAML file.

    With no path, runner.yaml in the working directory is used if present,
    otherwise the defaults. An explicit path that does not exist is an error.
    """
    if config_path is None:
        if not os.path.isfile(DEFAULT_CONFIG_PATH):
            logger.debug(f"No {DEFAULT_CONFIG_PATH} found, using defaults")
            return RunnerConfig()
        config_path = DEFAULT_CONFIG_PATH

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.error(f"Error: Config file '{config_path}' not found.")
        sys.exit(1)
    except yaml.YAMLError as e:
        logger.error(f"Error parsing YAML config: {e}")
        sys.exit(1)

    if data is not None and not isinstance(data, dict):
        logger.error(f"Error: Config file '{config_path}' must contain a mapping.")
        sys.exit(1)

    try:
        return RunnerConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.error(f"Error in config '{config_path}': {e}")
        sys.exit(1)
