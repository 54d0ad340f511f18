"""Configuration management for cluster-manager.

Configuration is loaded from multiple sources with the following precedence:
1. Explicitly passed overrides
2. Environment variables
3. Configuration file
4. Default values
"""
import os
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .models import CredentialLocation

logger = logging.getLogger("cluster_manager.config")

ENV_PREFIX = "CLUSTER_MANAGER_"

# Default configuration paths
DEFAULT_CONFIG_PATHS = [
    Path("/etc/cluster-manager/config.yaml"),
    Path("~/.config/cluster-manager/config.yaml"),
    Path("cluster-manager.yaml"),
]

# Environment variable suffix -> config field
ENV_FIELDS = {
    "KUBECTL": "kubectl",
    "KUBECONFIG": "kubeconfig",
    "TIMEOUT": "command_timeout",
    "CRITICAL_NAMESPACES": "critical_namespaces",
    "STORE_NAMESPACE": "store_namespace",
    "STORE_SELECTOR": "store_selector",
    "SNAPSHOT_PATH": "snapshot_path",
    "SNAPSHOT_ARGS": "snapshot_args",
    "LOG_LEVEL": "log_level",
    "LOG_FORMAT": "log_format",
}


def _split_list(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class ClusterManagerConfig(BaseModel):
    """cluster-manager configuration with sensible defaults."""
    home: Optional[str] = Field(
        default=None,
        description="Home directory used to locate the kubeconfig"
    )
    kubeconfig: Optional[str] = Field(
        default=None,
        description="Explicit kubeconfig path (overrides <home>/.kube/config)"
    )
    kubectl: str = Field(
        default="kubectl",
        description="Cluster-control binary"
    )
    command_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout in seconds for each kubectl call"
    )
    critical_namespaces: List[str] = Field(
        default_factory=lambda: ["kube-system", "metallb-system", "traefik"],
        description="Namespaces checked individually by the health command"
    )
    store_namespace: str = Field(
        default="kube-system",
        description="Namespace holding the etcd pod"
    )
    store_selector: str = Field(
        default="component=etcd",
        description="Label selector for the etcd pod"
    )
    snapshot_path: str = Field(
        default="/tmp/backup.db",
        description="Snapshot file path inside the etcd pod"
    )
    snapshot_args: List[str] = Field(
        default_factory=list,
        description="Extra etcdctl arguments (endpoints, certificates)"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Logging format string"
    )

    model_config = {"extra": "ignore"}

    @field_validator("critical_namespaces", "snapshot_args", mode="before")
    @classmethod
    def split_comma_list(cls, v: Any) -> Any:
        """Accept comma separated strings from the environment."""
        return _split_list(v)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @classmethod
    def load(
        cls,
        config_path: Optional[Union[str, Path]] = None,
        env: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ) -> 'ClusterManagerConfig':
        """Load configuration from file, environment variables and overrides."""
        if env is None:
            # Load environment variables from .env file if it exists
            load_dotenv()
            env = os.environ

        if config_path is None and env.get(f"{ENV_PREFIX}CONFIG"):
            config_path = env[f"{ENV_PREFIX}CONFIG"]

        config_data: Dict[str, Any] = {}
        if config_path:
            path = Path(config_path).expanduser().absolute()
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            config_data = cls._load_config_file(path)
        else:
            for path in DEFAULT_CONFIG_PATHS:
                path = path.expanduser().absolute()
                if path.exists():
                    config_data = cls._load_config_file(path)
                    break

        if env.get("HOME"):
            config_data["home"] = env["HOME"]
        for suffix, name in ENV_FIELDS.items():
            value = env.get(f"{ENV_PREFIX}{suffix}")
            if value:
                config_data[name] = value

        config_data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @classmethod
    def _load_config_file(cls, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML file."""
        logger.debug("Loading config from %s", path)
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def credentials(self) -> CredentialLocation:
        """Resolve and check the kubeconfig location.

        Raises:
            ConfigError: if no home directory is known or the file is absent
        """
        if self.kubeconfig:
            path = Path(self.kubeconfig).expanduser()
        elif self.home:
            path = Path(self.home) / ".kube" / "config"
        else:
            raise ConfigError("HOME is not set; cannot locate kubeconfig")

        if not path.is_file():
            raise ConfigError(f"kubeconfig not found at {path}")
        return CredentialLocation(path=str(path))
