"""Error taxonomy for cluster-manager.

Every failure is terminal for the current invocation. The CLI maps each
class to a process exit code through its ``exit_code`` attribute.
"""
from typing import List, Optional


class ClusterManagerError(Exception):
    """Base class for all cluster-manager errors."""
    exit_code: int = 1


class ConfigError(ClusterManagerError):
    """Missing credentials or invalid configuration."""


class UsageError(ClusterManagerError):
    """Unknown command or bad arguments."""


class NotFoundError(ClusterManagerError):
    """A named resource does not exist in the cluster."""


class TransportError(ClusterManagerError):
    """The cluster-control binary failed or could not be reached."""

    def __init__(self, message: str, command: Optional[List[str]] = None, output: str = ""):
        super().__init__(message)
        self.command = command or []
        self.output = output

    def __str__(self) -> str:
        message = super().__str__()
        if self.output:
            return f"{message}, output: {self.output}"
        return message


class TransportTimeout(TransportError):
    """The cluster-control binary did not finish within the configured timeout."""
