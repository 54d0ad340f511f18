"""
Data models for cluster-manager.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .errors import UsageError

DEFAULT_LOG_LINES = 100


class ResourceKind(str, Enum):
    """Kinds of cluster objects returned by a listing."""
    NODE = 'node'
    POD = 'pod'
    SERVICE = 'service'


@dataclass(frozen=True)
class CredentialLocation:
    """Path to the kubeconfig used for every cluster call."""
    path: str


@dataclass(frozen=True)
class ResourceSummary:
    """One cluster object from a listing."""
    kind: ResourceKind
    name: str
    phase: str
    status: str
    namespace: Optional[str] = None
    details: Dict[str, str] = field(default_factory=dict)


@dataclass
class HealthReport:
    """Ready/total counts over a scope (nodes, pods, or one namespace)."""
    scope: str
    ready: int = 0
    total: int = 0
    not_ready: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.ready / self.total


@dataclass
class ClusterHealth:
    """Node, pod and per-namespace health in configured order."""
    nodes: HealthReport
    pods: HealthReport
    namespaces: List[HealthReport] = field(default_factory=list)


def _require_identifier(label: str, value: str) -> None:
    if not value or not value.strip():
        raise UsageError(f"{label} must not be empty")


def _require_count(label: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise UsageError(f"{label} must be an integer, got {value!r}")
    if value < 0:
        raise UsageError(f"{label} must be >= 0, got {value}")


@dataclass(frozen=True)
class ScaleRequest:
    """Scale a deployment to a fixed replica count."""
    namespace: str
    name: str
    replicas: int

    def __post_init__(self):
        _require_identifier("namespace", self.namespace)
        _require_identifier("deployment", self.name)
        _require_count("replicas", self.replicas)


@dataclass(frozen=True)
class RestartRequest:
    """Trigger a rolling restart of a deployment."""
    namespace: str
    name: str

    def __post_init__(self):
        _require_identifier("namespace", self.namespace)
        _require_identifier("deployment", self.name)


@dataclass(frozen=True)
class LogsRequest:
    """Tail the last ``lines`` lines of a pod's logs."""
    namespace: str
    pod: str
    lines: int = DEFAULT_LOG_LINES

    def __post_init__(self):
        _require_identifier("namespace", self.namespace)
        _require_identifier("pod", self.pod)
        _require_count("lines", self.lines)


@dataclass
class ActionResult:
    """Outcome of a mutating operation."""
    action: str
    namespace: str
    name: str
    message: str
    output: str = ""


@dataclass
class SnapshotResult:
    """A store snapshot written inside the store pod."""
    pod: str
    path: str
    output: str = ""


@dataclass
class LogsResult:
    request: LogsRequest
    text: str
