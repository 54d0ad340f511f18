"""kubectl-backed cluster client.

Every operation is a single blocking kubectl call (the store snapshot makes
two) with the kubeconfig passed explicitly. Listings are requested as JSON
and parsed into ResourceSummary objects.
"""
import json
import logging
import subprocess
from typing import Any, Callable, Dict, List, Optional

from kubernetes import config as kube_config
from kubernetes.config.config_exception import ConfigException

from .config import ClusterManagerConfig
from .errors import ConfigError, NotFoundError, TransportError, TransportTimeout
from .models import (
    ActionResult,
    CredentialLocation,
    LogsRequest,
    ResourceKind,
    ResourceSummary,
    RestartRequest,
    ScaleRequest,
    SnapshotResult,
)

logger = logging.getLogger("cluster_manager.client")

NOT_FOUND_MARKERS = ("NotFound", "not found")
ROLE_LABEL_PREFIX = "node-role.kubernetes.io/"


class ClusterClient:
    """Translates cluster operations into kubectl invocations."""

    def __init__(
        self,
        config: ClusterManagerConfig,
        credentials: CredentialLocation,
        runner: Optional[Callable[..., subprocess.CompletedProcess]] = None,
    ):
        self.config = config
        self.credentials = credentials
        self._runner = runner or subprocess.run

    def current_context(self) -> str:
        """Return the name of the active kubeconfig context."""
        try:
            _, active = kube_config.list_kube_config_contexts(config_file=self.credentials.path)
        except ConfigException as e:
            raise ConfigError(f"Failed to read kubeconfig {self.credentials.path}: {e}") from e
        return active["name"]

    def list_nodes(self) -> List[ResourceSummary]:
        items = self._get_items(["get", "nodes", "-o", "json"])
        return [_node_summary(item) for item in items]

    def list_pods(self, namespace: Optional[str] = None) -> List[ResourceSummary]:
        """List pods in ``namespace``, or in all namespaces when it is None."""
        items = self._get_items(["get", "pods", *_scope(namespace), "-o", "json"])
        return [_pod_summary(item) for item in items]

    def list_services(self, namespace: Optional[str] = None) -> List[ResourceSummary]:
        items = self._get_items(["get", "services", *_scope(namespace), "-o", "json"])
        return [_service_summary(item) for item in items]

    def scale_deployment(self, req: ScaleRequest) -> ActionResult:
        logger.info("Scaling deployment %s/%s to %d replicas", req.namespace, req.name, req.replicas)
        output = self._run([
            "scale", "deployment", req.name,
            "-n", req.namespace,
            "--replicas", str(req.replicas),
        ])
        return ActionResult(
            action="scale",
            namespace=req.namespace,
            name=req.name,
            message=f"Successfully scaled deployment {req.namespace}/{req.name} to {req.replicas} replicas",
            output=output.strip(),
        )

    def restart_deployment(self, req: RestartRequest) -> ActionResult:
        """Trigger a rolling restart. Does not wait for the rollout to finish."""
        logger.info("Restarting deployment %s/%s", req.namespace, req.name)
        output = self._run(["rollout", "restart", "deployment", req.name, "-n", req.namespace])
        return ActionResult(
            action="restart",
            namespace=req.namespace,
            name=req.name,
            message=f"Successfully restarted deployment {req.namespace}/{req.name}",
            output=output.strip(),
        )

    def snapshot_store(self) -> SnapshotResult:
        """Save an etcd snapshot inside the first etcd pod found.

        Raises:
            NotFoundError: no pod matches the store selector
            TransportError: the pod lookup or the snapshot command failed
        """
        namespace = self.config.store_namespace
        items = self._get_items([
            "get", "pods", "-n", namespace,
            "-l", self.config.store_selector,
            "-o", "json",
        ])
        if not items:
            raise NotFoundError(
                f"no etcd pods found in namespace {namespace} "
                f"matching {self.config.store_selector}"
            )
        pod = items[0]["metadata"]["name"]
        logger.info("Creating etcd snapshot in pod %s/%s", namespace, pod)

        output = self._run([
            "exec", "-n", namespace, pod, "--",
            "etcdctl", *self.config.snapshot_args,
            "snapshot", "save", self.config.snapshot_path,
        ])
        return SnapshotResult(pod=pod, path=self.config.snapshot_path, output=output.strip())

    def fetch_logs(self, req: LogsRequest) -> str:
        return self._run(["logs", "-n", req.namespace, req.pod, "--tail", str(req.lines)])

    def _get_items(self, args: List[str]) -> List[Dict[str, Any]]:
        output = self._run(args)
        try:
            document = json.loads(output)
        except ValueError as e:
            raise TransportError(
                f"kubectl returned invalid JSON: {e}",
                command=self._command(args),
                output=output[:500],
            ) from e
        if not isinstance(document, dict):
            raise TransportError("kubectl returned an unexpected document", command=self._command(args))
        return document.get("items", [])

    def _command(self, args: List[str]) -> List[str]:
        return [self.config.kubectl, "--kubeconfig", self.credentials.path, *args]

    def _run(self, args: List[str]) -> str:
        """Run kubectl and return stdout, mapping failures to cluster errors."""
        cmd = self._command(args)
        logger.debug("Running: %s", " ".join(cmd))
        try:
            result = self._runner(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.command_timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise TransportTimeout(
                f"kubectl timed out after {self.config.command_timeout:g}s",
                command=cmd,
            ) from e
        except OSError as e:
            raise TransportError(f"failed to run {self.config.kubectl}: {e}", command=cmd) from e

        if result.returncode != 0:
            diagnostics = (result.stderr or result.stdout or "").strip()
            if any(marker in diagnostics for marker in NOT_FOUND_MARKERS):
                raise NotFoundError(diagnostics)
            raise TransportError(
                f"kubectl exited with status {result.returncode}",
                command=cmd,
                output=diagnostics,
            )
        return result.stdout


def _scope(namespace: Optional[str]) -> List[str]:
    if namespace is None:
        return ["-A"]
    return ["-n", namespace]


def _node_summary(item: Dict[str, Any]) -> ResourceSummary:
    metadata = item.get("metadata", {})
    status = item.get("status", {})

    ready = next(
        (c for c in status.get("conditions", []) if c.get("type") == "Ready"),
        None,
    )
    if ready is None:
        phase, text = "Unknown", "Unknown"
    else:
        phase = ready.get("status", "Unknown")
        text = "Ready" if phase == "True" else "NotReady"
    if item.get("spec", {}).get("unschedulable"):
        text += ",SchedulingDisabled"

    roles = sorted(
        label[len(ROLE_LABEL_PREFIX):]
        for label in metadata.get("labels", {})
        if label.startswith(ROLE_LABEL_PREFIX)
    )
    internal_ip = next(
        (a.get("address", "") for a in status.get("addresses", []) if a.get("type") == "InternalIP"),
        "",
    )
    return ResourceSummary(
        kind=ResourceKind.NODE,
        name=metadata.get("name", ""),
        phase=phase,
        status=text,
        details={
            "roles": ",".join(roles) or "<none>",
            "version": status.get("nodeInfo", {}).get("kubeletVersion", ""),
            "internal-ip": internal_ip or "<none>",
        },
    )


def _pod_summary(item: Dict[str, Any]) -> ResourceSummary:
    metadata = item.get("metadata", {})
    status = item.get("status", {})
    phase = status.get("phase", "Unknown")
    containers = status.get("containerStatuses", [])

    text = status.get("reason") or phase
    for container in containers:
        state = container.get("state", {})
        reason = (state.get("waiting") or state.get("terminated") or {}).get("reason")
        if reason:
            text = reason
            break
    if metadata.get("deletionTimestamp"):
        text = "Terminating"

    ready_count = sum(1 for c in containers if c.get("ready"))
    restarts = sum(c.get("restartCount", 0) for c in containers)
    return ResourceSummary(
        kind=ResourceKind.POD,
        name=metadata.get("name", ""),
        namespace=metadata.get("namespace"),
        phase=phase,
        status=text,
        details={
            "ready": f"{ready_count}/{len(containers)}",
            "restarts": str(restarts),
            "node": item.get("spec", {}).get("nodeName") or "<none>",
        },
    )


def _service_summary(item: Dict[str, Any]) -> ResourceSummary:
    metadata = item.get("metadata", {})
    spec = item.get("spec", {})
    service_type = spec.get("type", "ClusterIP")
    cluster_ip = spec.get("clusterIP") or "<none>"

    ports = []
    for port in spec.get("ports", []):
        entry = str(port.get("port", ""))
        if port.get("nodePort"):
            entry += f":{port['nodePort']}"
        ports.append(f"{entry}/{port.get('protocol', 'TCP')}")

    return ResourceSummary(
        kind=ResourceKind.SERVICE,
        name=metadata.get("name", ""),
        namespace=metadata.get("namespace"),
        phase=service_type,
        status=f"{service_type} {cluster_ip}",
        details={"ports": ",".join(ports) or "<none>"},
    )
