"""Cluster health aggregation over resource listings."""
import logging
from typing import Iterable, Optional

from .models import HealthReport, ResourceSummary

logger = logging.getLogger("cluster_manager.health")

READY_MARKER = "Ready"
NOT_READY_MARKER = "NotReady"
RUNNING_MARKER = "Running"


class HealthAggregator:
    """Computes ready/total counts for nodes, pods and namespaces.

    A node counts as ready when its status text contains the ready marker and
    not the not-ready marker, so ``Ready,SchedulingDisabled`` is ready. A pod
    counts as ready when its phase equals the running marker.
    """

    def __init__(
        self,
        ready_marker: str = READY_MARKER,
        not_ready_marker: str = NOT_READY_MARKER,
        running_marker: str = RUNNING_MARKER,
    ):
        self.ready_marker = ready_marker
        self.not_ready_marker = not_ready_marker
        self.running_marker = running_marker

    def node_ready(self, node: ResourceSummary) -> bool:
        return self.ready_marker in node.status and self.not_ready_marker not in node.status

    def pod_ready(self, pod: ResourceSummary) -> bool:
        return pod.phase == self.running_marker

    def aggregate_nodes(self, nodes: Iterable[ResourceSummary]) -> HealthReport:
        report = HealthReport(scope="nodes")
        for node in nodes:
            self._count(report, node, self.node_ready(node))
        return report

    def aggregate_pods(self, pods: Iterable[ResourceSummary], scope: str = "pods") -> HealthReport:
        report = HealthReport(scope=scope)
        for pod in pods:
            self._count(report, pod, self.pod_ready(pod))
        return report

    def aggregate_namespace(self, namespace: str, pods: Iterable[ResourceSummary]) -> HealthReport:
        """Aggregate the pods of one namespace, ignoring pods from any other."""
        return self.aggregate_pods(
            (pod for pod in pods if pod.namespace == namespace),
            scope=namespace,
        )

    def failed_namespace(self, namespace: str, error: Exception) -> HealthReport:
        """Report for a namespace whose listing could not be fetched."""
        logger.warning("Could not check namespace %s: %s", namespace, error)
        return HealthReport(scope=namespace, error=str(error))

    @staticmethod
    def _count(report: HealthReport, resource: ResourceSummary, ready: bool) -> None:
        report.total += 1
        if ready:
            report.ready += 1
        else:
            report.not_ready.append(_qualified_name(resource.namespace, resource.name))


def _qualified_name(namespace: Optional[str], name: str) -> str:
    if namespace:
        return f"{namespace}/{name}"
    return name
