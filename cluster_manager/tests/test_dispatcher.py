import json

import pytest

from cluster_manager.config import ClusterManagerConfig
from cluster_manager.dispatcher import CommandDispatcher, DispatchState
from cluster_manager.errors import ConfigError, NotFoundError, TransportError
from cluster_manager.models import (
    ActionResult,
    LogsRequest,
    ResourceKind,
    ResourceSummary,
    ScaleRequest,
    SnapshotResult,
)
from cluster_manager.reporting import JsonReporter, TextReporter


def summary(kind, name, status, namespace=None, phase=None):
    return ResourceSummary(kind=kind, name=name, namespace=namespace, phase=phase or status, status=status)


class FakeClient:
    """Records calls; ``failures`` maps an operation name to the error it raises."""

    def __init__(self, failures=None):
        self.calls = []
        self.failures = failures or {}
        self.nodes = [
            summary(ResourceKind.NODE, "node-a", "Ready"),
            summary(ResourceKind.NODE, "node-b", "NotReady"),
        ]
        self.pods = [
            summary(ResourceKind.POD, "coredns", "Running", namespace="kube-system"),
            summary(ResourceKind.POD, "speaker", "CrashLoopBackOff", namespace="metallb-system", phase="Running"),
            summary(ResourceKind.POD, "web", "Pending", namespace="default"),
        ]

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.failures:
            raise self.failures[name]

    def current_context(self):
        self._call("current_context")
        return "test-context"

    def list_nodes(self):
        self._call("list_nodes")
        return self.nodes

    def list_pods(self, namespace=None):
        self._call("list_pods", namespace)
        if namespace is not None and ("list_pods", namespace) in self.failures:
            raise self.failures[("list_pods", namespace)]
        return [p for p in self.pods if namespace is None or p.namespace == namespace]

    def list_services(self):
        self._call("list_services")
        return [summary(ResourceKind.SERVICE, "kubernetes", "ClusterIP 10.43.0.1", namespace="default")]

    def scale_deployment(self, req):
        self._call("scale_deployment", req)
        return ActionResult("scale", req.namespace, req.name,
                            f"Successfully scaled deployment {req.namespace}/{req.name} to {req.replicas} replicas")

    def restart_deployment(self, req):
        self._call("restart_deployment", req)
        return ActionResult("restart", req.namespace, req.name,
                            f"Successfully restarted deployment {req.namespace}/{req.name}")

    def snapshot_store(self):
        self._call("snapshot_store")
        return SnapshotResult(pod="etcd-0", path="/tmp/backup.db", output="Snapshot saved")

    def fetch_logs(self, req):
        self._call("fetch_logs", req)
        return "hello\nworld\n"


@pytest.fixture
def fake_client():
    return FakeClient()


def make_dispatcher(client, reporter=None, **config):
    return CommandDispatcher(client, reporter or TextReporter(), config=ClusterManagerConfig(**config))


def test_unknown_command_never_touches_client(fake_client, capsys):
    dispatcher = make_dispatcher(fake_client)
    assert dispatcher.dispatch("destroy", []) == 1
    assert fake_client.calls == []
    assert dispatcher.state == DispatchState.FAILED

    out, err = capsys.readouterr()
    assert "Unknown command: destroy" in err
    for name in ("info", "health", "scale", "restart", "backup", "logs", "help"):
        assert name in out


def test_scale(fake_client, capsys):
    dispatcher = make_dispatcher(fake_client)
    assert dispatcher.dispatch("scale", ["ns", "web-app", "3"]) == 0
    assert fake_client.calls == [("scale_deployment", ScaleRequest("ns", "web-app", 3))]
    assert dispatcher.state == DispatchState.DONE
    assert "Successfully scaled deployment ns/web-app to 3 replicas" in capsys.readouterr().out


def test_scale_to_zero(fake_client):
    assert make_dispatcher(fake_client).dispatch("scale", ["ns", "web-app", "0"]) == 0
    assert fake_client.calls[0][1].replicas == 0


@pytest.mark.parametrize("args", [
    ["ns", "web-app", "-1"],
    ["ns", "web-app", "three"],
    ["ns", "web-app"],
    ["ns", "web-app", "3", "extra"],
    ["", "web-app", "3"],
])
def test_scale_validation_happens_before_any_call(fake_client, capsys, args):
    assert make_dispatcher(fake_client).dispatch("scale", args) == 1
    assert fake_client.calls == []
    assert "Usage: cluster-manager scale <namespace> <deployment> <replicas>" in capsys.readouterr().out


def test_unknown_command_prints_full_usage(fake_client, capsys):
    assert make_dispatcher(fake_client).dispatch("destroy", []) == 1
    out = capsys.readouterr().out
    assert "Kubernetes Cluster Manager" in out
    assert "Usage: cluster-manager scale" not in out


def test_restart(fake_client):
    assert make_dispatcher(fake_client).dispatch("restart", ["ns", "web-app"]) == 0
    assert fake_client.calls[0][0] == "restart_deployment"


def test_logs_missing_arguments(fake_client, capsys):
    assert make_dispatcher(fake_client).dispatch("logs", ["ns"]) == 1
    assert fake_client.calls == []
    assert "Usage: cluster-manager logs <namespace> <pod> [lines]" in capsys.readouterr().out


def test_logs_default_and_explicit_lines(fake_client, capsys):
    dispatcher = make_dispatcher(fake_client)
    assert dispatcher.dispatch("logs", ["ns", "web-1"]) == 0
    assert dispatcher.dispatch("logs", ["ns", "web-1", "50"]) == 0
    assert fake_client.calls == [
        ("fetch_logs", LogsRequest("ns", "web-1", 100)),
        ("fetch_logs", LogsRequest("ns", "web-1", 50)),
    ]
    out = capsys.readouterr().out
    assert "Showing last 100 lines of logs for ns/web-1" in out
    assert "hello\nworld" in out


def test_commands_without_arguments_reject_extras(fake_client):
    assert make_dispatcher(fake_client).dispatch("backup", ["now"]) == 1
    assert fake_client.calls == []


def test_help_never_fails(fake_client, capsys):
    dispatcher = make_dispatcher(fake_client)
    assert dispatcher.dispatch("help", []) == 0
    assert dispatcher.dispatch("help", ["anything"]) == 0
    assert fake_client.calls == []
    assert "Kubernetes Cluster Manager" in capsys.readouterr().out


def test_info_reports_sections_in_order(fake_client, capsys):
    assert make_dispatcher(fake_client).dispatch("info", []) == 0
    assert [c[0] for c in fake_client.calls] == ["current_context", "list_nodes", "list_pods", "list_services"]
    out = capsys.readouterr().out
    assert "Context: test-context" in out
    assert out.index("Nodes:") < out.index("Pods:") < out.index("Services:")


def test_info_keeps_earlier_sections_on_failure(capsys):
    client = FakeClient(failures={"list_services": TransportError("kubectl exited with status 1")})
    dispatcher = make_dispatcher(client)
    assert dispatcher.dispatch("info", []) == 1
    assert dispatcher.state == DispatchState.FAILED

    out, err = capsys.readouterr()
    assert "Nodes:" in out and "node-a" in out
    assert "Pods:" in out and "coredns" in out
    assert "Services:" not in out
    assert "Failed to get cluster info: kubectl exited with status 1" in err


def test_info_with_unreadable_context(capsys):
    client = FakeClient(failures={"current_context": ConfigError("Invalid kube-config file. No configuration found.")})
    assert make_dispatcher(client).dispatch("info", []) == 0
    assert [c[0] for c in client.calls] == ["current_context", "list_nodes", "list_pods", "list_services"]
    out = capsys.readouterr().out
    assert "Context: <unknown>" in out
    assert "node-a" in out


def test_health(fake_client, capsys):
    assert make_dispatcher(fake_client).dispatch("health", []) == 0
    out = capsys.readouterr().out
    assert "Node Health: 1/2 nodes ready" in out
    assert "Pod Health: 2/3 pods running" in out
    assert "Namespace kube-system: 1/1 pods ready" in out
    assert "Namespace metallb-system: 1/1 pods ready" in out
    assert "Namespace traefik: 0/0 pods ready" in out


def test_health_continues_past_missing_namespace(capsys):
    client = FakeClient(failures={("list_pods", "traefik"): NotFoundError('namespaces "traefik" not found')})
    dispatcher = make_dispatcher(client)
    assert dispatcher.dispatch("health", []) == 0
    assert dispatcher.state == DispatchState.DONE
    out = capsys.readouterr().out
    assert 'Warning: Could not check namespace traefik: namespaces "traefik" not found' in out
    assert "Namespace kube-system: 1/1 pods ready" in out
    assert out.index("kube-system:") < out.index("metallb-system:") < out.index("traefik:")


def test_health_uses_configured_namespaces(fake_client, capsys):
    dispatcher = make_dispatcher(fake_client, critical_namespaces=["default"])
    assert dispatcher.dispatch("health", []) == 0
    namespace_calls = [c[1] for c in fake_client.calls if c[0] == "list_pods" and c[1] is not None]
    assert namespace_calls == ["default"]
    assert "Namespace default: 0/1 pods ready" in capsys.readouterr().out


def test_health_continues_past_failed_namespace(capsys):
    client = FakeClient(failures={("list_pods", "metallb-system"): TransportError("forbidden")})
    assert make_dispatcher(client).dispatch("health", []) == 0
    out = capsys.readouterr().out
    assert "Warning: Could not check namespace metallb-system: forbidden" in out
    assert "Namespace traefik: 0/0 pods ready" in out


def test_health_node_failure_is_fatal(capsys):
    client = FakeClient(failures={"list_nodes": TransportError("unreachable")})
    assert make_dispatcher(client).dispatch("health", []) == 1
    assert "Failed to check cluster health: unreachable" in capsys.readouterr().err


def test_failure_message_names_the_target(capsys):
    client = FakeClient(failures={"scale_deployment": NotFoundError('deployments.apps "web-app" not found')})
    assert make_dispatcher(client).dispatch("scale", ["ns", "web-app", "3"]) == 1
    err = capsys.readouterr().err
    assert 'Failed to scale deployment ns/web-app: deployments.apps "web-app" not found' in err


def test_backup(fake_client, capsys):
    assert make_dispatcher(fake_client).dispatch("backup", []) == 0
    assert "etcd-0:/tmp/backup.db" in capsys.readouterr().out


def test_json_health_report(fake_client, capsys):
    assert make_dispatcher(fake_client, reporter=JsonReporter()).dispatch("health", []) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["nodes"]["ready"] == 1
    assert report["nodes"]["total"] == 2
    assert report["nodes"]["not_ready"] == ["node-b"]
    assert [ns["scope"] for ns in report["namespaces"]] == ["kube-system", "metallb-system", "traefik"]


def test_json_error(capsys):
    client = FakeClient(failures={"snapshot_store": NotFoundError("no etcd pods found")})
    assert make_dispatcher(client, reporter=JsonReporter()).dispatch("backup", []) == 1
    assert json.loads(capsys.readouterr().err) == {"error": "Failed to create backup: no etcd pods found"}
