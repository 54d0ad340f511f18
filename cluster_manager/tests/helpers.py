"""Builders for kubectl JSON documents and a fake process runner."""
import json
import subprocess
from typing import Dict, List, Optional

KUBECONFIG = """\
apiVersion: v1
kind: Config
current-context: test-context
clusters:
- name: test-cluster
  cluster:
    server: https://127.0.0.1:6443
contexts:
- name: test-context
  context:
    cluster: test-cluster
    user: test-user
users:
- name: test-user
  user:
    token: test-token
"""


def write_kubeconfig(home) -> str:
    kube_dir = home / ".kube"
    kube_dir.mkdir(parents=True, exist_ok=True)
    path = kube_dir / "config"
    path.write_text(KUBECONFIG)
    return str(path)


def items(*entries) -> str:
    return json.dumps({"apiVersion": "v1", "kind": "List", "items": list(entries)})


def node(name: str, ready: bool = True, unschedulable: bool = False, roles: List[str] = ()) -> Dict:
    return {
        "metadata": {
            "name": name,
            "labels": {f"node-role.kubernetes.io/{role}": "true" for role in roles},
        },
        "spec": {"unschedulable": True} if unschedulable else {},
        "status": {
            "conditions": [
                {"type": "MemoryPressure", "status": "False"},
                {"type": "Ready", "status": "True" if ready else "False"},
            ],
            "addresses": [{"type": "InternalIP", "address": "10.0.0.1"}],
            "nodeInfo": {"kubeletVersion": "v1.29.3"},
        },
    }


def pod(name: str, namespace: str = "default", phase: str = "Running",
        waiting_reason: Optional[str] = None, restarts: int = 0) -> Dict:
    state = {"waiting": {"reason": waiting_reason}} if waiting_reason else {"running": {}}
    return {
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"nodeName": "node-a"},
        "status": {
            "phase": phase,
            "containerStatuses": [
                {"name": "main", "ready": phase == "Running" and not waiting_reason,
                 "restartCount": restarts, "state": state},
            ],
        },
    }


def service(name: str, namespace: str = "default", type_: str = "ClusterIP",
            cluster_ip: str = "10.43.0.10", ports: List[Dict] = ()) -> Dict:
    return {
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"type": type_, "clusterIP": cluster_ip, "ports": list(ports)},
    }


class FakeRunner:
    """Stands in for subprocess.run.

    Responses are matched by substring against the joined command line, in
    the order they were added. Unmatched commands succeed with an empty list.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.responses = []

    def respond(self, pattern: str, stdout: str = "", stderr: str = "", returncode: int = 0,
                raises: Optional[BaseException] = None) -> "FakeRunner":
        self.responses.append((pattern, stdout, stderr, returncode, raises))
        return self

    def __call__(self, cmd, capture_output=False, text=False, timeout=None, check=False):
        self.calls.append(list(cmd))
        line = " ".join(cmd)
        for pattern, stdout, stderr, returncode, raises in self.responses:
            if pattern in line:
                if raises is not None:
                    raise raises
                return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)
        return subprocess.CompletedProcess(cmd, 0, items(), "")

    def commands(self) -> List[str]:
        return [" ".join(call) for call in self.calls]
