"""
Kubernetes Cluster Manager

Command line operations for a Kubernetes cluster on top of kubectl:
cluster information, health checks, deployment scaling and restarts,
etcd snapshots and pod logs.
"""

__version__ = "0.1.0"
