"""Rendering of command results as text or JSON."""
import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from enum import Enum
from typing import Any, Dict, List, Sequence

import typer

from .models import (
    ActionResult,
    ClusterHealth,
    HealthReport,
    LogsResult,
    ResourceSummary,
    SnapshotResult,
)


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


class Reporter(ABC):
    """Interface shared by all renderers."""

    def usage(self, text: str) -> None:
        typer.echo(text)

    @abstractmethod
    def context(self, name: str) -> None:
        """Render one result."""

    @abstractmethod
    def section(self, title: str, resources: Sequence[ResourceSummary]) -> None:
        """Render one result."""

    @abstractmethod
    def health(self, health: ClusterHealth) -> None:
        """Render one result."""

    @abstractmethod
    def action(self, result: ActionResult) -> None:
        """Render one result."""

    @abstractmethod
    def snapshot(self, result: SnapshotResult) -> None:
        """Render one result."""

    @abstractmethod
    def logs(self, result: LogsResult) -> None:
        """Render one result."""

    @abstractmethod
    def error(self, message: str) -> None:
        """Render one result."""


class TextReporter(Reporter):
    """Human readable output, close to kubectl's own tables."""

    def context(self, name: str) -> None:
        typer.echo("=== Kubernetes Cluster Information ===")
        typer.echo(f"Context: {name}")

    def section(self, title: str, resources: Sequence[ResourceSummary]) -> None:
        typer.echo(f"\n{title}:")
        if not resources:
            typer.echo("No resources found")
            return
        typer.echo(format_table(resources))

    def health(self, health: ClusterHealth) -> None:
        typer.echo("=== Cluster Health Check ===")
        self._report_line("Node Health", health.nodes, "nodes ready")
        self._report_line("Pod Health", health.pods, "pods running")
        for report in health.namespaces:
            if report.error:
                typer.echo(f"Warning: Could not check namespace {report.scope}: {report.error}")
                continue
            self._report_line(f"Namespace {report.scope}", report, "pods ready")

    def action(self, result: ActionResult) -> None:
        typer.echo(f"✅ {result.message}")

    def snapshot(self, result: SnapshotResult) -> None:
        typer.echo(f"✅ Etcd backup created successfully: {result.pod}:{result.path}")
        if result.output:
            typer.echo(result.output)

    def logs(self, result: LogsResult) -> None:
        req = result.request
        typer.echo(f"Showing last {req.lines} lines of logs for {req.namespace}/{req.pod}")
        typer.echo(result.text.rstrip("\n"))

    def error(self, message: str) -> None:
        typer.echo(f"❌ {message}", err=True)

    @staticmethod
    def _report_line(label: str, report: HealthReport, noun: str) -> None:
        typer.echo(f"{label}: {report.ready}/{report.total} {noun}")
        if report.not_ready:
            typer.echo(f"  not ready: {', '.join(report.not_ready)}")


class JsonReporter(Reporter):
    """One JSON document per rendered result."""

    def context(self, name: str) -> None:
        self._emit({"context": name})

    def section(self, title: str, resources: Sequence[ResourceSummary]) -> None:
        self._emit({"section": title.lower(), "items": [resource_dict(r) for r in resources]})

    def health(self, health: ClusterHealth) -> None:
        self._emit({
            "nodes": health_dict(health.nodes),
            "pods": health_dict(health.pods),
            "namespaces": [health_dict(r) for r in health.namespaces],
        })

    def action(self, result: ActionResult) -> None:
        self._emit(asdict(result))

    def snapshot(self, result: SnapshotResult) -> None:
        self._emit(asdict(result))

    def logs(self, result: LogsResult) -> None:
        self._emit({**asdict(result.request), "text": result.text})

    def error(self, message: str) -> None:
        typer.echo(json.dumps({"error": message}), err=True)

    @staticmethod
    def _emit(payload: Dict[str, Any]) -> None:
        typer.echo(json.dumps(payload, indent=2))


def get_reporter(output: OutputFormat) -> Reporter:
    if output == OutputFormat.JSON:
        return JsonReporter()
    return TextReporter()


def resource_dict(resource: ResourceSummary) -> Dict[str, Any]:
    data = asdict(resource)
    data["kind"] = resource.kind.value
    return data


def health_dict(report: HealthReport) -> Dict[str, Any]:
    data = asdict(report)
    data["ratio"] = round(report.ratio, 4)
    return data


def format_table(resources: Sequence[ResourceSummary]) -> str:
    """Lay resources out in aligned columns, with a NAMESPACE column when namespaced."""
    namespaced = any(r.namespace for r in resources)
    detail_keys: List[str] = []
    for resource in resources:
        for key in resource.details:
            if key not in detail_keys:
                detail_keys.append(key)

    header = (["NAMESPACE"] if namespaced else []) + ["NAME", "STATUS"] + [k.upper() for k in detail_keys]
    rows = [header]
    for r in resources:
        row = ([r.namespace or ""] if namespaced else []) + [r.name, r.status]
        row += [r.details.get(k, "") for k in detail_keys]
        rows.append(row)

    widths = [max(len(row[i]) for row in rows) for i in range(len(header))]
    return "\n".join(
        "   ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
        for row in rows
    )
