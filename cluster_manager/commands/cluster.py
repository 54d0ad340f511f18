"""Cluster-wide commands: info, health, backup and help."""
import logging
from functools import partial
from typing import Iterator, List

from ..errors import ConfigError, NotFoundError, TransportError
from ..models import ClusterHealth
from .base import Command, CommandContext, RenderStep, no_args

logger = logging.getLogger("cluster_manager.commands.cluster")

UNKNOWN_CONTEXT = "<unknown>"


def run_info(ctx: CommandContext, _) -> Iterator[RenderStep]:
    """Report context, nodes, pods and services, each as soon as it is fetched.

    A failing listing stops the command but output already rendered stays.
    An unreadable kubeconfig context is reported as unknown.
    """
    try:
        context = ctx.client.current_context()
    except ConfigError as e:
        logger.warning("Could not read current context: %s", e)
        context = UNKNOWN_CONTEXT
    yield partial(ctx.reporter.context, context)
    yield partial(ctx.reporter.section, "Nodes", ctx.client.list_nodes())
    yield partial(ctx.reporter.section, "Pods", ctx.client.list_pods())
    yield partial(ctx.reporter.section, "Services", ctx.client.list_services())


def run_health(ctx: CommandContext, _) -> Iterator[RenderStep]:
    aggregator = ctx.aggregator
    nodes = aggregator.aggregate_nodes(ctx.client.list_nodes())
    pods = aggregator.aggregate_pods(ctx.client.list_pods())

    namespaces = []
    for namespace in ctx.config.critical_namespaces:
        try:
            report = aggregator.aggregate_namespace(namespace, ctx.client.list_pods(namespace))
        except (TransportError, NotFoundError) as e:
            report = aggregator.failed_namespace(namespace, e)
        namespaces.append(report)

    yield partial(ctx.reporter.health, ClusterHealth(nodes=nodes, pods=pods, namespaces=namespaces))


def run_backup(ctx: CommandContext, _) -> Iterator[RenderStep]:
    result = ctx.client.snapshot_store()
    logger.info("Etcd snapshot saved to %s in pod %s", result.path, result.pod)
    yield partial(ctx.reporter.snapshot, result)


def parse_help(args: List[str]) -> None:
    # help never fails, extra arguments are ignored
    return None


def run_help(ctx: CommandContext, _) -> Iterator[RenderStep]:
    yield partial(ctx.reporter.usage, ctx.usage)


info = Command(
    name="info",
    arguments="",
    summary="Show cluster information",
    parse=no_args,
    run=run_info,
    failure="Failed to get cluster info",
)

health = Command(
    name="health",
    arguments="",
    summary="Check cluster health",
    parse=no_args,
    run=run_health,
    failure="Failed to check cluster health",
)

backup = Command(
    name="backup",
    arguments="",
    summary="Create etcd backup",
    parse=no_args,
    run=run_backup,
    failure="Failed to create backup",
)

show_help = Command(
    name="help",
    arguments="",
    summary="Show this help message",
    parse=parse_help,
    run=run_help,
    failure="Failed to show help",
)
