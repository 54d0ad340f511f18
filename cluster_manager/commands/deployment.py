"""Deployment commands: scale and restart."""
from functools import partial
from typing import Iterator, List

from ..models import RestartRequest, ScaleRequest
from .base import Command, CommandContext, RenderStep, expect_arity, parse_count


def parse_scale(args: List[str]) -> ScaleRequest:
    expect_arity(args, 3, 3)
    namespace, name, replicas = args
    return ScaleRequest(namespace=namespace, name=name, replicas=parse_count("replicas", replicas))


def run_scale(ctx: CommandContext, req: ScaleRequest) -> Iterator[RenderStep]:
    result = ctx.client.scale_deployment(req)
    yield partial(ctx.reporter.action, result)


def parse_restart(args: List[str]) -> RestartRequest:
    expect_arity(args, 2, 2)
    namespace, name = args
    return RestartRequest(namespace=namespace, name=name)


def run_restart(ctx: CommandContext, req: RestartRequest) -> Iterator[RenderStep]:
    result = ctx.client.restart_deployment(req)
    yield partial(ctx.reporter.action, result)


scale = Command(
    name="scale",
    arguments="<namespace> <deployment> <replicas>",
    summary="Scale deployment",
    parse=parse_scale,
    run=run_scale,
    failure="Failed to scale deployment {namespace}/{name}",
)

restart = Command(
    name="restart",
    arguments="<namespace> <deployment>",
    summary="Restart deployment",
    parse=parse_restart,
    run=run_restart,
    failure="Failed to restart deployment {namespace}/{name}",
)
