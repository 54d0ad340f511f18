from functools import partial
from typing import Iterator, List

from ..models import LogsRequest, LogsResult
from .base import Command, CommandContext, RenderStep, expect_arity, parse_count


def parse_logs(args: List[str]) -> LogsRequest:
    expect_arity(args, 2, 3)
    if len(args) == 3:
        return LogsRequest(namespace=args[0], pod=args[1], lines=parse_count("lines", args[2]))
    return LogsRequest(namespace=args[0], pod=args[1])


def run_logs(ctx: CommandContext, req: LogsRequest) -> Iterator[RenderStep]:
    text = ctx.client.fetch_logs(req)
    yield partial(ctx.reporter.logs, LogsResult(request=req, text=text))


logs = Command(
    name="logs",
    arguments="<namespace> <pod> [lines]",
    summary="Show pod logs (default: 100 lines)",
    parse=parse_logs,
    run=run_logs,
    failure="Failed to show logs for {namespace}/{pod}",
)
