"""Command table entries and argument parsing helpers."""
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional

from ..client import ClusterClient
from ..config import ClusterManagerConfig
from ..errors import UsageError
from ..health import HealthAggregator
from ..reporting import Reporter

# A command yields one render step per result so output is produced as
# results arrive
RenderStep = Callable[[], None]


@dataclass
class CommandContext:
    """Collaborators available to a running command."""
    client: ClusterClient
    reporter: Reporter
    config: ClusterManagerConfig
    aggregator: HealthAggregator = field(default_factory=HealthAggregator)
    usage: str = ""


@dataclass(frozen=True)
class Command:
    """A named command: argument parser, executor and failure context."""
    name: str
    arguments: str
    summary: str
    parse: Callable[[List[str]], Any]
    run: Callable[[CommandContext, Any], Iterator[RenderStep]]
    failure: str

    @property
    def usage(self) -> str:
        return f"Usage: cluster-manager {self.name} {self.arguments}".rstrip()

    def describe_failure(self, request: Optional[Any]) -> str:
        """Failure prefix with the request's fields filled in."""
        if request is None:
            return self.failure
        return self.failure.format(**vars(request))


def no_args(args: List[str]) -> None:
    if args:
        raise UsageError(f"unexpected arguments: {' '.join(args)}")
    return None


def expect_arity(args: List[str], minimum: int, maximum: int) -> None:
    if not minimum <= len(args) <= maximum:
        if minimum == maximum:
            expected = str(minimum)
        else:
            expected = f"{minimum} to {maximum}"
        raise UsageError(f"expected {expected} arguments, got {len(args)}")


def parse_count(label: str, value: str) -> int:
    """Parse a non-negative integer argument."""
    try:
        count = int(value)
    except ValueError:
        raise UsageError(f"{label} must be an integer, got {value!r}") from None
    if count < 0:
        raise UsageError(f"{label} must be >= 0, got {count}")
    return count
