"""Command dispatch: validate arguments, run the command, map the outcome to an exit code.

Each invocation walks ``Idle -> Validating -> Executing -> Reporting -> Done``;
any error ends in ``Failed``. Nothing carries over between invocations.
"""
import logging
from enum import Enum
from typing import Dict, Optional, Sequence

from .client import ClusterClient
from .commands import COMMANDS, Command, CommandContext, usage_text
from .config import ClusterManagerConfig
from .errors import ClusterManagerError, UsageError
from .health import HealthAggregator
from .reporting import Reporter

logger = logging.getLogger("cluster_manager.dispatcher")

EXIT_OK = 0


class DispatchState(str, Enum):
    IDLE = 'idle'
    VALIDATING = 'validating'
    EXECUTING = 'executing'
    REPORTING = 'reporting'
    DONE = 'done'
    FAILED = 'failed'


class CommandDispatcher:
    """Runs one command against a cluster client and reports the result."""

    def __init__(
        self,
        client: ClusterClient,
        reporter: Reporter,
        config: Optional[ClusterManagerConfig] = None,
        aggregator: Optional[HealthAggregator] = None,
        commands: Optional[Dict[str, Command]] = None,
    ):
        self.commands = commands if commands is not None else COMMANDS
        self.reporter = reporter
        self.context = CommandContext(
            client=client,
            reporter=reporter,
            config=config or client.config,
            aggregator=aggregator or HealthAggregator(),
            usage=usage_text(),
        )
        self.state = DispatchState.IDLE

    def dispatch(self, name: str, args: Sequence[str] = ()) -> int:
        """Run ``name`` with ``args`` and return the process exit code."""
        self.state = DispatchState.IDLE
        self._transition(DispatchState.VALIDATING)
        command = None
        try:
            command = self._resolve(name)
            request = command.parse(list(args))
        except UsageError as e:
            return self._usage_failure(command, e)

        self._transition(DispatchState.EXECUTING)
        try:
            for render in command.run(self.context, request):
                self._transition(DispatchState.REPORTING)
                render()
                self._transition(DispatchState.EXECUTING)
        except ClusterManagerError as e:
            return self._failure(command.describe_failure(request), e)

        self._transition(DispatchState.DONE)
        return EXIT_OK

    def _resolve(self, name: str) -> Command:
        try:
            return self.commands[name]
        except KeyError:
            known = ", ".join(self.commands)
            raise UsageError(f"Unknown command: {name} (known commands: {known})") from None

    def _usage_failure(self, command: Optional[Command], error: UsageError) -> int:
        self._transition(DispatchState.FAILED)
        self.reporter.error(str(error))
        if command is not None:
            self.reporter.usage(command.usage)
        else:
            self.reporter.usage(self.context.usage)
        return error.exit_code

    def _failure(self, context: str, error: ClusterManagerError) -> int:
        self._transition(DispatchState.FAILED)
        logger.debug("%s", context, exc_info=True)
        self.reporter.error(f"{context}: {error}")
        return error.exit_code

    def _transition(self, state: DispatchState) -> None:
        logger.debug("Dispatcher %s -> %s", self.state.value, state.value)
        self.state = state
