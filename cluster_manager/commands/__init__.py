from typing import Dict

from .base import Command, CommandContext
from .cluster import backup, health, info, show_help
from .deployment import restart, scale
from .logs import logs

# Ordered as listed in the usage text
COMMANDS: Dict[str, Command] = {
    command.name: command
    for command in (info, health, scale, restart, backup, logs, show_help)
}


def usage_text() -> str:
    """Top-level usage listing every known command."""
    lines = [
        "Kubernetes Cluster Manager",
        "Usage:",
        "  cluster-manager [options] [command] [arguments]",
        "",
        "Commands:",
    ]
    for command in COMMANDS.values():
        signature = f"{command.name} {command.arguments}".rstrip()
        lines.append(f"  {signature:<38}- {command.summary}")
    return "\n".join(lines)


__all__ = ['COMMANDS', 'Command', 'CommandContext', 'usage_text']
