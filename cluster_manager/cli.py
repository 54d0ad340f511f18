import typer
from pathlib import Path
from typing import Optional, List

from cluster_manager.client import ClusterClient
from cluster_manager.commands import usage_text
from cluster_manager.config import ClusterManagerConfig
from cluster_manager.dispatcher import CommandDispatcher
from cluster_manager.errors import ConfigError
from cluster_manager.logging import setup_logging
from cluster_manager.reporting import OutputFormat, get_reporter

app = typer.Typer(add_completion=False)


# Command arguments may look like options (e.g. negative counts)
@app.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
def main(
    command: Optional[str] = typer.Argument(None, help="Command to run (see 'help')"),
    args: Optional[List[str]] = typer.Argument(None, help="Command arguments"),
    output: OutputFormat = typer.Option(OutputFormat.TEXT, "--output", "-o", help="Output format"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Kubernetes Cluster Manager."""
    reporter = get_reporter(output)
    if command is None:
        reporter.usage(usage_text())
        raise typer.Exit(code=1)

    try:
        config = ClusterManagerConfig.load(config_path=config_file)
        setup_logging(config.log_level, config.log_format, debug)
        credentials = config.credentials()
    except ConfigError as e:
        reporter.error(f"Failed to create cluster manager: {e}")
        raise typer.Exit(code=e.exit_code)

    dispatcher = CommandDispatcher(ClusterClient(config, credentials), reporter, config=config)
    code = dispatcher.dispatch(command, args or [])
    if code:
        raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
