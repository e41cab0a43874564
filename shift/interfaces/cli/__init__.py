"""CLI interface for Shift using Typer.

Usage:
    st start writing        # Start a task
    st pause                # Pause the only running task
    st resume               # Resume it
    st stop --all           # Stop every ongoing task
    st switch reviewing     # Stop everything, start another task
    st status               # Show ongoing tasks
    st log -c 20            # Show recent sessions
    st undo                 # Undo the latest command

The CLI is structured as:
- app: Main Typer application with the global options
- commands/: tracking and reporting commands
- common.py: Shared utilities for CLI commands
- main.py: Entry point that runs the app
"""

from pathlib import Path
from typing import Optional

import typer

from shift import __version__
from shift.config import read_settings
from shift.interfaces.cli.commands import reports, tracking
from shift.interfaces.cli.common import CliState, configure_logging

app = typer.Typer(
    name="st",
    help="Track time spent on tasks",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"st version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(
        None,
        "--db",
        help="Event database path (or set ST_DB_PATH env var)",
        envvar="ST_DB_PATH",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file (or set ST_CONFIG env var)",
        envvar="ST_CONFIG",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Shift - record when tasks start, pause, resume and stop."""
    settings = read_settings(config)
    if db:
        settings = settings.model_copy(update={"db_path": db})
    configure_logging(settings.log_level, verbose)
    ctx.obj = CliState(settings=settings, config_path=config)


# =============================================================================
# Register Commands
# =============================================================================

app.command("start")(tracking.start_command)
app.command("stop")(tracking.stop_command)
app.command("pause")(tracking.pause_command)
app.command("resume")(tracking.resume_command)
app.command("switch")(tracking.switch_command)
app.command("undo")(tracking.undo_command)
app.command("edit")(tracking.edit_command)

app.command("status")(reports.status_command)
app.command("log")(reports.log_command)
app.command("events")(reports.events_command)
app.command("summary")(reports.summary_command)
app.command("config")(reports.config_command)


__all__ = ["app"]
