"""Reporting CLI commands: status, log, events, summary and config."""

from datetime import datetime, time
from typing import Optional

import typer
from pydantic import ValidationError

from shift.application import events, query_sessions, status, summarize
from shift.config import read_settings, save_settings
from shift.interfaces.cli.common import (
    EXIT_USER_ERROR,
    exit_on_corruption,
    get_log,
    get_state,
    parse_time,
    print_error,
    print_events,
    print_info,
    print_sessions,
    print_summaries,
    unwrap,
)


def status_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as json"),
) -> None:
    """Show ongoing tasks."""
    sessions = unwrap(status(get_log(ctx)))
    if not sessions and not json_output:
        print_info("No ongoing tasks")
        return
    print_sessions(sessions, as_json=json_output)


def log_command(
    ctx: typer.Context,
    from_: Optional[str] = typer.Option(None, "--from", "-f", help="Search from time"),
    to: Optional[str] = typer.Option(None, "--to", help="Search to time"),
    task: list[str] = typer.Option([], "--task", "-t", help="Task names"),
    count: Optional[int] = typer.Option(
        None,
        "--count",
        "-c",
        min=1,
        help="Max sessions shown, most recent first (ignored with --task or --all)",
    ),
    all: bool = typer.Option(False, "--all", "-a", help="Show all sessions"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as json"),
) -> None:
    """Log task sessions."""
    settings = get_state(ctx).settings
    sessions = unwrap(
        query_sessions(
            get_log(ctx),
            since=parse_time(from_, "--from"),
            until=parse_time(to, "--to"),
            names=task,
            count=count if count is not None else settings.default_count,
            all=all,
        )
    )
    print_sessions(sessions, as_json=json_output)


def events_command(
    ctx: typer.Context,
    from_: Optional[str] = typer.Option(None, "--from", "-f", help="Search from time"),
    to: Optional[str] = typer.Option(None, "--to", help="Search to time"),
    task: list[str] = typer.Option([], "--task", "-t", help="Task names"),
    count: Optional[int] = typer.Option(None, "--count", "-c", min=0, help="Max events shown"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as json"),
) -> None:
    """List raw task events, newest first."""
    found = unwrap(
        events(
            get_log(ctx),
            since=parse_time(from_, "--from"),
            until=parse_time(to, "--to"),
            names=task,
            count=count,
        )
    )
    print_events(found, as_json=json_output)


def summary_command(
    ctx: typer.Context,
    from_: Optional[str] = typer.Option(None, "--from", "-f", help="Window start (default: today 00:00)"),
    to: Optional[str] = typer.Option(None, "--to", help="Window end (default: now)"),
) -> None:
    """Show time per task inside a window."""
    since = parse_time(from_, "--from")
    if since is None:
        since = datetime.combine(datetime.now().date(), time()).astimezone()
    with exit_on_corruption():
        summaries = unwrap(summarize(get_log(ctx), since=since, until=parse_time(to, "--to")))
    if not summaries:
        print_info("Nothing tracked in this window")
        return
    print_summaries(summaries)


def config_command(
    ctx: typer.Context,
    db: Optional[str] = typer.Option(None, "--set-db", help="Event database path"),
    count: Optional[int] = typer.Option(None, "--set-count", help="Default session count for log"),
    allow_switch_to_current: Optional[bool] = typer.Option(
        None,
        "--allow-switch-to-current/--reject-switch-to-current",
        help="Whether switch may restart the only ongoing task",
    ),
) -> None:
    """Show or change the configuration."""
    state = get_state(ctx)
    # Stored values only; --db applies to one invocation.
    settings = read_settings(state.config_path)
    update: dict = {}
    if db is not None:
        update["db_path"] = db
    if count is not None:
        update["default_count"] = count
    if allow_switch_to_current is not None:
        update["reject_switch_to_current"] = not allow_switch_to_current

    if update:
        try:
            settings = settings.model_validate({**settings.model_dump(), **update})
        except ValidationError as e:
            print_error(f"Invalid configuration: {e}")
            raise typer.Exit(EXIT_USER_ERROR)
        save_settings(settings, state.config_path)
    for key, value in settings.model_dump().items():
        typer.echo(f"{key} = {value}")
