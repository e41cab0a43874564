"""Shared utilities for Shift CLI commands.

- Opening the event log from the global options
- Timestamp parsing for --at / --from / --to
- Formatted output helpers (error, success, info)
- Session and event rendering
- Mapping command errors to exit codes
"""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from pathlib import Path
from typing import Any, NoReturn

import typer

from shift.config import Settings
from shift.domain.shared import Err, Ok, Result
from shift.domain.task import (
    CommandError,
    CorruptSessionError,
    MultipleEvents,
    MultiplePauses,
    MultipleSessions,
    StorageError,
    TaskEvent,
    TaskSession,
    TaskSummary,
    UpdateMismatch,
    get_times,
    utc_now,
)
from shift.infrastructure.storage import EventLog

EXIT_USER_ERROR = 1
EXIT_CORRUPT = 2
EXIT_STORAGE = 3

TIME_FORMATS = ("%H:%M", "%H:%M:%S")
DATETIME_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S")


@dataclass
class CliState:
    """Per-invocation state stored on the Typer context."""

    settings: Settings
    config_path: Path | None = None
    log: EventLog | None = None


def configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_state(ctx: typer.Context) -> CliState:
    return ctx.find_root().obj


def get_log(ctx: typer.Context) -> EventLog:
    """Open the event log on first use and close it with the context."""
    state = get_state(ctx)
    if state.log is None:
        result = EventLog.open(state.settings.db_path)
        if isinstance(result, Err):
            fail(result.error)
        state.log = result.value
        ctx.find_root().call_on_close(state.log.close)
    return state.log


def parse_time(value: str | None, option: str = "--at") -> datetime | None:
    """Parse a local timestamp given on the command line.

    Accepts HH:MM and HH:MM:SS (today) or YYYY-MM-DD HH:MM[:SS].

    Raises:
        typer.BadParameter: If no format matches.
    """
    if value is None:
        return None
    text = value.strip()
    for fmt in TIME_FORMATS:
        try:
            parsed: time = datetime.strptime(text, fmt).time()
        except ValueError:
            continue
        return datetime.combine(datetime.now().date(), parsed).astimezone()
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt).astimezone()
        except ValueError:
            continue
    raise typer.BadParameter(f"Could not parse {option} time '{value}'")


def print_error(msg: str) -> None:
    typer.echo(typer.style(f"Error: {msg}", fg=typer.colors.RED), err=True)


def print_success(msg: str) -> None:
    typer.echo(typer.style(msg, fg=typer.colors.GREEN))


def print_info(msg: str) -> None:
    typer.echo(typer.style(msg, fg=typer.colors.BLUE))


def format_duration(value: timedelta) -> str:
    """Format a duration as H:MM:SS."""
    seconds = int(value.total_seconds())
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def format_time(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_session(session: TaskSession, now: datetime) -> str:
    times = get_times(session, now)
    state = session.current_state.value if session.current_state else "-"
    started = format_time(session.started_at) if session.started_at else "-"
    return (
        f"{session.short_id}  {session.name:<20} {state:<8} {started}  "
        f"{format_duration(times.elapsed)}  {format_duration(times.paused)}"
    )


def format_event(event: TaskEvent) -> str:
    return f"{event.short_id}  {event.name:<20} {event.state.value:<8} {format_time(event.time)}"


def session_to_dict(session: TaskSession, now: datetime) -> dict[str, Any]:
    times = get_times(session, now)
    data = session.model_dump(mode="json")
    data["state"] = session.current_state.value if session.current_state else None
    data["elapsed_seconds"] = int(times.elapsed.total_seconds())
    data["paused_seconds"] = int(times.paused.total_seconds())
    return data


@contextmanager
def exit_on_corruption() -> Iterator[None]:
    """Report a corrupt session and exit with EXIT_CORRUPT."""
    try:
        yield
    except CorruptSessionError as e:
        print_error(str(e))
        raise typer.Exit(EXIT_CORRUPT)


def print_sessions(sessions: list[TaskSession], as_json: bool = False) -> None:
    """Render sessions as text lines or a JSON array."""
    now = utc_now()
    with exit_on_corruption():
        if as_json:
            typer.echo(json.dumps([session_to_dict(s, now) for s in sessions], indent=2))
            return
        for session in sessions:
            typer.echo(format_session(session, now))


def print_events(events: list[TaskEvent], as_json: bool = False) -> None:
    if as_json:
        typer.echo(json.dumps([e.model_dump(mode="json") for e in events], indent=2))
        return
    for event in events:
        typer.echo(format_event(event))


def print_summaries(summaries: list[TaskSummary]) -> None:
    for summary in summaries:
        typer.echo(
            f"{summary.name:<20} {format_duration(summary.elapsed)}  "
            f"paused {format_duration(summary.paused)}  ({summary.sessions} sessions)"
        )


def exit_code(error: CommandError) -> int:
    if isinstance(error, (StorageError, UpdateMismatch)):
        return EXIT_STORAGE
    return EXIT_USER_ERROR


def fail(error: CommandError) -> NoReturn:
    """Print a command error (with the candidates, if any) and exit."""
    if isinstance(error, (MultipleSessions, MultiplePauses)):
        for session in error.sessions:
            typer.echo(f"{session.short_id}  {session.name}", err=True)
        print_error(f"{error.message}. Specify a task name or id, or use --all")
    elif isinstance(error, MultipleEvents):
        for event in error.events:
            typer.echo(format_event(event), err=True)
        print_error(error.message)
    else:
        print_error(error.message)
    raise typer.Exit(exit_code(error))


def unwrap(result: Result) -> Any:
    """Return the Ok value or report the error and exit."""
    if isinstance(result, Ok):
        return result.value
    fail(result.error)


__all__ = [
    "CliState",
    "EXIT_USER_ERROR",
    "EXIT_CORRUPT",
    "EXIT_STORAGE",
    "configure_logging",
    "exit_on_corruption",
    "get_state",
    "get_log",
    "parse_time",
    "print_error",
    "print_success",
    "print_info",
    "format_duration",
    "format_session",
    "format_event",
    "print_sessions",
    "print_events",
    "print_summaries",
    "exit_code",
    "fail",
    "unwrap",
]
