"""Tracking CLI commands.

Commands that append to (or rewrite) the event log: start, stop, pause,
resume, switch, undo and edit.
"""

from typing import Optional

import typer

from shift.application import edit_event, pause, resume, start, stop, switch, undo
from shift.domain.task import Selector
from shift.interfaces.cli.common import (
    exit_on_corruption,
    format_event,
    get_log,
    get_state,
    parse_time,
    print_info,
    print_success,
    unwrap,
)


def start_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of task"),
    at: Optional[str] = typer.Option(None, "--at", help="Start time instead of now"),
) -> None:
    """Start a task."""
    with exit_on_corruption():
        event = unwrap(start(get_log(ctx), name, at=parse_time(at)))
    print_success(f"Started '{event.name}' ({event.session[-8:]})")


def stop_command(
    ctx: typer.Context,
    identifier: Optional[str] = typer.Argument(None, help="Name or id suffix of task"),
    all: bool = typer.Option(False, "--all", "-a", help="Stop all ongoing tasks"),
    at: Optional[str] = typer.Option(None, "--at", help="Stop time instead of now"),
) -> None:
    """Stop a task."""
    with exit_on_corruption():
        events = unwrap(stop(get_log(ctx), Selector(identifier, all), at=parse_time(at)))
    for event in events:
        print_success(f"Stopped '{event.name}'")


def pause_command(
    ctx: typer.Context,
    identifier: Optional[str] = typer.Argument(None, help="Name or id suffix of task"),
    all: bool = typer.Option(False, "--all", "-a", help="Pause all ongoing tasks"),
    at: Optional[str] = typer.Option(None, "--at", help="Pause time instead of now"),
) -> None:
    """Pause an ongoing task."""
    with exit_on_corruption():
        events = unwrap(pause(get_log(ctx), Selector(identifier, all), at=parse_time(at)))
    for event in events:
        print_success(f"Paused '{event.name}'")


def resume_command(
    ctx: typer.Context,
    identifier: Optional[str] = typer.Argument(None, help="Name or id suffix of task"),
    all: bool = typer.Option(False, "--all", "-a", help="Resume all paused tasks"),
    at: Optional[str] = typer.Option(None, "--at", help="Resume time instead of now"),
) -> None:
    """Resume a paused task."""
    with exit_on_corruption():
        events = unwrap(resume(get_log(ctx), Selector(identifier, all), at=parse_time(at)))
    for event in events:
        print_success(f"Resumed '{event.name}'")


def switch_command(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Name of task to switch to"),
) -> None:
    """Stop all ongoing tasks and start another one."""
    settings = get_state(ctx).settings
    with exit_on_corruption():
        event = unwrap(
            switch(get_log(ctx), name, reject_current=settings.reject_switch_to_current)
        )
    print_success(f"Switched to '{event.name}'")


def undo_command(ctx: typer.Context) -> None:
    """Undo the latest command."""
    removed = unwrap(undo(get_log(ctx)))
    print_info(f"Removed {removed} event(s)")


def edit_command(
    ctx: typer.Context,
    identifier: Optional[str] = typer.Argument(None, help="Event id suffix (default: latest)"),
    at: Optional[str] = typer.Option(None, "--at", help="New event time"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="New task name for the session"),
) -> None:
    """Change the time of an event or the name of its session."""
    event = unwrap(edit_event(get_log(ctx), identifier, time=parse_time(at), name=name))
    typer.echo(format_event(event))
