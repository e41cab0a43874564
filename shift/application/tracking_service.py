"""Tracking application service.

Command handlers for the task lifecycle: start, stop, pause, resume,
switch, undo and edit. Each handler rebuilds the sessions it needs from
the event log, narrows them through the selector, checks the state
machine and only then appends. Expected failures come back as
``Err(CommandError)``; nothing is retried.

The event log and the clock are passed in, never looked up globally.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from shift.domain.shared import Err, Ok, Result, flat_map
from shift.domain.task import (
    Command,
    CommandError,
    CorruptSessionError,
    InvalidEdit,
    MultipleEvents,
    MultiplePauses,
    MultipleSessions,
    NoPauses,
    NoTasks,
    Ongoing,
    Selector,
    TaskEvent,
    TaskSession,
    UpdateMismatch,
    check_append,
    group_events,
    next_state,
    paused,
    resolve,
    running,
    to_utc,
    utc_now,
    validate_sequence,
)
from shift.infrastructure.storage import EventLog

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def ongoing_sessions(log: EventLog) -> Result[list[TaskSession], CommandError]:
    """Sessions without a Stopped event, in the order they were started."""
    result = log.ongoing_events()
    if isinstance(result, Err):
        return result
    return Ok(group_events(result.value))


def _append(log: EventLog, event: TaskEvent) -> Result[TaskEvent, CommandError]:
    result = log.append(event)
    if isinstance(result, Err):
        return result
    if result.value != 1:
        return Err(UpdateMismatch(count=result.value, event=event))
    return Ok(event)


def start(
    log: EventLog,
    name: str,
    at: datetime | None = None,
    clock: Clock = utc_now,
) -> Result[TaskEvent, CommandError]:
    """Open a new session for ``name``.

    Args:
        log: Event log to write to.
        name: Task name.
        at: Start time; defaults to ``clock()``.
        clock: Source of the current time.

    Returns:
        Ok(the Started event), or Err(Ongoing) if ``name`` already has an
        open session.

    Raises:
        CorruptSessionError: If the open session of ``name`` has an
            illegal timeline.
    """
    result = ongoing_sessions(log)
    if isinstance(result, Err):
        return result

    current = next((s for s in result.value if s.name == name), None)
    if current is not None:
        validate_sequence(current)
    state = next_state(current.current_state if current else None, Command.START, name)
    if isinstance(state, Err):
        return state

    event = TaskEvent.create(name, state.value, time=at or clock())
    return _append(log, event)


def _apply(
    log: EventLog,
    command: Command,
    candidates: Sequence[TaskSession],
    selector: Selector,
    time: datetime,
    on_empty: Callable[[], CommandError],
    on_multiple: Callable[[list[TaskSession]], CommandError],
) -> Result[list[TaskEvent], CommandError]:
    targets = resolve(candidates, selector, on_empty, on_multiple)
    if isinstance(targets, Err):
        logger.debug(f"{command.value}: selector {selector} rejected: {targets.error}")
        return targets

    # Validate every target before writing anything.
    pending: list[TaskEvent] = []
    for session in targets.value:
        validate_sequence(session)
        checked = check_append(session, command, time)
        if isinstance(checked, Err):
            return checked
        pending.append(checked.value)

    # One row per session; a failure part-way leaves earlier rows in place.
    written: list[TaskEvent] = []
    for event in pending:
        result = _append(log, event)
        if isinstance(result, Err):
            logger.error(
                f"{command.value}: wrote {len(written)} of {len(pending)} events before failing"
            )
            return result
        written.append(result.value)
    return Ok(written)


def stop(
    log: EventLog,
    selector: Selector = Selector(),
    at: datetime | None = None,
    clock: Clock = utc_now,
) -> Result[list[TaskEvent], CommandError]:
    """Stop the ongoing session(s) picked by ``selector``.

    Paused sessions can be stopped directly; the pause closes at the stop
    time. With ``selector.all`` every ongoing session is stopped at one
    shared timestamp.

    Returns:
        Ok(Stopped events written) or Err(NoTasks | MultipleSessions | ...).

    Raises:
        CorruptSessionError: If a targeted session has an illegal timeline.
    """
    time = at or clock()
    return flat_map(
        ongoing_sessions(log),
        lambda sessions: _apply(
            log, Command.STOP, sessions, selector, time, NoTasks, MultipleSessions
        ),
    )


def pause(
    log: EventLog,
    selector: Selector = Selector(),
    at: datetime | None = None,
    clock: Clock = utc_now,
) -> Result[list[TaskEvent], CommandError]:
    """Pause running session(s). Only ongoing, not yet paused sessions are eligible."""
    time = at or clock()
    return flat_map(
        ongoing_sessions(log),
        lambda sessions: _apply(
            log, Command.PAUSE, running(sessions), selector, time, NoTasks, MultipleSessions
        ),
    )


def resume(
    log: EventLog,
    selector: Selector = Selector(),
    at: datetime | None = None,
    clock: Clock = utc_now,
) -> Result[list[TaskEvent], CommandError]:
    """Resume paused session(s)."""
    time = at or clock()
    return flat_map(
        ongoing_sessions(log),
        lambda sessions: _apply(
            log, Command.RESUME, paused(sessions), selector, time, NoPauses, MultiplePauses
        ),
    )


def switch(
    log: EventLog,
    name: str,
    at: datetime | None = None,
    clock: Clock = utc_now,
    reject_current: bool = True,
) -> Result[TaskEvent, CommandError]:
    """Stop everything that is ongoing and start ``name`` at the same instant.

    Args:
        log: Event log to write to.
        name: Task to switch to.
        at: Switch time; defaults to ``clock()``.
        clock: Source of the current time.
        reject_current: Refuse with Err(Ongoing) when ``name`` is already
            the only ongoing session, instead of writing a zero-length
            stop/start pair.

    Returns:
        Ok(the Started event of ``name``) or the first error.
    """
    time = at or clock()
    result = ongoing_sessions(log)
    if isinstance(result, Err):
        return result

    current = result.value
    if reject_current and len(current) == 1 and current[0].name == name:
        return Err(Ongoing(name))

    if current:
        stopped = stop(log, Selector(all=True), at=time)
        if isinstance(stopped, Err):
            return stopped
        logger.info(f"Switch to '{name}' stopped {len(stopped.value)} session(s)")

    return start(log, name, at=time)


def undo(log: EventLog) -> Result[int, CommandError]:
    """Remove the latest batch of events (all events at the maximum timestamp).

    Returns:
        Ok(number of events removed), 0 when the log is empty.
    """
    return log.delete_latest()


def _select_event(log: EventLog, identifier: str | None) -> Result[TaskEvent, CommandError]:
    if not identifier:
        latest = log.latest()
        if isinstance(latest, Err):
            return latest
        return Ok(latest.value) if latest.value else Err(NoTasks())

    found = log.find(identifier)
    if isinstance(found, Err):
        return found
    if not found.value:
        return Err(NoTasks())
    if len(found.value) > 1:
        return Err(MultipleEvents(events=found.value))
    return Ok(found.value[0])


def _load_session(log: EventLog, event: TaskEvent) -> Result[TaskSession, CommandError]:
    result = log.sessions_by_id([event.session])
    if isinstance(result, Err):
        return result
    sessions = [s for s in group_events(result.value, descending=True) if s.name == event.name]
    return Ok(sessions[0])


def edit_event(
    log: EventLog,
    identifier: str | None = None,
    time: datetime | None = None,
    name: str | None = None,
) -> Result[TaskEvent, CommandError]:
    """Amend a persisted event.

    The event is picked by id suffix, or the latest event when no
    identifier is given. A new ``time`` is accepted only if the session
    stays valid once re-ordered. A new ``name`` renames the whole session.

    Returns:
        Ok(the amended event) or Err(NoTasks | MultipleEvents | InvalidEdit
        | Ongoing | UpdateMismatch | StorageError).
    """
    selected = _select_event(log, identifier)
    if isinstance(selected, Err):
        return selected
    event = selected.value

    loaded = _load_session(log, event)
    if isinstance(loaded, Err):
        return loaded
    session = loaded.value

    if time is not None:
        event = event.model_copy(update={"time": to_utc(time)})
        timeline = [event if e.id == event.id else e for e in session.events]
        timeline.sort(key=lambda e: e.time)
        candidate = session.model_copy(update={"events": timeline})
        try:
            validate_sequence(candidate)
        except CorruptSessionError as e:
            return Err(InvalidEdit(reason=e.reason))

        written = log.replace(event)
        if isinstance(written, Err):
            return written
        if written.value != 1:
            return Err(UpdateMismatch(count=written.value, event=event))
        session = candidate

    if name is not None and name != session.name:
        if not name.strip():
            return Err(InvalidEdit(reason="task name cannot be empty"))
        if session.is_ongoing:
            others = ongoing_sessions(log)
            if isinstance(others, Err):
                return others
            if any(s.name == name for s in others.value):
                return Err(Ongoing(name))

        renamed = log.rename_session(session.id, name)
        if isinstance(renamed, Err):
            return renamed
        if renamed.value != len(session.events):
            return Err(UpdateMismatch(count=renamed.value, event=event))
        event = event.model_copy(update={"name": name})

    return Ok(event)


__all__ = [
    "Clock",
    "ongoing_sessions",
    "start",
    "stop",
    "pause",
    "resume",
    "switch",
    "undo",
    "edit_event",
]
