"""Task state machine.

Two views of the same rules:

- ``next_state`` answers "may this command be applied to a session whose
  latest state is X", returning the user-facing error when it may not.
- ``validate_sequence`` checks a whole persisted timeline and raises
  ``CorruptSessionError`` on the first illegal adjacency.
"""

from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Union

from shift.domain.shared import Err, Ok, Result

from .errors import (
    CommandError,
    CorruptSessionError,
    NoPauses,
    NoTasks,
    Ongoing,
    TimeConflict,
)
from .models import TaskEvent, TaskSession, TaskState, to_utc


class Command(str, Enum):
    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    STOP = "stop"


# None stands for "no session" as well as a Stopped one.
_Outcome = Union[TaskState, Callable[[str], CommandError]]  # noqa: UP007

TRANSITIONS: dict[TaskState | None, dict[Command, _Outcome]] = {
    None: {
        Command.START: TaskState.STARTED,
        Command.PAUSE: lambda name: NoTasks(),
        Command.RESUME: lambda name: NoPauses(),
        Command.STOP: lambda name: NoTasks(),
    },
    TaskState.STARTED: {
        Command.START: Ongoing,
        Command.PAUSE: TaskState.PAUSED,
        Command.RESUME: lambda name: NoPauses(),
        Command.STOP: TaskState.STOPPED,
    },
    TaskState.PAUSED: {
        Command.START: Ongoing,
        Command.PAUSE: lambda name: NoTasks(),
        Command.RESUME: TaskState.RESUMED,
        Command.STOP: TaskState.STOPPED,
    },
}
TRANSITIONS[TaskState.RESUMED] = TRANSITIONS[TaskState.STARTED]
TRANSITIONS[TaskState.STOPPED] = TRANSITIONS[None]

# Legal successor states inside one persisted session.
SUCCESSORS: dict[TaskState | None, frozenset[TaskState]] = {
    None: frozenset({TaskState.STARTED}),
    TaskState.STARTED: frozenset({TaskState.PAUSED, TaskState.STOPPED}),
    TaskState.RESUMED: frozenset({TaskState.PAUSED, TaskState.STOPPED}),
    TaskState.PAUSED: frozenset({TaskState.RESUMED, TaskState.STOPPED}),
    TaskState.STOPPED: frozenset(),
}


def next_state(
    current: TaskState | None,
    command: Command,
    name: str = "",
) -> Result[TaskState, CommandError]:
    """Resolve ``command`` against a session's latest state.

    Args:
        current: State of the session's latest event, None if there is no
            session.
        command: Requested command.
        name: Task name, used in the ``Ongoing`` error.

    Returns:
        Ok(new state) or Err with the rejection from the transition table.
    """
    outcome = TRANSITIONS[current][command]
    if isinstance(outcome, TaskState):
        return Ok(outcome)
    return Err(outcome(name))


def check_append(
    session: TaskSession,
    command: Command,
    time: datetime,
) -> Result[TaskEvent, CommandError]:
    """Build the event ``command`` would append to ``session``.

    Rejects the command if the transition table forbids it or if ``time``
    is earlier than the session's latest event.
    """
    result = next_state(session.current_state, command, session.name)
    if isinstance(result, Err):
        return result

    time = to_utc(time)
    latest = session.last_event
    if latest is not None and time < latest.time:
        return Err(TimeConflict(session=session, time=time))

    return Ok(TaskEvent.create(session.name, result.value, session=session.id, time=time))


def validate_sequence(session: TaskSession) -> None:
    """Raise ``CorruptSessionError`` unless the timeline is legal.

    Checks that the first event is Started, that every adjacency is
    allowed (Paused only before Resumed or Stopped, Resumed only after
    Paused, nothing after Stopped) and that times never go backwards.
    """
    if not session.events:
        raise CorruptSessionError(session.id, "session has no events")

    previous: TaskEvent | None = None
    for event in session.events:
        if event.session != session.id or event.name != session.name:
            raise CorruptSessionError(session.id, f"foreign event {event.id} in session")
        allowed = SUCCESSORS[previous.state if previous else None]
        if event.state not in allowed:
            before = previous.state.value if previous else "nothing"
            raise CorruptSessionError(
                session.id, f"{event.state.value} cannot follow {before}"
            )
        if previous is not None and event.time < previous.time:
            raise CorruptSessionError(session.id, f"event {event.id} is out of order")
        previous = event
