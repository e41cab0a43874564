"""Failure variants returned by the command handlers.

Each failure kind is its own frozen dataclass and ``CommandError`` is the
union of them. Variants that report an ambiguous selection carry the
candidate sessions (or events) as data so the shell can print the choices.

``CorruptSessionError`` is different: it signals that persisted history
violates a session invariant. It is raised, never returned, and nothing
tries to repair it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from .models import TaskEvent, TaskSession


@dataclass(frozen=True)
class Ongoing:
    """A session for ``name`` is already open."""

    name: str

    @property
    def message(self) -> str:
        return f"Task '{self.name}' already has an ongoing session"


@dataclass(frozen=True)
class NoTasks:
    @property
    def message(self) -> str:
        return "No matching tasks"


@dataclass(frozen=True)
class NoPauses:
    @property
    def message(self) -> str:
        return "No paused tasks matched"


@dataclass(frozen=True)
class MultipleSessions:
    """Selector matched several ongoing sessions."""

    sessions: list[TaskSession] = field(default_factory=list)

    @property
    def message(self) -> str:
        names = " ".join(s.name for s in self.sessions)
        return f"Multiple ongoing sessions: {names}"


@dataclass(frozen=True)
class MultiplePauses:
    """Selector matched several paused sessions."""

    sessions: list[TaskSession] = field(default_factory=list)

    @property
    def message(self) -> str:
        names = " ".join(s.name for s in self.sessions)
        return f"Multiple paused sessions: {names}"


@dataclass(frozen=True)
class MultipleEvents:
    """Event id suffix matched several events."""

    events: list[TaskEvent] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Identifier matches {len(self.events)} events"


@dataclass(frozen=True)
class TimeConflict:
    """New event would precede the latest event of its session."""

    session: TaskSession
    time: datetime

    @property
    def message(self) -> str:
        latest = self.session.last_event
        when = latest.time.isoformat() if latest else "?"
        return (
            f"Time {self.time.isoformat()} is before the latest event "
            f"of '{self.session.name}' ({when})"
        )


@dataclass(frozen=True)
class InvalidEdit:
    reason: str

    @property
    def message(self) -> str:
        return f"Edit rejected: {self.reason}"


@dataclass(frozen=True)
class UpdateMismatch:
    """A write affected an unexpected number of rows."""

    count: int
    event: TaskEvent

    @property
    def message(self) -> str:
        return f"Expected to write one row but wrote {self.count} for {self.event}"


@dataclass(frozen=True)
class StorageError:
    message: str


CommandError = Union[  # noqa: UP007
    Ongoing,
    NoTasks,
    NoPauses,
    MultipleSessions,
    MultiplePauses,
    MultipleEvents,
    TimeConflict,
    InvalidEdit,
    UpdateMismatch,
    StorageError,
]


class CorruptSessionError(Exception):
    """Persisted events of a session violate the session invariants."""

    def __init__(self, session_id: str, reason: str) -> None:
        super().__init__(f"Corrupt session {session_id}: {reason}")
        self.session_id = session_id
        self.reason = reason
