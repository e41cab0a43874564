"""Task domain models.

A task's history is a flat, append-only stream of ``TaskEvent`` records.
``TaskSession`` is a derived view: the events that share one session id,
ordered oldest to newest. Sessions are never stored.
"""

import secrets
import time as _time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def new_id() -> str:
    """Return a time-ordered UUIDv7 string.

    The first 48 bits are the unix time in milliseconds, so ids sort
    roughly by creation time.
    """
    millis = _time.time_ns() // 1_000_000
    rand = secrets.randbits(74)
    value = (millis & 0xFFFF_FFFF_FFFF) << 80
    value |= 0x7 << 76
    value |= ((rand >> 62) & 0xFFF) << 64
    value |= 0b10 << 62
    value |= rand & ((1 << 62) - 1)
    return str(uuid.UUID(int=value))


def utc_now() -> datetime:
    return datetime.now(UTC)


def to_utc(value: datetime) -> datetime:
    """Normalise a timestamp to UTC; naive values are taken as local time."""
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(UTC)


class TaskState(str, Enum):
    """State tag carried by every event."""

    STARTED = "Started"
    PAUSED = "Paused"
    RESUMED = "Resumed"
    STOPPED = "Stopped"


class TaskEvent(BaseModel):
    """Immutable fact about a task session.

    Created only by the command handlers and never mutated; ``undo`` and
    ``edit`` are the only operations that touch persisted history.
    """

    id: str = Field(default_factory=new_id)
    name: str = Field(min_length=1)
    session: str = Field(default_factory=new_id)
    state: TaskState
    time: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}

    @field_validator("time")
    @classmethod
    def _normalise_time(cls, value: datetime) -> datetime:
        return to_utc(value)

    @classmethod
    def create(
        cls,
        name: str,
        state: TaskState,
        session: str | None = None,
        time: datetime | None = None,
    ) -> "TaskEvent":
        """Build a new event with a fresh id.

        A fresh session id is allocated when ``session`` is None, which is
        what ``start`` wants.
        """
        data: dict = {"name": name, "state": state}
        if session is not None:
            data["session"] = session
        if time is not None:
            data["time"] = time
        return cls(**data)

    @property
    def short_id(self) -> str:
        return self.id[-8:]

    def __str__(self) -> str:
        return f"{self.id},{self.name},{self.session},{self.state.value},{self.time.isoformat()}"


class TaskSession(BaseModel):
    """One lifecycle of a named task, rebuilt from its events.

    ``events`` is ordered oldest to newest.
    """

    id: str
    name: str
    events: list[TaskEvent] = Field(default_factory=list)

    @property
    def short_id(self) -> str:
        return self.id[-8:]

    @property
    def last_event(self) -> TaskEvent | None:
        return self.events[-1] if self.events else None

    @property
    def started_at(self) -> datetime | None:
        return self.events[0].time if self.events else None

    @property
    def current_state(self) -> TaskState | None:
        """State of the most recent event, or None for an empty session."""
        last = self.last_event
        return last.state if last else None

    @property
    def is_ongoing(self) -> bool:
        """True while no Stopped event exists in the session."""
        return all(e.state != TaskState.STOPPED for e in self.events)

    @property
    def is_paused(self) -> bool:
        return self.current_state == TaskState.PAUSED


@dataclass(frozen=True)
class SessionTimes:
    """Accumulated run time and pause time of a session."""

    elapsed: timedelta = timedelta(0)
    paused: timedelta = timedelta(0)

    @property
    def total(self) -> timedelta:
        return self.elapsed + self.paused


class EventFilter(BaseModel):
    """Selection applied by ``EventLog.query``.

    Time bounds are exclusive. ``limit`` of None means no cap; the cap is
    applied after the name filter.
    """

    since: datetime | None = None
    until: datetime | None = None
    names: list[str] = Field(default_factory=list)
    limit: int | None = Field(default=None, ge=0)

    @field_validator("since", "until")
    @classmethod
    def _normalise_bounds(cls, value: datetime | None) -> datetime | None:
        return to_utc(value) if value is not None else None


class TaskSummary(BaseModel):
    """Time spent on one task name inside a reporting window."""

    name: str
    elapsed: timedelta
    paused: timedelta
    sessions: int
