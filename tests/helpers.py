"""Shared helpers for Shift tests."""

from datetime import UTC, datetime, timedelta

from shift.domain.shared import Ok
from shift.domain.task import TaskEvent, TaskSession, TaskState

T0 = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)


def minutes(n: float) -> timedelta:
    return timedelta(minutes=n)


def at(n: float) -> datetime:
    """T0 plus ``n`` minutes."""
    return T0 + minutes(n)


def make_session(name: str, *steps: tuple[TaskState, float], session_id: str = "s-1") -> TaskSession:
    """Build a session from (state, minutes after T0) pairs."""
    events = [
        TaskEvent(name=name, session=session_id, state=state, time=at(offset))
        for state, offset in steps
    ]
    return TaskSession(id=session_id, name=name, events=events)


def ok(result):
    """Unwrap an Ok result, failing the test on Err."""
    assert isinstance(result, Ok), f"expected Ok, got {result!r}"
    return result.value


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now
