"""Session reconstruction and duration computation.

Sessions are rebuilt from events on every read: events are grouped by
``(name, session)`` and each group becomes one ``TaskSession`` whose
events run oldest to newest. Nothing here is cached, so removing events
(``undo``) can never leave a stale aggregate behind.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta
from itertools import pairwise
from typing import Literal

from .models import SessionTimes, TaskEvent, TaskSession, TaskState, TaskSummary, to_utc
from .transitions import validate_sequence

IntervalKind = Literal["run", "pause"]
Interval = tuple[IntervalKind, datetime, datetime]

_RUNNING = (TaskState.STARTED, TaskState.RESUMED)


def group_events(
    events: Iterable[TaskEvent],
    descending: bool = False,
) -> list[TaskSession]:
    """Group a flat event stream into sessions.

    Sessions are returned in the order their first event appears in the
    input. Within a session, events are sorted by time; events sharing a
    timestamp keep their insertion order.

    Args:
        events: Events in log order.
        descending: True when ``events`` are newest first (the log's
            default read order).

    Returns:
        One TaskSession per ``(name, session)`` pair.
    """
    groups: dict[tuple[str, str], list[TaskEvent]] = {}
    for event in events:
        groups.setdefault((event.name, event.session), []).append(event)

    sessions = []
    for (name, session_id), timeline in groups.items():
        if descending:
            timeline.reverse()
        timeline.sort(key=lambda e: e.time)
        sessions.append(TaskSession(id=session_id, name=name, events=timeline))
    return sessions


def ongoing(sessions: Iterable[TaskSession]) -> list[TaskSession]:
    return [s for s in sessions if s.is_ongoing]


def running(sessions: Iterable[TaskSession]) -> list[TaskSession]:
    """Ongoing sessions that are not paused."""
    return [s for s in sessions if s.is_ongoing and not s.is_paused]


def paused(sessions: Iterable[TaskSession]) -> list[TaskSession]:
    return [s for s in sessions if s.is_ongoing and s.is_paused]


def session_intervals(session: TaskSession, now: datetime) -> list[Interval]:
    """Split a session into consecutive run and pause intervals.

    An open session contributes a trailing interval that ends at ``now``.

    Raises:
        CorruptSessionError: If the timeline breaks a session invariant.
    """
    validate_sequence(session)
    now = to_utc(now)

    intervals: list[Interval] = []
    for previous, event in pairwise(session.events):
        kind: IntervalKind = "run" if previous.state in _RUNNING else "pause"
        intervals.append((kind, previous.time, event.time))

    last = session.events[-1]
    if last.state != TaskState.STOPPED:
        kind = "run" if last.state in _RUNNING else "pause"
        intervals.append((kind, last.time, max(now, last.time)))
    return intervals


def get_times(
    session: TaskSession,
    now: datetime,
    since: datetime | None = None,
    until: datetime | None = None,
) -> SessionTimes:
    """Compute elapsed and paused time of a session.

    Run intervals (after Started or Resumed) add to elapsed, pause
    intervals (after Paused) add to paused. When a window is given, only
    the part of each interval inside ``[since, until]`` counts.

    Args:
        session: Session to measure.
        now: End of the trailing interval of an open session.
        since: Optional window start.
        until: Optional window end.

    Returns:
        SessionTimes with the accumulated durations.

    Raises:
        CorruptSessionError: If the timeline breaks a session invariant.
    """
    lower = to_utc(since) if since is not None else None
    upper = to_utc(until) if until is not None else None

    elapsed = timedelta(0)
    pause = timedelta(0)
    for kind, start, end in session_intervals(session, now):
        if lower is not None:
            start = max(start, lower)
        if upper is not None:
            end = min(end, upper)
        if end <= start:
            continue
        if kind == "run":
            elapsed += end - start
        else:
            pause += end - start
    return SessionTimes(elapsed=elapsed, paused=pause)


def summarize_sessions(
    sessions: Iterable[TaskSession],
    now: datetime,
    since: datetime | None = None,
    until: datetime | None = None,
) -> list[TaskSummary]:
    """Total elapsed and paused time per task name inside a window.

    Sessions contributing nothing to the window are not counted; an event
    counts as inside only strictly between the bounds, as in
    ``EventFilter``. Results are sorted by elapsed time, longest first.
    """
    totals: dict[str, list] = {}
    for session in sessions:
        times = get_times(session, now, since, until)
        if times.total == timedelta(0) and not _touches(session, since, until):
            continue
        entry = totals.setdefault(session.name, [timedelta(0), timedelta(0), 0])
        entry[0] += times.elapsed
        entry[1] += times.paused
        entry[2] += 1

    summaries = [
        TaskSummary(name=name, elapsed=e, paused=p, sessions=n)
        for name, (e, p, n) in totals.items()
    ]
    summaries.sort(key=lambda s: s.elapsed, reverse=True)
    return summaries


def _touches(
    session: TaskSession,
    since: datetime | None,
    until: datetime | None,
) -> bool:
    lower = to_utc(since) if since is not None else None
    upper = to_utc(until) if until is not None else None
    return any(
        (lower is None or e.time > lower) and (upper is None or e.time < upper)
        for e in session.events
    )
