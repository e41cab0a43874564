"""Report application service.

Read-only views over the event log: what is running now, which sessions
happened in a window, the raw events, and per-task totals.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from shift.domain.shared import Err, Ok, Result
from shift.domain.task import (
    CommandError,
    EventFilter,
    TaskEvent,
    TaskSession,
    TaskSummary,
    group_events,
    summarize_sessions,
    utc_now,
)
from shift.infrastructure.storage import EventLog

from .tracking_service import ongoing_sessions

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 10


def status(log: EventLog) -> Result[list[TaskSession], CommandError]:
    """Ongoing sessions, oldest first."""
    return ongoing_sessions(log)


def query_sessions(
    log: EventLog,
    since: datetime | None = None,
    until: datetime | None = None,
    names: Iterable[str] | None = None,
    count: int = DEFAULT_COUNT,
    all: bool = False,
) -> Result[list[TaskSession], CommandError]:
    """Sessions with at least one event inside the window, most recent first.

    Each session is returned with its complete timeline. ``count`` caps
    the result unless ``all`` is set or a name filter is given: an
    explicit selection overrides the default cap.

    Args:
        log: Event log to read.
        since: Exclusive lower time bound.
        until: Exclusive upper time bound.
        names: Optional task name allow-list.
        count: Default cap on the number of sessions.
        all: Return every matching session.
    """
    filter = EventFilter(since=since, until=until, names=list(names or []))
    result = log.session_events(filter)
    if isinstance(result, Err):
        return result

    sessions = group_events(result.value, descending=True)
    if filter.names:
        # A session renamed mid-way can pull in events of other names.
        sessions = [s for s in sessions if s.name in filter.names]
    if not all and not filter.names:
        sessions = sessions[:count]
    logger.debug(f"query_sessions returned {len(sessions)} session(s)")
    return Ok(sessions)


def events(
    log: EventLog,
    since: datetime | None = None,
    until: datetime | None = None,
    names: Iterable[str] | None = None,
    count: int | None = None,
) -> Result[list[TaskEvent], CommandError]:
    """Raw events, newest first. ``count`` of None means no cap."""
    return log.query(EventFilter(since=since, until=until, names=list(names or []), limit=count))


def summarize(
    log: EventLog,
    since: datetime | None = None,
    until: datetime | None = None,
    now: datetime | None = None,
) -> Result[list[TaskSummary], CommandError]:
    """Elapsed and paused time per task name inside ``[since, until]``.

    Sessions overlapping the window edges are clipped to it, so a task
    started yesterday and still running counts only its share of today.
    """
    now = now or utc_now()
    upper = until or now
    # Every event before the window end, so each session's prefix is complete.
    result = log.query(EventFilter(until=upper))
    if isinstance(result, Err):
        return result

    sessions = group_events(result.value, descending=True)
    return Ok(summarize_sessions(sessions, now, since, upper))
