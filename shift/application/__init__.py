"""Application service layer for Shift.

Services orchestrate the pure domain functions around an explicitly
passed ``EventLog``.

Services:
    tracking_service - Commands that append to the log (start, stop,
        pause, resume, switch, undo, edit)
    report_service - Read models (status, sessions, events, summary)

Example usage:
    >>> from shift.application import start, stop
    >>> from shift.domain.shared import Ok
    >>>
    >>> result = start(log, "writing")
    >>> if isinstance(result, Ok):
    ...     print(f"Started session {result.value.session}")
"""

from shift.application.report_service import (
    DEFAULT_COUNT,
    events,
    query_sessions,
    status,
    summarize,
)
from shift.application.tracking_service import (
    Clock,
    edit_event,
    ongoing_sessions,
    pause,
    resume,
    start,
    stop,
    switch,
    undo,
)

__all__ = [
    # Tracking service
    "Clock",
    "ongoing_sessions",
    "start",
    "stop",
    "pause",
    "resume",
    "switch",
    "undo",
    "edit_event",
    # Report service
    "DEFAULT_COUNT",
    "status",
    "query_sessions",
    "events",
    "summarize",
]
