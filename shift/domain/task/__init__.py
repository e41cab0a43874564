"""Task domain - the event-sourced session model.

All exports are pure (no I/O, no side effects).

Key Types:
    TaskState - State tag of an event
    TaskEvent - Immutable fact in the event log
    TaskSession - Derived view of one task lifecycle
    SessionTimes - Elapsed / paused durations
    EventFilter - Event log query
    Selector - Identifier plus "all" flag

Reconstruction:
    group_events - Group a flat event stream into sessions
    get_times - Elapsed and paused time of a session
    summarize_sessions - Per-name totals inside a window

State machine:
    next_state - Apply a command to a session's latest state
    check_append - Build the event a command would append
    validate_sequence - Reject corrupt timelines

Disambiguation:
    resolve - Pick the target sessions of a command
"""

from .errors import (
    CommandError,
    CorruptSessionError,
    InvalidEdit,
    MultipleEvents,
    MultiplePauses,
    MultipleSessions,
    NoPauses,
    NoTasks,
    Ongoing,
    StorageError,
    TimeConflict,
    UpdateMismatch,
)
from .models import (
    EventFilter,
    SessionTimes,
    TaskEvent,
    TaskSession,
    TaskState,
    TaskSummary,
    new_id,
    to_utc,
    utc_now,
)
from .selection import Selector, matches, resolve
from .sessions import (
    get_times,
    group_events,
    ongoing,
    paused,
    running,
    session_intervals,
    summarize_sessions,
)
from .transitions import Command, check_append, next_state, validate_sequence

__all__ = [
    # Models
    "TaskState",
    "TaskEvent",
    "TaskSession",
    "SessionTimes",
    "EventFilter",
    "TaskSummary",
    "new_id",
    "to_utc",
    "utc_now",
    # Errors
    "CommandError",
    "CorruptSessionError",
    "Ongoing",
    "NoTasks",
    "NoPauses",
    "MultipleSessions",
    "MultiplePauses",
    "MultipleEvents",
    "TimeConflict",
    "InvalidEdit",
    "UpdateMismatch",
    "StorageError",
    # Reconstruction
    "group_events",
    "ongoing",
    "running",
    "paused",
    "session_intervals",
    "get_times",
    "summarize_sessions",
    # State machine
    "Command",
    "next_state",
    "check_append",
    "validate_sequence",
    # Disambiguation
    "Selector",
    "matches",
    "resolve",
]
