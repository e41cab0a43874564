"""Storage infrastructure for Shift.

Persistence for the task event log, using Result monads for explicit
error handling.
"""

from shift.infrastructure.storage.event_log import EventLog
from shift.infrastructure.storage.sqlite_storage import SqliteStorage

__all__ = [
    "EventLog",
    "SqliteStorage",
]
