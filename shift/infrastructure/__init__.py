"""Infrastructure layer for Shift.

Wraps I/O behind clean interfaces that return Result monads.

Exports:
    Storage:
        - SqliteStorage: Low-level SQLite access
        - EventLog: Task event persistence
"""

from shift.infrastructure.storage import EventLog, SqliteStorage

__all__ = [
    "SqliteStorage",
    "EventLog",
]
