"""SQLite connection handle with Result-based error handling.

Owns the single connection to the event database. The handle is created
once per process (or per test) and passed explicitly to the repositories
that need it; there is no module-level connection.
"""

import logging
import sqlite3
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from shift.domain.shared import Err, Ok, Result
from shift.domain.task import StorageError

logger = logging.getLogger(__name__)

MEMORY = ":memory:"

# Fixed width, UTC only: lexical order equals chronological order.
TIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS task_events (
        id TEXT PRIMARY KEY NOT NULL,
        name TEXT NOT NULL,
        session TEXT NOT NULL,
        state TEXT NOT NULL,
        time TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_task_events_time ON task_events(time)",
    "CREATE INDEX IF NOT EXISTS idx_task_events_session ON task_events(session)",
)


def encode_time(value: datetime) -> str:
    return value.astimezone(UTC).strftime(TIME_FORMAT)


def decode_time(value: str) -> datetime:
    return datetime.fromisoformat(value)


class SqliteStorage:
    """Low-level SQLite access returning Result types.

    Example:
        storage = SqliteStorage(":memory:")
        storage.init_schema()
        result = storage.fetch_all("SELECT COUNT(*) AS c FROM task_events")
        if isinstance(result, Ok):
            print(result.value[0]["c"])
    """

    def __init__(self, path: str | Path = MEMORY) -> None:
        """Open the database.

        Args:
            path: Database file, or ":memory:" for an isolated in-memory
                store. Parent directories of a file path are created.
        """
        self.path = str(path)
        if self.path != MEMORY:
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.path)
        self.conn.row_factory = sqlite3.Row
        logger.debug(f"Opened event database {self.path}")

    def init_schema(self) -> Result[None, StorageError]:
        """Create the event table and its indexes if they are missing."""
        try:
            with self.conn:
                for statement in SCHEMA:
                    self.conn.execute(statement)
            return Ok(None)
        except sqlite3.Error as e:
            logger.error(f"Could not initialise schema in {self.path}: {e}")
            return Err(StorageError(f"Could not initialise {self.path}: {e}"))

    def fetch_all(
        self,
        sql: str,
        params: Sequence[Any] = (),
    ) -> Result[list[sqlite3.Row], StorageError]:
        """Run a read query and return every row."""
        try:
            return Ok(self.conn.execute(sql, params).fetchall())
        except sqlite3.Error as e:
            logger.error(f"Query failed: {e}")
            return Err(StorageError(f"Query failed: {e}"))

    def write(self, sql: str, params: Sequence[Any] = ()) -> Result[int, StorageError]:
        """Run one write statement in its own transaction.

        Returns:
            Ok(number of affected rows), or Err if the statement failed
            and was rolled back.
        """
        try:
            with self.conn:
                cursor = self.conn.execute(sql, params)
            return Ok(cursor.rowcount)
        except sqlite3.Error as e:
            logger.error(f"Write failed: {e}")
            return Err(StorageError(f"Write failed: {e}"))

    def close(self) -> None:
        self.conn.close()
