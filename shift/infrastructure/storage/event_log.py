"""Append-only event log backed by SQLite.

Single source of truth for task history: one ``task_events`` table keyed
by event id. Reads come back newest first (``time`` then insertion order,
descending) unless stated otherwise.
"""

import logging
import sqlite3
from collections.abc import Sequence

from pydantic import ValidationError

from shift.domain.shared import Err, Ok, Result
from shift.domain.task import EventFilter, StorageError, TaskEvent

from .sqlite_storage import SqliteStorage, decode_time, encode_time

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, session, state, time"
_NEWEST_FIRST = "ORDER BY time DESC, rowid DESC"


def _row_to_event(row: sqlite3.Row) -> TaskEvent:
    return TaskEvent(
        id=row["id"],
        name=row["name"],
        session=row["session"],
        state=row["state"],
        time=decode_time(row["time"]),
    )


def _placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values)


class EventLog:
    """Repository for ``TaskEvent`` records.

    Wraps ``SqliteStorage`` and converts rows to domain events. Callers get
    fresh ``TaskEvent`` objects; nothing returned aliases stored state.
    """

    def __init__(self, storage: SqliteStorage) -> None:
        self._storage = storage

    @classmethod
    def open(cls, path: str = ":memory:") -> Result["EventLog", StorageError]:
        """Open (and if needed create) an event log at ``path``."""
        try:
            storage = SqliteStorage(path)
        except (sqlite3.Error, OSError) as e:
            return Err(StorageError(f"Could not open {path}: {e}"))
        result = storage.init_schema()
        if isinstance(result, Err):
            return result
        return Ok(cls(storage))

    def close(self) -> None:
        self._storage.close()

    # ---- writes ----

    def append(self, event: TaskEvent) -> Result[int, StorageError]:
        """Insert one event atomically.

        Returns:
            Ok(number of rows inserted, expected to be 1) or Err.
        """
        result = self._storage.write(
            f"INSERT INTO task_events ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
            (event.id, event.name, event.session, event.state.value, encode_time(event.time)),
        )
        if isinstance(result, Ok):
            logger.info(f"Appended {event.state.value} for '{event.name}' ({event.session})")
        return result

    def delete_latest(self) -> Result[int, StorageError]:
        """Delete every event sharing the log's maximum timestamp.

        Events written by one batch command share a timestamp, so they go
        together. Unrelated events that happen to share it go too.
        """
        result = self._storage.write(
            "DELETE FROM task_events WHERE time = (SELECT MAX(time) FROM task_events)"
        )
        if isinstance(result, Ok):
            logger.info(f"Deleted {result.value} latest event(s)")
        return result

    def replace(self, event: TaskEvent) -> Result[int, StorageError]:
        """Overwrite the stored event with the same id."""
        result = self._storage.write(
            "UPDATE task_events SET name = ?, session = ?, state = ?, time = ? WHERE id = ?",
            (event.name, event.session, event.state.value, encode_time(event.time), event.id),
        )
        if isinstance(result, Ok):
            logger.info(f"Replaced event {event.id}")
        return result

    def rename_session(self, session_id: str, name: str) -> Result[int, StorageError]:
        """Set ``name`` on every event of a session."""
        result = self._storage.write(
            "UPDATE task_events SET name = ? WHERE session = ?",
            (name, session_id),
        )
        if isinstance(result, Ok):
            logger.info(f"Renamed session {session_id} to '{name}' ({result.value} rows)")
        return result

    # ---- reads ----

    def query(self, filter: EventFilter | None = None) -> Result[list[TaskEvent], StorageError]:
        """Events matching ``filter``, newest first.

        The name allow-list is applied before the count cap.
        """
        filter = filter or EventFilter()
        where, params = self._where(filter)
        sql = f"SELECT {_COLUMNS} FROM task_events {where} {_NEWEST_FIRST} LIMIT ?"
        params.append(-1 if filter.limit is None else filter.limit)
        logger.debug(f"Event query: {sql} {params}")
        return self._events(sql, params)

    def ongoing_events(self) -> Result[list[TaskEvent], StorageError]:
        """Every event of every session without a Stopped event, oldest first.

        The "not stopped" test is a correlated check against the whole
        table, so it holds no matter how the caller pages the result.
        """
        sql = f"""
            SELECT {_COLUMNS} FROM task_events AS e
            WHERE NOT EXISTS (
                SELECT 1 FROM task_events AS s
                WHERE s.session = e.session AND s.state = 'Stopped'
            )
            ORDER BY time ASC, rowid ASC
        """
        return self._events(sql, [])

    def session_events(self, filter: EventFilter) -> Result[list[TaskEvent], StorageError]:
        """All events of the sessions that have an event matching ``filter``.

        Unlike ``query`` this returns whole sessions, even the parts that
        fall outside the time window. ``filter.limit`` is ignored.
        """
        where, params = self._where(filter)
        sql = f"""
            SELECT {_COLUMNS} FROM task_events
            WHERE session IN (SELECT session FROM task_events {where})
            {_NEWEST_FIRST}
        """
        return self._events(sql, params)

    def find(self, id_suffix: str) -> Result[list[TaskEvent], StorageError]:
        """Events whose id ends with ``id_suffix``, newest first."""
        escaped = id_suffix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        sql = f"SELECT {_COLUMNS} FROM task_events WHERE id LIKE ? ESCAPE '\\' {_NEWEST_FIRST}"
        return self._events(sql, [f"%{escaped}"])

    def latest(self) -> Result[TaskEvent | None, StorageError]:
        result = self.query(EventFilter(limit=1))
        if isinstance(result, Err):
            return result
        return Ok(result.value[0] if result.value else None)

    def sessions_by_id(self, session_ids: Sequence[str]) -> Result[list[TaskEvent], StorageError]:
        """All events of the given sessions, newest first."""
        if not session_ids:
            return Ok([])
        sql = (
            f"SELECT {_COLUMNS} FROM task_events "
            f"WHERE session IN ({_placeholders(session_ids)}) {_NEWEST_FIRST}"
        )
        return self._events(sql, list(session_ids))

    # ---- helpers ----

    @staticmethod
    def _where(filter: EventFilter) -> tuple[str, list]:
        clauses: list[str] = []
        params: list = []
        if filter.since is not None:
            clauses.append("time > ?")
            params.append(encode_time(filter.since))
        if filter.until is not None:
            clauses.append("time < ?")
            params.append(encode_time(filter.until))
        if filter.names:
            clauses.append(f"name IN ({_placeholders(filter.names)})")
            params.extend(filter.names)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def _events(self, sql: str, params: Sequence) -> Result[list[TaskEvent], StorageError]:
        result = self._storage.fetch_all(sql, params)
        if isinstance(result, Err):
            return result
        try:
            return Ok([_row_to_event(row) for row in result.value])
        except (ValidationError, ValueError) as e:
            logger.error(f"Unreadable event row: {e}")
            return Err(StorageError(f"Event log is corrupt, could not read row: {e}"))
