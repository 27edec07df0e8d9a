"""SQLite storage adapter.

Implements the core StoragePort using a simple SQLite database.
"""

from __future__ import annotations

import functools
import sqlite3
from datetime import datetime, timezone
from typing import Iterable, List

from core.errors import StoreError
from core.models import SubscriberEndpoint


def _wrap_sqlite_errors(method):
    """Re-raise sqlite3 errors as StoreError so the core sees one error type."""

    @functools.wraps(method)
    def wrapper(*args, **kwargs):
        try:
            return method(*args, **kwargs)
        except sqlite3.Error as exc:
            raise StoreError(f"{method.__name__} failed: {exc}") from exc

    return wrapper


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StoragePort contract.

    A fresh connection is opened per call, so the adapter is safe to use from
    worker threads and concurrent dispatch tasks.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @_wrap_sqlite_errors
    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - dispatched_events: ids of events already handed to the dispatcher
        - endpoints: subscriber webhook URLs
        """

        with self._connect() as conn:
            # dispatched_events only grows; an id here is never sent again.
            # Fields:
            # - event_id: feed event id (PRIMARY KEY)
            # - recorded_at: when the watcher first accepted the event
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS dispatched_events (
                    event_id TEXT PRIMARY KEY,
                    recorded_at TIMESTAMP NOT NULL
                )
                """
            )
            # endpoints is the live subscriber list. Rows are removed when the
            # remote side reports the webhook as gone (HTTP 404).
            # Fields:
            # - url: webhook URL (PRIMARY KEY)
            # - added_at: insertion time, used for stable delivery order
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS endpoints (
                    url TEXT PRIMARY KEY,
                    added_at TIMESTAMP NOT NULL
                )
                """
            )

    @_wrap_sqlite_errors
    def contains_event_id(self, event_id: str) -> bool:
        """Check if an event id has already been dispatched."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM dispatched_events WHERE event_id = ?",
                (event_id,),
            ).fetchone()
        return row is not None

    @_wrap_sqlite_errors
    def record_event_id(self, event_id: str) -> None:
        """Insert an event id if it does not exist."""

        now = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO dispatched_events (event_id, recorded_at)
                VALUES (?, ?)
                """,
                (event_id, now.isoformat()),
            )

    @_wrap_sqlite_errors
    def dispatched_event_ids(self) -> set[str]:
        """Return every dispatched event id."""

        with self._connect() as conn:
            rows = conn.execute("SELECT event_id FROM dispatched_events").fetchall()
        return {row["event_id"] for row in rows}

    @_wrap_sqlite_errors
    def count_dispatched(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) AS total FROM dispatched_events").fetchone()
        return int(row["total"])

    @_wrap_sqlite_errors
    def list_endpoints(self) -> List[SubscriberEndpoint]:
        """Return all endpoints in insertion order."""

        with self._connect() as conn:
            rows = conn.execute("SELECT url FROM endpoints ORDER BY added_at, url").fetchall()
        return [SubscriberEndpoint(url=row["url"]) for row in rows]

    @_wrap_sqlite_errors
    def add_endpoints(self, urls: Iterable[str]) -> None:
        """Insert endpoints, ignoring ones already present."""

        now = datetime.now(timezone.utc).isoformat()
        with self._connect() as conn:
            conn.executemany(
                "INSERT OR IGNORE INTO endpoints (url, added_at) VALUES (?, ?)",
                [(url, now) for url in urls],
            )

    @_wrap_sqlite_errors
    def remove_endpoint(self, url: str) -> None:
        """Delete an endpoint; removing a missing one is a no-op."""

        with self._connect() as conn:
            conn.execute("DELETE FROM endpoints WHERE url = ?", (url,))
