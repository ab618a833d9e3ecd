"""
Embedded SQLite store.

The whole database lives in one in-memory connection. It is loaded from the
database file on open (`Connection.deserialize`) and can be exported back to
bytes at any time (`Connection.serialize`), see `core/persistence.py`.

The connection is not safe for concurrent use; callers serialize access
(see `query/service.py`).
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultSet:
    columns: list[str]
    rows: list[tuple[Any, ...]]


@dataclass(frozen=True)
class WriteResult:
    rows_affected: int
    last_insert_id: int | None


def split_statements(sql: str) -> list[str]:
    """
    Split SQL text into complete statements.

    `sqlite3.complete_statement` decides where a statement ends, so semicolons
    inside string literals and comments do not split. A trailing statement
    without a semicolon is kept as is.
    """
    statements: list[str] = []
    start = 0
    for index, char in enumerate(sql):
        if char != ";":
            continue
        candidate = sql[start : index + 1]
        if sqlite3.complete_statement(candidate):
            if candidate.strip(" \t\r\n;"):
                statements.append(candidate)
            start = index + 1

    tail = sql[start:]
    if tail.strip():
        statements.append(tail)
    return statements


class Store:
    def __init__(self) -> None:
        self._conn: sqlite3.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self, path: str | Path | None = None) -> None:
        """
        Create the in-memory database, seeded from `path` when the file exists.
        """
        if self._conn is not None:
            return None

        # Used from FastAPI's threadpool, always under the gateway lock.
        conn = sqlite3.connect(":memory:", check_same_thread=False, isolation_level=None)
        source = Path(path) if path is not None else None
        try:
            if source is not None and source.exists():
                conn.deserialize(source.read_bytes())
            # Fails fast on a file that is not a SQLite image.
            conn.execute("PRAGMA schema_version").fetchone()
        except Exception:
            conn.close()
            raise

        self._conn = conn
        logger.info(
            "database_initialized source=%s",
            source if source is not None and source.exists() else "new database",
        )

    def close(self) -> None:
        if self._conn is None:
            return None
        self._conn.close()
        self._conn = None
        logger.info("database_closed")

    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Store is not open. Call open() on startup.")
        return self._conn

    def execute(self, sql: str) -> list[ResultSet]:
        """
        Run read statements and return one result set per statement that
        produced rows (empty when none did).
        """
        conn = self.connection()
        results: list[ResultSet] = []
        for statement in split_statements(sql):
            cursor = conn.execute(statement)
            try:
                rows = cursor.fetchall() if cursor.description is not None else []
                if rows:
                    columns = [str(d[0]) for d in cursor.description]
                    results.append(ResultSet(columns=columns, rows=rows))
            finally:
                cursor.close()
        return results

    def apply(self, sql: str) -> WriteResult:
        """
        Run a mutating statement (or script). No rows are returned.
        """
        conn = self.connection()
        before = conn.total_changes
        conn.executescript(sql)
        rows_affected = conn.total_changes - before
        # last_insert_rowid() is per connection; only trust it when this script changed rows.
        last_insert_id = None
        if rows_affected > 0:
            row = conn.execute("SELECT last_insert_rowid()").fetchone()
            last_insert_id = int(row[0]) if row and row[0] else None
        return WriteResult(rows_affected=rows_affected, last_insert_id=last_insert_id)

    def snapshot(self) -> bytes:
        return bytes(self.connection().serialize())
