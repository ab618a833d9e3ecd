"""
Query gateway: validate, classify, execute, persist, shape.

Flow for one request:
1) Validate the payload (`sql` must be a non-empty string)
2) Refuse with 503 until the store has been opened
3) Classify the statement as read or write
4) Under the store lock: execute (read) or apply + persist (write)
5) Emit one audit record, success or failure
"""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from core import persistence
from core.audit import AuditSink, QueryRecord
from core.errors import GatewayError, database_fault, validation_fault
from core.store import Store, WriteResult

from . import schemas
from .classifier import QueryKind, classify
from .shaping import shape_rows

logger = logging.getLogger(__name__)


def parse_request(payload: Any) -> schemas.QueryRequest:
    sql = payload.get("sql") if isinstance(payload, dict) else None
    if not sql:
        raise validation_fault("SQL query is required")

    try:
        request = schemas.QueryRequest.model_validate(payload)
    except ValidationError as exc:
        raise validation_fault("SQL query must be a string") from exc

    if not request.sql.strip():
        raise validation_fault("SQL query is required")
    return request


class QueryGateway:
    """
    Owns the store and serializes every access to it.
    """

    def __init__(
        self,
        db_file: str | Path,
        *,
        store: Store | None = None,
        audit_sink: AuditSink | None = None,
    ) -> None:
        self.db_file = Path(db_file)
        self.store = store or Store()
        self.audit_sink = audit_sink
        self._lock = threading.Lock()

    @property
    def is_initialized(self) -> bool:
        return self.store.is_open

    def open(self) -> None:
        with self._lock:
            self.store.open(self.db_file)

    def close(self) -> None:
        with self._lock:
            self.store.close()

    def handle(self, payload: Any) -> list[dict[str, Any]] | dict[str, Any]:
        request = parse_request(payload)
        if not self.is_initialized:
            raise database_fault("Database not initialized", status_code=503)

        kind = classify(request.sql)
        write: WriteResult | None = None
        success = False
        error: str | None = None
        started = time.perf_counter()
        try:
            if kind is QueryKind.READ:
                body: list[dict[str, Any]] | dict[str, Any] = shape_rows(self._read(request.sql))
            else:
                # Lock spans apply + persist so the file always matches the store.
                with self._lock:
                    write = self._apply(request.sql)
                    persistence.persist(self.store, self.db_file)
                body = schemas.WriteAck().model_dump()
            success = True
            return body
        except GatewayError as exc:
            error = exc.message
            raise
        except Exception as exc:
            error = str(exc)
            raise
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000.0
            self._audit(
                QueryRecord(
                    query=request.sql,
                    kind=kind.value,
                    success=success,
                    execution_time_ms=elapsed_ms,
                    rows_affected=write.rows_affected if write else None,
                    last_insert_id=write.last_insert_id if write else None,
                    error=error,
                )
            )

    def _read(self, sql: str):
        with self._lock:
            try:
                return self.store.execute(sql)
            except sqlite3.Error as exc:
                raise database_fault(f"Database query failed: {exc}", cause=exc) from exc

    def _apply(self, sql: str) -> WriteResult:
        try:
            return self.store.apply(sql)
        except sqlite3.Error as exc:
            raise database_fault(f"Database query failed: {exc}", cause=exc) from exc

    def _audit(self, entry: QueryRecord) -> None:
        if self.audit_sink is None:
            return
        # Audit failures never reach the caller.
        try:
            self.audit_sink.record(entry)
        except Exception:
            logger.exception("audit_failed kind=%s", entry.kind)
