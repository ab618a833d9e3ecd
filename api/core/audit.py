"""
Per-request query audit records.

The gateway hands one `QueryRecord` to the configured sink after every
execution, successful or not. The default sink writes a log line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryRecord:
    query: str
    kind: str
    success: bool
    execution_time_ms: float
    rows_affected: int | None = None
    last_insert_id: int | None = None
    error: str | None = None


class AuditSink(Protocol):
    def record(self, entry: QueryRecord) -> None: ...


class LoggingAuditSink:
    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def record(self, entry: QueryRecord) -> None:
        parts = [
            f"kind={entry.kind}",
            f"status={'success' if entry.success else 'fail'}",
            f"time_ms={entry.execution_time_ms:.2f}",
        ]
        if entry.rows_affected is not None:
            parts.append(f"rows_affected={entry.rows_affected}")
        if entry.last_insert_id is not None:
            parts.append(f"last_insert_id={entry.last_insert_id}")
        if entry.error:
            parts.append(f"error={entry.error!r}")
        parts.append(f"query={entry.query!r}")
        self._log.info("query_executed %s", " ".join(parts))
