"""
Read/write routing for raw SQL text.

This is a keyword check on the first token, not a parser.
"""

from __future__ import annotations

from enum import Enum


class QueryKind(str, Enum):
    READ = "read"
    WRITE = "write"


READ_KEYWORDS = frozenset({"select", "show", "pragma"})


def classify(sql: str) -> QueryKind:
    tokens = (sql or "").split()
    if tokens and tokens[0].lower() in READ_KEYWORDS:
        return QueryKind.READ
    # Unknown or empty input takes the write path (and therefore persistence).
    return QueryKind.WRITE
