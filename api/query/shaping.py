"""
Turn engine result sets into JSON-ready row objects.
"""

from __future__ import annotations

from typing import Any

from core.store import ResultSet


def shape_rows(result_sets: list[ResultSet]) -> list[dict[str, Any]]:
    """
    Zip column names with each row of the first result set.

    Later result sets are ignored.
    """
    if not result_sets:
        return []

    first = result_sets[0]
    return [dict(zip(first.columns, row)) for row in first.rows]
