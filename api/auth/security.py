"""
Shared-secret token helpers.
"""

from __future__ import annotations

import hmac


def tokens_match(provided: str | None, expected: str | None) -> bool:
    """
    Constant-time comparison. An unset expected token never matches.
    """
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
