"""
Auth dependency applied to every route.

A request is accepted when it presents the configured shared secret either as
`Authorization: Bearer <token>` or as an `x-api-token` header.
"""

from __future__ import annotations

from fastapi import Header, Request

from core.errors import authentication_fault

from . import security


def _extract_bearer_token(authorization: str | None) -> str | None:
    raw = (authorization or "").strip()
    if not raw:
        return None

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        return None

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        return None
    return token


def extract_token(authorization: str | None, x_api_token: str | None) -> str | None:
    return _extract_bearer_token(authorization) or ((x_api_token or "").strip() or None)


async def require_api_token(
    request: Request,
    authorization: str | None = Header(default=None),
    x_api_token: str | None = Header(default=None, alias="x-api-token"),
) -> None:
    token = extract_token(authorization, x_api_token)
    expected = getattr(request.app.state, "api_token", None)
    if not security.tokens_match(token, expected):
        raise authentication_fault("Invalid or missing API token")
