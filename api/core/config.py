"""
Environment configuration.

Every setting is read through a small accessor so values are picked up at call
time (tests can monkeypatch the environment).
"""

from __future__ import annotations

import os

DEFAULT_PORT = 3005
DEFAULT_HOST = "0.0.0.0"
DEFAULT_DB_FILE = "data/database.sqlite"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def port() -> int:
    return _env_int("PORT", DEFAULT_PORT)


def host() -> str:
    return os.environ.get("HOST", DEFAULT_HOST).strip() or DEFAULT_HOST


def db_file() -> str:
    return os.environ.get("DB_FILE", DEFAULT_DB_FILE).strip() or DEFAULT_DB_FILE


def api_token() -> str | None:
    # No default: an unset token means every request is rejected.
    return os.environ.get("API_TOKEN", "").strip() or None


def query_log_enabled() -> bool:
    return _env_bool("QUERY_LOG")


def is_development() -> bool:
    return os.environ.get("APP_ENV", "").strip().lower() == "development"


def log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"


def cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ORIGINS", "*")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]
