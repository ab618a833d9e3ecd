"""
Write-path persistence: flush the in-memory store to the database file.

Called synchronously after every successful write. The snapshot is written to
a temporary sibling file and moved over the target, so readers of the file
never see a partial image.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import tempfile
from pathlib import Path

from .errors import database_fault
from .store import Store

logger = logging.getLogger(__name__)


def _write_atomic(target: Path, data: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def persist(store: Store, path: str | Path) -> None:
    target = Path(path)
    try:
        data = store.snapshot()
    except sqlite3.Error as exc:
        raise database_fault(f"Failed to persist database: {exc}", cause=exc) from exc

    try:
        _write_atomic(target, data)
    except OSError as exc:
        raise database_fault(f"Failed to persist database: {exc}", cause=exc) from exc

    logger.debug("database_persisted path=%s bytes=%s", target, len(data))
