"""Shared fixtures: isolated gateway apps backed by a temp database file."""

from __future__ import annotations

from pathlib import Path

import pytest
from starlette.testclient import TestClient

from core.audit import QueryRecord
from core.store import Store
from main import create_app
from query.service import QueryGateway

API_TOKEN = "test-token"


class RecordingSink:
    def __init__(self) -> None:
        self.records: list[QueryRecord] = []

    def record(self, entry: QueryRecord) -> None:
        self.records.append(entry)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "test.sqlite"


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def gateway(db_path: Path, sink: RecordingSink) -> QueryGateway:
    gw = QueryGateway(db_path, audit_sink=sink)
    gw.open()
    yield gw
    gw.close()


@pytest.fixture
def store() -> Store:
    s = Store()
    s.open()
    yield s
    s.close()


@pytest.fixture
def app(db_path: Path, sink: RecordingSink):
    return create_app(db_file=db_path, api_token=API_TOKEN, audit_sink=sink, development=False)


@pytest.fixture
def client(app) -> TestClient:
    # Entering the context runs the lifespan, which opens the store.
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {API_TOKEN}"}
