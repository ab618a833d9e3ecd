"""Tests for core.errors: taxonomy and HTTP translation."""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.testclient import TestClient

from core.errors import (
    REDACTED_MESSAGE,
    FaultKind,
    GatewayError,
    as_gateway_error,
    authentication_fault,
    database_fault,
    register_error_handlers,
    to_error_body,
    validation_fault,
)


class TestTaxonomy:
    def test_default_statuses(self) -> None:
        assert validation_fault("bad").status_code == 400
        assert authentication_fault().status_code == 401
        assert database_fault("boom").status_code == 500
        assert database_fault("not ready", status_code=503).status_code == 503

    def test_cause_is_preserved(self) -> None:
        original = ValueError("low level")
        fault = database_fault("Database query failed: low level", cause=original)
        assert fault.cause is original
        assert fault.__cause__ is original

    def test_unknown_exceptions_are_unexpected(self) -> None:
        fault = as_gateway_error(KeyError("x"))
        assert fault.kind is FaultKind.UNEXPECTED
        assert fault.status_code == 500

    def test_gateway_errors_pass_through(self) -> None:
        fault = validation_fault("bad")
        assert as_gateway_error(fault) is fault

    @pytest.mark.parametrize(
        ("fault", "label"),
        [
            (validation_fault("m"), "Validation Error"),
            (authentication_fault("m"), "Authentication Error"),
            (database_fault("m"), "Database Error"),
            (GatewayError(FaultKind.UNEXPECTED, "m"), "Internal Server Error"),
        ],
    )
    def test_labels(self, fault: GatewayError, label: str) -> None:
        assert to_error_body(fault, development=True) == {"error": label, "message": "m"}

    def test_unexpected_message_redacted_outside_development(self) -> None:
        fault = GatewayError(FaultKind.UNEXPECTED, "secret detail")
        assert to_error_body(fault, development=False)["message"] == REDACTED_MESSAGE
        assert to_error_body(fault, development=True)["message"] == "secret detail"

    def test_database_message_not_redacted(self) -> None:
        fault = database_fault("Database query failed: no such table: t")
        assert to_error_body(fault, development=False)["message"] == fault.message


def _app(development: bool) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app, development=development)

    @app.get("/db")
    def db_error() -> dict:
        raise database_fault("Database not initialized", status_code=503)

    @app.get("/crash")
    def crash() -> dict:
        raise RuntimeError("internal detail")

    @app.post("/json")
    def json_body(payload: dict) -> dict:
        return payload

    return app


class TestTranslator:
    def test_gateway_error_response(self, caplog: pytest.LogCaptureFixture) -> None:
        client = TestClient(_app(development=False))
        with caplog.at_level(logging.ERROR, logger="core.errors"):
            resp = client.get("/db")
        assert resp.status_code == 503
        assert resp.json() == {"error": "Database Error", "message": "Database not initialized"}
        assert "kind=database" in caplog.text
        assert "path=/db" in caplog.text
        assert "method=GET" in caplog.text

    def test_unexpected_error_is_redacted(self, caplog: pytest.LogCaptureFixture) -> None:
        client = TestClient(_app(development=False), raise_server_exceptions=False)
        with caplog.at_level(logging.ERROR, logger="core.errors"):
            resp = client.get("/crash")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal Server Error", "message": REDACTED_MESSAGE}
        # The real message is still logged server-side.
        assert "internal detail" in caplog.text

    def test_unexpected_error_shown_in_development(self) -> None:
        client = TestClient(_app(development=True), raise_server_exceptions=False)
        resp = client.get("/crash")
        assert resp.status_code == 500
        assert resp.json()["message"] == "internal detail"

    def test_request_validation_maps_to_validation_fault(self) -> None:
        client = TestClient(_app(development=False))
        resp = client.post("/json", content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation Error"

    def test_unexpected_error_is_not_reraised(self) -> None:
        # Default client re-raises anything that escapes the app.
        resp = TestClient(_app(development=False)).get("/crash")
        assert resp.status_code == 500
        assert resp.json()["error"] == "Internal Server Error"

    def test_unexpected_error_keeps_cors_headers(self) -> None:
        app = _app(development=False)
        app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
        resp = TestClient(app).get("/crash", headers={"Origin": "http://example.test"})
        assert resp.status_code == 500
        assert resp.headers["access-control-allow-origin"] == "*"
