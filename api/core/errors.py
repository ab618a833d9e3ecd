"""
Fault taxonomy and the HTTP error translator.

All failures the gateway knows about are a single `GatewayError` tagged with a
`FaultKind`. The translator matches on the kind, not on the exception class:

- VALIDATION     -> 400 "Validation Error"
- AUTHENTICATION -> 401 "Authentication Error"
- DATABASE       -> carried status (500, or 503 when the store is not ready)
- UNEXPECTED     -> 500 "Internal Server Error" (message hidden outside development)
"""

from __future__ import annotations

import logging
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import config

logger = logging.getLogger(__name__)

REDACTED_MESSAGE = "An unexpected error occurred"


class FaultKind(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    DATABASE = "database"
    UNEXPECTED = "unexpected"


_LABELS = {
    FaultKind.VALIDATION: "Validation Error",
    FaultKind.AUTHENTICATION: "Authentication Error",
    FaultKind.DATABASE: "Database Error",
    FaultKind.UNEXPECTED: "Internal Server Error",
}

_DEFAULT_STATUS = {
    FaultKind.VALIDATION: 400,
    FaultKind.AUTHENTICATION: 401,
    FaultKind.DATABASE: 500,
    FaultKind.UNEXPECTED: 500,
}


class GatewayError(Exception):
    def __init__(
        self,
        kind: FaultKind,
        message: str,
        *,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code if status_code is not None else _DEFAULT_STATUS[kind]
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def label(self) -> str:
        return _LABELS[self.kind]


def validation_fault(message: str) -> GatewayError:
    return GatewayError(FaultKind.VALIDATION, message)


def authentication_fault(message: str = "Unauthorized") -> GatewayError:
    return GatewayError(FaultKind.AUTHENTICATION, message)


def database_fault(
    message: str,
    *,
    status_code: int = 500,
    cause: BaseException | None = None,
) -> GatewayError:
    return GatewayError(FaultKind.DATABASE, message, status_code=status_code, cause=cause)


def as_gateway_error(exc: BaseException) -> GatewayError:
    """
    Select the most specific kind for any exception.
    """
    if isinstance(exc, GatewayError):
        return exc
    if isinstance(exc, RequestValidationError):
        return validation_fault("Request body must be valid JSON.")
    return GatewayError(FaultKind.UNEXPECTED, str(exc) or exc.__class__.__name__, cause=exc)


def to_error_body(fault: GatewayError, *, development: bool | None = None) -> dict[str, str]:
    if development is None:
        development = config.is_development()

    message = fault.message
    if fault.kind is FaultKind.UNEXPECTED and not development:
        message = REDACTED_MESSAGE
    return {"error": fault.label, "message": message}


def register_error_handlers(app: FastAPI, *, development: bool | None = None) -> None:
    """
    Install the translator.

    Gateway and request-validation faults go through FastAPI exception handlers.
    Anything else is caught by an http middleware. Call this before adding
    CORS so unexpected 500s still pass through the CORS layer.
    """

    async def _handle(request: Request, exc: Exception) -> JSONResponse:
        fault = as_gateway_error(exc)
        dev = config.is_development() if development is None else development
        # Server-side log always carries the real message.
        logger.error(
            "query_failed kind=%s message=%s path=%s method=%s",
            fault.kind.value,
            fault.message,
            request.url.path,
            request.method,
            exc_info=exc if dev else None,
        )
        return JSONResponse(
            status_code=fault.status_code,
            content=to_error_body(fault, development=dev),
        )

    app.add_exception_handler(GatewayError, _handle)
    app.add_exception_handler(RequestValidationError, _handle)

    @app.middleware("http")
    async def _catch_unexpected(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return await _handle(request, exc)
