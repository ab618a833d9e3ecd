"""
Query API endpoint.
"""

from __future__ import annotations

import base64
import math
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from . import service

router = APIRouter()

# BLOB columns are returned as base64 text; inf and nan become null.
_ENCODERS = {
    bytes: lambda value: base64.b64encode(value).decode("ascii"),
    float: lambda value: value if math.isfinite(value) else None,
}


def get_gateway(request: Request) -> service.QueryGateway:
    return request.app.state.gateway


# Plain `def`: FastAPI runs it on the threadpool, the gateway lock serializes store access.
@router.post("/query")
def run_query(
    payload: Any = Body(default=None),
    gateway: service.QueryGateway = Depends(get_gateway),
) -> JSONResponse:
    """
    Execute raw SQL.

    Read statements return a list of row objects, everything else returns
    `{"success": true}` once the change is flushed to disk.
    """
    body = gateway.handle(payload)
    return JSONResponse(content=jsonable_encoder(body, custom_encoder=_ENCODERS))
