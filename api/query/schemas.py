"""
Pydantic schemas for the query endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, StrictStr


class QueryRequest(BaseModel):
    sql: StrictStr


class WriteAck(BaseModel):
    success: bool = True
