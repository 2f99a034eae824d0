"""
Pydantic schemas for the gateway HTTP API.

Bodies are read leniently (see api.routes.queries): the batch endpoint accepts
any JSON, and the ad hoc endpoint reports shape problems as 400 with a
message/suggestion pair instead of FastAPI's default 422.
"""

from typing import Any

from pydantic import ConfigDict, Field
from sqlmodel import SQLModel


class ErrorBody(SQLModel):
    """Generic user-facing error pair."""

    message: str
    suggestion: str


class AdHocQueryIn(SQLModel):
    """Body for POST /v1/create/query."""

    model_config = ConfigDict(populate_by_name=True)

    database_name: str = Field(alias="databaseName")
    sql: str


class QueryDataResponse(SQLModel):
    """Per-query result map: rows on success, ErrorBody on failure."""

    data: dict[str, Any]
