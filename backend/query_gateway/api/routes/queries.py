"""
Query gateway endpoints.

- POST /v1/create/query-data: run the stored definitions selected by
  ``filterMap``; 200 with one entry per definition, even on partial failure.
- POST /v1/create/query: run ad hoc SQL against a named database.

The engine is blocking; handlers run it with asyncio.to_thread so the event
loop keeps serving other requests.
"""

import asyncio
import json
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from query_gateway.api.deps import CodecDep, RepositoryDep
from query_gateway.core.config import settings
from query_gateway.core.errors import ValidationError
from query_gateway.engines import BatchCoordinator, QueryEngine, serialize_results
from query_gateway.schemas import AdHocQueryIn, ErrorBody, QueryDataResponse

router = APIRouter(prefix="/v1/create", tags=["queries"])


async def _json_body(request: Request) -> Any:
    """Parsed JSON body, or None when the body is empty or not JSON."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _validate_adhoc(body: Any) -> AdHocQueryIn:
    if not isinstance(body, dict):
        raise ValidationError()
    if not isinstance(body.get("databaseName"), str):
        raise ValidationError(
            "Missing or invalid database name. Database name must be a string.",
            "Please provide a valid database name as a string in your request.",
        )
    if not isinstance(body.get("sql"), str):
        raise ValidationError(
            "Missing or invalid SQL query. SQL query must be a string.",
            "Please provide a valid SQL query as a string in your request.",
        )
    return AdHocQueryIn(databaseName=body["databaseName"], sql=body["sql"])


@router.post(
    "/query-data",
    response_model=QueryDataResponse,
)
async def create_query_data(
    request: Request, repository: RepositoryDep, codec: CodecDep
) -> JSONResponse:
    """Execute the selected query definitions concurrently and return their results by name."""
    body = await _json_body(request)
    coordinator = BatchCoordinator(
        repository,
        codec,
        request_timeout_ms=settings.BATCH_REQUEST_TIMEOUT_MS,
        max_workers=settings.BATCH_MAX_WORKERS,
    )
    results = await asyncio.to_thread(coordinator.execute_batch, body)
    return JSONResponse(content={"data": serialize_results(results)})


@router.post(
    "/query",
    responses={
        400: {"model": ErrorBody},
        404: {"model": ErrorBody},
        500: {"model": ErrorBody},
    },
)
async def create_query(
    request: Request, repository: RepositoryDep, codec: CodecDep
) -> JSONResponse:
    """Execute ad hoc SQL against the database named in the body and return its rows."""
    payload = _validate_adhoc(await _json_body(request))
    rows = await asyncio.to_thread(
        QueryEngine(repository, codec).run_adhoc, payload.database_name, payload.sql
    )
    return JSONResponse(content=rows)
