from fastapi import APIRouter
from fastapi.responses import JSONResponse

from query_gateway.core.errors import GENERIC_SUGGESTION
from query_gateway.core.health import liveness_check, readiness_check

router = APIRouter(prefix="/v1/get", tags=["utils"])


@router.get("/liveness", response_model=None)
async def liveness() -> bool | JSONResponse:
    """
    Liveness probe: is the process alive and responsive?

    Lightweight, no DB I/O. If this fails the container should be
    restarted by the orchestrator.
    """
    ok, failures = liveness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={"status": False, "checks": failures},
        )
    return True


@router.get("/health", response_model=None)
def health() -> JSONResponse:
    """
    Readiness probe: can the gateway handle traffic?

    Checks: metadata store + alembic migrations at head + credential keys.
    Returns 200 when all pass; 503 with the failing checks otherwise.
    """
    ok, failures = readiness_check()
    if not ok:
        return JSONResponse(
            status_code=503,
            content={
                "status": False,
                "message": "Service Unavailable",
                "suggestion": GENERIC_SUGGESTION,
                "failures": failures,
            },
        )
    return JSONResponse(content={"status": True, "failures": []})
