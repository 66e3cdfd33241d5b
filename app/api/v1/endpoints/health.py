"""Health check endpoints for liveness and readiness checks."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from app.core.config import get_settings
from app.infrastructure.persistence.database import check_connection
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessErrorResponse}},
)
async def readiness_check() -> ReadinessResponse | JSONResponse:
    """Return 200 if ready; 503 when the postgres backend cannot answer SELECT 1."""
    settings = get_settings()
    if settings.database_backend != "postgres":
        return ReadinessResponse(database=settings.database_backend)
    try:
        await check_connection()
    except Exception as exc:
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(
                message=f"Database unreachable: {type(exc).__name__}"
            ).model_dump(),
        )
    return ReadinessResponse(database="postgres")
