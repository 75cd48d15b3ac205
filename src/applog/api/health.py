"""
Health check endpoint.

- /api/health: asks the database for its current time
"""

import structlog
from fastapi import APIRouter, Depends

from ..core.repository import LogRepository
from ..models.log_entry import ErrorResponse, HealthResponse
from .dependencies import get_log_repository

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Database unreachable"},
    },
    summary="Database health check",
    description="""
    Issues a trivial query and returns the database server's current UTC time.

    A failing database only fails this request; the service keeps running.
    """,
)
async def health_check(repository: LogRepository = Depends(get_log_repository)) -> HealthResponse:
    db_utc_now = await repository.db_utc_now()
    return HealthResponse(db_utc_now=db_utc_now)
