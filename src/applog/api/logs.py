"""
Log insertion API endpoint.

Main endpoint: POST /api/logs
"""

from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import APIRouter, Body, Depends, Request

from ..core.repository import LogRepository
from ..models.log_entry import (
    ErrorResponse,
    LogCreateRequest,
    LogCreateResponse,
    normalize_message,
)
from .dependencies import get_log_repository

logger = structlog.get_logger(__name__)

router = APIRouter()


def client_ip_from(request: Request) -> Optional[str]:
    """Forwarded IP header first, then the socket peer address."""
    forwarded = request.headers.get("x-real-ip")
    if forwarded:
        return forwarded
    if request.client is not None and request.client.host:
        return request.client.host
    return None


@router.post(
    "/logs",
    response_model=LogCreateResponse,
    responses={
        500: {"model": ErrorResponse, "description": "Insert failed"},
    },
    summary="Store a log message",
    description="""
    Store one message in the AppLog table.

    - `message` is converted to text and trimmed; empty input stores a default placeholder
    - Client IP comes from `X-Real-IP`, falling back to the peer address
    - The creation time is assigned by the database
    """,
)
async def create_log(
    request: Request,
    payload: Optional[LogCreateRequest] = Body(default=None),
    repository: LogRepository = Depends(get_log_repository),
) -> LogCreateResponse:
    start_time = datetime.now(timezone.utc)

    message = normalize_message(payload.message if payload is not None else None)
    client_ip = client_ip_from(request)
    user_agent = request.headers.get("user-agent") or None

    inserted = await repository.insert(
        message=message,
        client_ip=client_ip,
        user_agent=user_agent,
    )

    logger.debug(
        "Log entry stored",
        id=inserted.id,
        client_ip=client_ip,
        processing_time_ms=(datetime.now(timezone.utc) - start_time).total_seconds() * 1000,
    )
    return LogCreateResponse(id=inserted.id, created_at=inserted.created_at)
