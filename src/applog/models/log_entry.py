"""
Log entry data models.

- Message: trimmed text, empty input replaced by a default placeholder
- CreatedAt: assigned by the database at insert time, never by the client
- ClientIp / UserAgent: taken from request metadata, optional
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MESSAGE = "Hello from frontend"


def normalize_message(value: Any) -> str:
    """
    Convert a submitted message to stored text.

    None becomes empty, booleans are written the way JSON spells them, and
    anything that trims to nothing is replaced by DEFAULT_MESSAGE.
    """
    if value is None:
        text = ""
    elif isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    return text.strip() or DEFAULT_MESSAGE


class LogCreateRequest(BaseModel):
    """
    Body of POST /api/logs.

    Any JSON value is accepted for `message` and
    converted to text by normalize_message.
    """

    message: Optional[Any] = Field(default=None, description="Message to store")

    model_config = ConfigDict(extra="ignore")


class InsertedLog(BaseModel):
    """Values returned by the INSERT statement."""

    id: int
    created_at: datetime


class LogCreateResponse(BaseModel):
    """
    Response from log insertion endpoint.
    """

    ok: bool = True
    id: int = Field(description="Identifier of the new row")
    created_at: datetime = Field(alias="createdAt", description="Assigned creation time")

    model_config = ConfigDict(populate_by_name=True)


class HealthResponse(BaseModel):
    """
    Response from health endpoint.
    """

    ok: bool = True
    db_utc_now: datetime = Field(alias="dbUtcNow", description="Database server time")

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    ok: bool = False
    error: str = Field(description="Error text")
    kind: str = Field(description="Error kind code")
