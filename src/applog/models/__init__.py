"""
Pydantic data models package.

Contains the API request/response models for log entries.
"""

from .log_entry import (
    DEFAULT_MESSAGE,
    ErrorResponse,
    HealthResponse,
    InsertedLog,
    LogCreateRequest,
    LogCreateResponse,
    normalize_message,
)

__all__ = [
    "DEFAULT_MESSAGE",
    "ErrorResponse",
    "HealthResponse",
    "InsertedLog",
    "LogCreateRequest",
    "LogCreateResponse",
    "normalize_message",
]
