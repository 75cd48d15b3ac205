"""
Custom exceptions for the AppLog service.

Each exception carries the HTTP status and the error kind reported to
clients, plus optional details that are only written to the server log.
"""

from typing import Any, Dict, Optional


class AppLogException(Exception):
    """Base exception for AppLog service."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(AppLogException):
    """Raised when required settings are missing or invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="configuration_error",
            details=details,
        )


class SchemaInitError(AppLogException):
    """Raised when creating the database, the log table or the seed row fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="schema_init_error",
            details=details,
        )


class DatabaseError(AppLogException):
    """Raised when a query issued on behalf of a request fails."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="database_error",
            details=details,
        )
