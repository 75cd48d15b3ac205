"""
Request dependencies shared by the API routers.
"""

from fastapi import Request

from ..core.repository import LogRepository


async def get_log_repository(request: Request) -> LogRepository:
    """Dependency to get a repository bound to the pool in app state."""
    return LogRepository(request.app.state.database)
