"""
Log table persistence helpers used by request handlers.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Optional

import asyncpg
import structlog

from ..models.log_entry import InsertedLog
from .database import Database
from .exceptions import DatabaseError
from .schema import log_table_name

logger = structlog.get_logger(__name__)

# Connection refused, pool closed, timeouts and server-side errors.
_DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class LogRepository:
    """Queries against the AppLog table through the shared pool."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def db_utc_now(self) -> datetime:
        """Current time according to the database server."""
        try:
            return await self.db.fetch_value("SELECT now() AS utc_now")
        except _DRIVER_ERRORS as e:
            raise DatabaseError(str(e), details={"operation": "health"}) from e

    async def insert(
        self,
        *,
        message: str,
        client_ip: Optional[str],
        user_agent: Optional[str],
    ) -> InsertedLog:
        """
        Insert one row; id and creation time come back from the INSERT itself.
        """
        try:
            row: Optional[dict[str, Any]] = await self.db.fetch_one(
                f"""
                INSERT INTO {log_table_name()} ("Message", "ClientIp", "UserAgent")
                VALUES ($1, $2, $3)
                RETURNING "Id", "CreatedAt"
                """,
                message,
                client_ip,
                user_agent,
            )
        except _DRIVER_ERRORS as e:
            raise DatabaseError(str(e), details={"operation": "insert"}) from e

        if row is None:
            raise DatabaseError("Insert returned no row.", details={"operation": "insert"})
        return InsertedLog(id=row["Id"], created_at=row["CreatedAt"])
