"""
Async database access helpers (raw SQL) using asyncpg.

`Database` wraps either the long-lived connection pool used by request
handlers or the short-lived admin connection used at startup. Both asyncpg
objects expose the same fetch/execute API, so callers do not care which one
they hold.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

import asyncpg
import structlog

from ..config import DatabaseSettings

logger = structlog.get_logger(__name__)
sql_logger = structlog.get_logger("applog.sql")

Executor = Union[asyncpg.Pool, asyncpg.Connection]


def quote_identifier(name: str) -> str:
    """
    Quote a SQL identifier (database, schema or table name).

    Identifiers cannot be bound as parameters, so they are wrapped in double
    quotes with embedded quotes doubled.
    """
    if not name or "\x00" in name:
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return '"' + name.replace('"', '""') + '"'


def _connect_kwargs(settings: DatabaseSettings, database: str) -> Dict[str, Any]:
    return {
        "host": settings.host,
        "port": settings.port,
        "user": settings.user,
        "password": settings.password,
        "database": database,
        "ssl": settings.ssl,
    }


class Database:
    """Thin wrapper over an asyncpg pool or connection."""

    def __init__(self, executor: Executor, *, name: str, echo_sql: bool = False) -> None:
        self._executor = executor
        self.name = name
        self.echo_sql = echo_sql

    @classmethod
    async def open_pool(cls, settings: DatabaseSettings) -> "Database":
        """Open the shared pool on the target database."""
        pool = await asyncpg.create_pool(
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            max_inactive_connection_lifetime=settings.pool_idle_timeout_seconds,
            **_connect_kwargs(settings, settings.db),
        )
        logger.info(
            "Database pool opened",
            database=settings.db,
            host=settings.host,
            max_size=settings.pool_max_size,
        )
        return cls(pool, name=settings.db, echo_sql=settings.echo_sql)

    @classmethod
    async def open_admin(cls, settings: DatabaseSettings) -> "Database":
        """Open a single connection to the administrative database."""
        conn = await asyncpg.connect(**_connect_kwargs(settings, settings.admin_db))
        return cls(conn, name=settings.admin_db, echo_sql=settings.echo_sql)

    def _log_sql(self, sql: str) -> None:
        if self.echo_sql:
            sql_logger.info("sql", database=self.name, statement=sql.strip())

    async def fetch_one(self, sql: str, *args: Any) -> Optional[Dict[str, Any]]:
        """
        Run a query and return a single row as a dict (or None).
        """
        self._log_sql(sql)
        row = await self._executor.fetchrow(sql, *args)
        return dict(row) if row is not None else None

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        """
        Run a query and return the first column of the first row.
        """
        self._log_sql(sql)
        return await self._executor.fetchval(sql, *args)

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/DDL). Returns the command status tag.
        """
        self._log_sql(sql)
        return await self._executor.execute(sql, *args)

    async def close(self) -> None:
        await self._executor.close()
        logger.info("Database handle closed", database=self.name)
