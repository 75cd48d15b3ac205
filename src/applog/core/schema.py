"""
Startup schema initialization.

Runs once per process, before the HTTP server binds its port:
1. Create the target database through the admin database if it is missing
2. Open the shared pool on the target database
3. Create the AppLog table if it is missing
4. Insert the seed row if the table is empty

Every step is guarded by an existence check, so re-running against an
initialized database changes nothing. There is no locking: two processes
starting against the same empty server at once may race.
"""

from typing import Awaitable, Callable, Optional

import asyncpg
import structlog

from ..config import DatabaseSettings
from .database import Database, quote_identifier
from .exceptions import SchemaInitError

logger = structlog.get_logger(__name__)

LOG_TABLE = "AppLog"
LOG_SCHEMA = "public"
SEED_MESSAGE = "Hello from auto-seed!"

MESSAGE_MAX_LENGTH = 4000
CLIENT_IP_MAX_LENGTH = 45
USER_AGENT_MAX_LENGTH = 512

DatabaseOpener = Callable[[DatabaseSettings], Awaitable[Database]]


def log_table_name() -> str:
    return f"{quote_identifier(LOG_SCHEMA)}.{quote_identifier(LOG_TABLE)}"


def create_table_sql() -> str:
    return f"""
CREATE TABLE IF NOT EXISTS {log_table_name()} (
    "Id" INTEGER GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
    "Message" VARCHAR({MESSAGE_MAX_LENGTH}) NOT NULL,
    "CreatedAt" TIMESTAMPTZ NOT NULL DEFAULT now(),
    "ClientIp" VARCHAR({CLIENT_IP_MAX_LENGTH}) NULL,
    "UserAgent" VARCHAR({USER_AGENT_MAX_LENGTH}) NULL
)
"""


async def ensure_database(admin: Database, name: str) -> bool:
    """
    Create database `name` unless it exists.

    Returns True when the database was created by this call.
    """
    exists = await admin.fetch_value("SELECT 1 FROM pg_database WHERE datname = $1", name)
    if exists:
        logger.info("Database already exists", database=name)
        return False

    logger.info("Creating database", database=name)
    try:
        await admin.execute(f"CREATE DATABASE {quote_identifier(name)}")
    except asyncpg.DuplicateDatabaseError:
        # Created by another process between the check and the create
        logger.info("Database created concurrently", database=name)
        return False
    return True


async def ensure_log_table(db: Database) -> bool:
    """
    Create the AppLog table unless it exists.

    Returns True when the table was created by this call.
    """
    exists = await db.fetch_value(
        """
        SELECT EXISTS (
            SELECT 1 FROM information_schema.tables
            WHERE table_schema = $1 AND table_name = $2
        )
        """,
        LOG_SCHEMA,
        LOG_TABLE,
    )
    if exists:
        return False

    logger.info("Creating log table", table=LOG_TABLE)
    await db.execute(create_table_sql())
    return True


async def seed_log_table(db: Database) -> bool:
    """
    Insert the seed row when the table is empty.

    Returns True when a row was inserted.
    """
    count = await db.fetch_value(f"SELECT COUNT(*) FROM {log_table_name()}")
    if count:
        return False

    await db.execute(
        f'INSERT INTO {log_table_name()} ("Message") VALUES ($1)',
        SEED_MESSAGE,
    )
    logger.info("Seed row inserted", table=LOG_TABLE)
    return True


async def migrate_and_seed(
    settings: DatabaseSettings,
    open_admin: Optional[DatabaseOpener] = None,
    open_pool: Optional[DatabaseOpener] = None,
) -> Database:
    """
    Run the full startup sequence and return the open pool.

    Any failure is wrapped in SchemaInitError; the pool is closed before the
    error propagates so a failed start leaves nothing open.
    """
    open_admin = open_admin or Database.open_admin
    open_pool = open_pool or Database.open_pool

    try:
        admin = await open_admin(settings)
        try:
            await ensure_database(admin, settings.db)
        finally:
            await admin.close()
    except Exception as e:
        raise SchemaInitError(
            f"failed to ensure database {settings.db!r}: {e}",
            details={"step": "database", "error_type": type(e).__name__},
        ) from e

    try:
        db = await open_pool(settings)
    except Exception as e:
        raise SchemaInitError(
            f"failed to connect to database {settings.db!r}: {e}",
            details={"step": "connect", "error_type": type(e).__name__},
        ) from e

    step = "table"
    try:
        await ensure_log_table(db)
        step = "seed"
        await seed_log_table(db)
    except Exception as e:
        await db.close()
        raise SchemaInitError(
            f"failed to initialize {LOG_TABLE} ({step}): {e}",
            details={"step": step, "error_type": type(e).__name__},
        ) from e

    logger.info("Schema initialization complete", database=settings.db, table=LOG_TABLE)
    return db
