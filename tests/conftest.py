"""
Pytest configuration and shared fixtures.

Provides an in-memory stand-in for the database handle so the API can be
exercised without a PostgreSQL server.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

from applog.config import DatabaseSettings, Settings, get_settings
from applog.main import create_app

MANAGED_ENV_VARS = [
    "APPLOG_PROFILE",
    "APPLOG_HOST",
    "APPLOG_LOG_LEVEL",
    "APPLOG_EXPOSE_ERROR_DETAIL",
    "APPLOG_CORS_ORIGINS",
    "APPLOG_DATABASE",
    "SQL_HOST",
    "SQL_PORT",
    "SQL_USER",
    "SQL_PASSWORD",
    "SQL_DB",
    "SQL_ADMIN_DB",
    "SQL_SSL",
    "SQL_POOL_MAX_SIZE",
    "SQL_POOL_MIN_SIZE",
    "SQL_POOL_IDLE_TIMEOUT_SECONDS",
    "DEBUG_SQL",
]


class FakeDatabase:
    """
    In-memory replacement for applog.core.database.Database.

    Understands the two request-time queries: the clock query and the
    INSERT ... RETURNING into AppLog. Set `fail_with` to make every call
    raise that exception.
    """

    def __init__(self, name: str = "hello_app") -> None:
        self.name = name
        self.rows: List[Dict[str, Any]] = []
        self.fail_with: Optional[BaseException] = None
        self.closed = False
        self._next_id = 1

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        self._check()
        if "now()" in sql:
            return datetime.now(timezone.utc)
        raise AssertionError(f"unexpected query: {sql}")

    async def fetch_one(self, sql: str, *args: Any) -> Optional[Dict[str, Any]]:
        self._check()
        if sql.strip().startswith("INSERT INTO"):
            message, client_ip, user_agent = args
            row = {
                "Id": self._next_id,
                "Message": message,
                "CreatedAt": datetime.now(timezone.utc),
                "ClientIp": client_ip,
                "UserAgent": user_agent,
            }
            self._next_id += 1
            self.rows.append(row)
            return {"Id": row["Id"], "CreatedAt": row["CreatedAt"]}
        raise AssertionError(f"unexpected query: {sql}")

    async def execute(self, sql: str, *args: Any) -> str:
        self._check()
        raise AssertionError(f"unexpected statement: {sql}")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[pytest.MonkeyPatch, None, None]:
    """
    Remove every variable the service reads, and undo anything written to
    os.environ during the test (the config file loader writes there).
    """
    for name in MANAGED_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr("applog.config.load_config_file", lambda config_path=None: {})
    get_settings.cache_clear()
    yield monkeypatch
    get_settings.cache_clear()


@pytest.fixture
def database_settings() -> DatabaseSettings:
    return DatabaseSettings(
        host="db.internal",
        port=5432,
        user="applog",
        password="secret",
        db="hello_app",
    )


@pytest.fixture
def app_settings(isolated_env: pytest.MonkeyPatch, database_settings: DatabaseSettings) -> Settings:
    return Settings(database=database_settings)


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def test_client(app_settings: Settings, fake_database: FakeDatabase) -> Generator[TestClient, None, None]:
    """FastAPI test client backed by the in-memory database."""
    app = create_app(app_settings, fake_database)
    with TestClient(app) as client:
        yield client
