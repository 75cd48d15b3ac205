"""
Configuration management.

Uses Pydantic Settings for environment variable handling and validation.
An optional config.yaml provides values for anything not already set in the
environment; the process environment always wins.
"""

import json
import os
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Optional, Type

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from .core.exceptions import ConfigurationError

# The HTTP server always listens here; only the bind address is configurable.
SERVER_PORT = 3000


def load_config_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    if config_path is None:
        possible_paths = [
            "config.yaml",
            "../config.yaml",
        ]

        for path in possible_paths:
            if os.path.exists(path):
                config_path = path
                break
        else:
            return {}

    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


class ConfigProfile(str, Enum):
    """How missing database settings are treated."""

    STRICT = "strict"
    DEVELOPMENT = "development"


class DatabaseSettings(BaseSettings):
    """
    Database connection settings.

    Host, port, user, password and database name have no defaults: a missing
    value is a fatal configuration error.
    """

    host: str = Field(description="Database server host")
    port: int = Field(description="Database server port")
    user: str = Field(description="Login name")
    password: str = Field(description="Login password")
    db: str = Field(description="Target database, created on startup if absent")

    debug_sql: str = Field(
        default="0",
        validation_alias="DEBUG_SQL",
        description="Set to '1' to log every issued statement",
    )
    admin_db: str = Field(default="postgres", description="Administrative database used to create the target")
    ssl: bool = Field(default=False, description="Use TLS for database connections")

    pool_max_size: int = Field(default=5, description="Maximum pooled connections")
    pool_min_size: int = Field(default=0, description="Connections kept open while idle")
    pool_idle_timeout_seconds: float = Field(default=30.0, description="Idle connection reclaim timeout")

    @property
    def echo_sql(self) -> bool:
        return self.debug_sql.strip() == "1"

    class Config:
        env_prefix = "SQL_"
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True
        extra = "ignore"


class DevelopmentDatabaseSettings(DatabaseSettings):
    """Database settings with local development defaults for every value."""

    host: str = Field(default="localhost", description="Database server host")
    port: int = Field(default=5432, description="Database server port")
    user: str = Field(default="postgres", description="Login name")
    password: str = Field(default="postgres", description="Login password")
    db: str = Field(default="hello_app", description="Target database, created on startup if absent")


_PROFILE_SETTINGS: Dict[ConfigProfile, Type[DatabaseSettings]] = {
    ConfigProfile.STRICT: DatabaseSettings,
    ConfigProfile.DEVELOPMENT: DevelopmentDatabaseSettings,
}


def _env_name(field_name: str) -> str:
    if field_name.lower() == "debug_sql":
        return "DEBUG_SQL"
    return f"SQL_{field_name.upper()}"


def load_database_settings(profile: ConfigProfile) -> DatabaseSettings:
    """
    Load database settings for the given profile.

    Raises ConfigurationError naming every missing or invalid variable.
    """
    settings_cls = _PROFILE_SETTINGS[profile]
    try:
        return settings_cls()
    except ValidationError as e:
        missing: List[str] = []
        invalid: List[str] = []
        for error in e.errors():
            name = _env_name(str(error["loc"][0])) if error["loc"] else "?"
            if error["type"] == "missing":
                missing.append(name)
            else:
                invalid.append(f"{name} ({error['msg']})")

        parts = []
        if missing:
            parts.append("missing required environment variables: " + ", ".join(missing))
        if invalid:
            parts.append("invalid values: " + ", ".join(invalid))
        raise ConfigurationError(
            "; ".join(parts),
            details={"profile": profile.value, "missing": missing},
        ) from e


class Settings(BaseSettings):
    """Main application settings."""

    profile: ConfigProfile = Field(default=ConfigProfile.STRICT, description="Database settings profile")
    host: str = Field(default="0.0.0.0", description="Bind address")
    log_level: str = Field(default="INFO", description="Log level")
    expose_error_detail: bool = Field(
        default=True,
        description="Return the underlying error text to clients on request failures",
    )
    cors_origins: List[str] = Field(default=["*"], description="Allowed CORS origins")

    database: Optional[DatabaseSettings] = Field(default=None, exclude=True)

    @property
    def port(self) -> int:
        return SERVER_PORT

    class Config:
        env_prefix = "APPLOG_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance with config file and env support."""
    config_data = load_config_file()

    # Config file provides defaults, env vars override
    if config_data:
        _set_env_from_config(config_data)

    try:
        settings = Settings()
    except ValidationError as e:
        raise ConfigurationError(f"invalid application settings: {e}") from e

    if settings.database is None:
        settings.database = load_database_settings(settings.profile)
    return settings


def _set_env_from_config(config_data: Dict[str, Any]) -> None:
    """Set environment variables from config file if not already set."""
    mappings = {
        ("server", "profile"): "APPLOG_PROFILE",
        ("server", "host"): "APPLOG_HOST",
        ("server", "log_level"): "APPLOG_LOG_LEVEL",
        ("server", "expose_error_detail"): "APPLOG_EXPOSE_ERROR_DETAIL",
        ("database", "host"): "SQL_HOST",
        ("database", "port"): "SQL_PORT",
        ("database", "user"): "SQL_USER",
        ("database", "password"): "SQL_PASSWORD",
        ("database", "db"): "SQL_DB",
        ("database", "admin_db"): "SQL_ADMIN_DB",
        ("database", "ssl"): "SQL_SSL",
        ("database", "debug_sql"): "DEBUG_SQL",
    }

    for (section, key), env_var in mappings.items():
        if env_var not in os.environ:
            value = (config_data.get(section) or {}).get(key)
            if value is not None:
                os.environ[env_var] = str(value)

    # Lists go through the environment as JSON
    if "APPLOG_CORS_ORIGINS" not in os.environ:
        origins = (config_data.get("server") or {}).get("cors_origins")
        if origins:
            os.environ["APPLOG_CORS_ORIGINS"] = json.dumps(origins)


def reload_settings() -> Settings:
    """Reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
