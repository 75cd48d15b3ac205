"""
Main FastAPI application entry point.

This module sets up the FastAPI app with all middleware, routes, and lifecycle
events, and owns the process startup sequence: settings, then schema
initialization, then the HTTP server.
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import health_router, logs_router
from .config import Settings, get_settings
from .core.database import Database
from .core.exceptions import AppLogException, ConfigurationError, SchemaInitError
from .core.middleware import AccessLogMiddleware, SecurityHeadersMiddleware
from .core.schema import migrate_and_seed

logger = structlog.get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


def configure_logging(log_level: str = "INFO") -> None:
    """Configure structured logging for the application."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_lifespan_handler(database: Database) -> Any:
    """Create a lifespan handler that owns the already-initialized pool."""
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("AppLog service started", version=app.version, database=database.name)
        try:
            yield
        finally:
            logger.info("Shutting down AppLog service")
            await database.close()

    return lifespan


async def applog_exception_handler(request: Request, exc: AppLogException) -> JSONResponse:
    """Convert service exceptions to the {ok: false} error body."""
    logger.error(
        "Request failed",
        error=str(exc),
        error_code=exc.error_code,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method,
        **exc.details,
    )

    settings: Settings = request.app.state.settings
    error = str(exc) if settings.expose_error_detail else GENERIC_ERROR_MESSAGE

    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": error, "kind": exc.error_code},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        "Unexpected exception occurred",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": GENERIC_ERROR_MESSAGE, "kind": "internal_error"},
    )


def create_app(settings: Settings, database: Database) -> FastAPI:
    """
    Create and configure the FastAPI application.

    `database` must already be initialized; handlers reach it through
    app.state and never see an unopened pool.
    """
    app = FastAPI(
        title="AppLog",
        description="Stores client log messages in the AppLog table",
        version=__version__,
        lifespan=create_lifespan_handler(database),
    )
    app.state.settings = settings
    app.state.database = database

    # Added innermost first: access log wraps everything
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(AccessLogMiddleware)

    app.add_exception_handler(AppLogException, applog_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(logs_router, prefix="/api", tags=["logs"])

    return app


async def serve(settings: Settings) -> None:
    """Initialize the schema, then run the HTTP server on the same event loop."""
    database = await migrate_and_seed(settings.database)
    app = create_app(settings, database)

    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(config)
    logger.info("Backend listening", host=settings.host, port=settings.port)
    await server.serve()


def main() -> None:
    """Process entry point. Exits with status 1 if startup fails."""
    try:
        settings = get_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("Startup error", error=str(e), **e.details)
        sys.exit(1)

    configure_logging(settings.log_level)

    try:
        asyncio.run(serve(settings))
    except SchemaInitError as e:
        logger.error("Startup error", error=str(e), **e.details)
        sys.exit(1)


if __name__ == "__main__":
    main()
