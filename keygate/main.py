"""keygate FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app(): testable application factory
  - lifespan    : @asynccontextmanager startup/shutdown sequence
  - app         : module-level instance for uvicorn

Startup sequence:
  1. load_config()                 → app.state.config
  2. Database(...).initialize()    → app.state.database (one handle per process)
  3. SQLiteCredentialStore(db)     → app.state.credential_store
  4. SystemSettings(db)            → app.state.mode_resolver
  5. app.state.ready = True

Shutdown (reverse): ready = False → close database.

Tests skip the lifespan and call ``attach_backends()`` directly.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from keygate import __version__
from keygate.auth.errors import BackendUnavailableError
from keygate.auth.router import router as auth_router
from keygate.auth.store import SQLiteCredentialStore
from keygate.config import Config, load_config
from keygate.constants import (
    BACKEND_UNAVAILABLE_MESSAGE,
    BACKEND_UNAVAILABLE_STATUS,
    REQUEST_ID_HEADER,
)
from keygate.db import Database
from keygate.health import router as health_router
from keygate.settings.system_settings import SystemSettings
from keygate.utils.logger import clear_request_id, configure_logging, get_logger, set_request_id
from keygate.utils.ulid import generate_request_id

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


root_router = APIRouter(tags=["root"])


@root_router.get("/")
async def root() -> dict[str, str]:
    """Service discovery."""
    return {
        "service": "keygate",
        "version": __version__,
        "health": "/health",
        "auth": "/v1/auth",
    }


def attach_backends(app: FastAPI, database: Database) -> None:
    """Build both collaborators on ``database`` and publish them on app.state."""
    app.state.database = database
    app.state.credential_store = SQLiteCredentialStore(database)
    app.state.mode_resolver = SystemSettings(database)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database, wire the collaborators, mark ready; close on shutdown."""
    logger.info("keygate starting up...")

    # SystemExit on invalid config: the process exits before ready is set
    config: Config = load_config()
    app.state.config = config

    # RuntimeError on schema version mismatch refuses startup
    database = Database(config.store.resolved_path)
    await database.initialize()
    attach_backends(app, database)

    app.state.ready = True
    logger.info("keygate ready", store_path=str(database.path))

    yield

    logger.info("keygate shutting down...")
    app.state.ready = False
    await database.close()
    logger.info("keygate shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app() -> FastAPI:
    """Create and configure the keygate FastAPI application.

    Returns:
        Application with lifespan, routers, request-id middleware and the
        JSON error handlers.
    """
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="keygate",
        description="API key authentication gate",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    # /health answers 503 for anything arriving before startup completes
    application.state.ready = False

    @application.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = generate_request_id()
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(auth_router)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @application.exception_handler(BackendUnavailableError)
    async def backend_unavailable_handler(
        request: Request, exc: BackendUnavailableError
    ) -> JSONResponse:
        logger.error(
            "Authentication backend unavailable",
            backend=exc.backend,
            error=exc.message,
            cause=repr(exc.__cause__) if exc.__cause__ else None,
            path=str(request.url.path),
            alert=True,
        )
        return JSONResponse(
            status_code=BACKEND_UNAVAILABLE_STATUS,
            content={"error": BACKEND_UNAVAILABLE_MESSAGE},
        )

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"error": "Internal server error"}
        )

    return application


app = create_app()
