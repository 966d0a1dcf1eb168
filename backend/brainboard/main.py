"""
Brainboard Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database, the object storage backend and the
       service container, registers middleware, exception handlers and the
       ordered routing table, and returns the app. uvicorn imports the
       module-level `app` (uvicorn brainboard.main:app).

Middleware chain (outermost first):

    RequestID → RequestLogging → NoStore → GZip → CORS → routes

Lifecycle:
    Startup:   logging, configuration check, optional create_all
    Shutdown:  dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from brainboard import __version__
from brainboard.config import Settings, settings as default_settings
from brainboard.database import Database
from brainboard.dependencies import build_services
from brainboard.exceptions import BrainboardError
from brainboard.middleware.cors import NoStoreMiddleware, PreflightCORSMiddleware
from brainboard.middleware.logging import RequestLoggingMiddleware
from brainboard.middleware.request_id import RequestIDMiddleware, request_id_var
from brainboard.routes import include_routers
from brainboard.services.object_storage import ObjectStorage, build_object_storage

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    404: "not_found",
    405: "method_not_allowed",
}


def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "botocore", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)

    logger.info("=" * 60)
    logger.info("Brainboard Backend starting up...")

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    if app_settings.db_auto_create:
        await app.state.database.create_all()

    logger.info("Object storage backend: %s", app_settings.storage_backend)
    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Brainboard Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


def _error_response(status_code: int, code: str, message: str, details=None, headers=None) -> JSONResponse:
    content = {"error": message, "code": code, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the JSON error envelope `{"error", "code", "request_id"}`.

        BrainboardError subclasses  → the status/code declared on the class
        RequestValidationError      → 400 invalid_input
        Starlette HTTPException     → its status (404 unknown path, 405 wrong method)
        Exception                   → 500 internal

    5xx responses never carry internal context; it is logged server-side.
    """

    @app.exception_handler(BrainboardError)
    async def handle_app_error(request: Request, exc: BrainboardError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            return _error_response(exc.status_code, exc.code, exc.message)

        logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        details = exc.context if exc.status_code == 400 and exc.context else None
        return _error_response(exc.status_code, exc.code, exc.message, details)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        message = errors[0]["msg"] if errors else "Invalid request"
        return _error_response(400, "invalid_input", message, {"errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code, "internal" if exc.status_code >= 500 else "invalid_input")
        return _error_response(
            exc.status_code,
            code,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(500, "internal", "An unexpected error occurred")


def create_app(
    settings: Optional[Settings] = None,
    object_storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:        Settings to use; the environment-loaded default if None
        object_storage:  Storage backend override (tests pass an in-memory one)
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Brainboard API",
        description="Collaborative whiteboards with text and image cards, access grants and share links.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    storage = object_storage or build_object_storage(settings)
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.services = build_services(settings, storage)

    # ── Middleware (last added runs first) ───────────────────────────────
    app.add_middleware(PreflightCORSMiddleware, allow_origins=settings.cors_origins_list)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(NoStoreMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)
    include_routers(app)

    return app


app = create_app()
