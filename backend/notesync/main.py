"""
NoteSync Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn notesync.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │    /api/notes  /api/files  /api/session  /health    │
    │                                                     │
    │  app.state:                                         │
    │    record_store, blob_store, sessions,              │
    │    workflow_options                                 │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration
    Shutdown: close the record store (HTTP client / database engine)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notesync import __version__
from notesync.config import Settings, settings as default_settings
from notesync.dependencies import build_blob_store, build_record_store
from notesync.exceptions import (
    AuthenticationError,
    BlobNotFoundError,
    BlobStoreError,
    LocatorError,
    NoteSyncError,
    NotFoundError,
    RecordStoreError,
    ValidationError,
)
from notesync.middleware.logging import RequestLoggingMiddleware
from notesync.middleware.request_id import RequestIDMiddleware, request_id_var
from notesync.routes import files, health, notes, session
from notesync.services.blob_store import BlobStore
from notesync.services.note_sync import WorkflowOptions
from notesync.services.record_store import RecordStore
from notesync.services.session import SessionRegistry

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging with a consistent format across all modules.

    Format: 2024-01-15T12:00:00 [INFO] notesync.services.note_sync: message
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("NoteSync Backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health reports the broken dependency
        logger.error("Configuration error: %s", str(e))

    logger.info(
        "Workflow: delete=%s, image failures=%s, blob keys=%s",
        config.delete_strategy,
        config.image_failure_policy,
        config.blob_key_strategy,
    )
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("NoteSync Backend shutting down...")
    await app.state.record_store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, exc: NoteSyncError, details: bool = False) -> JSONResponse:
    content = {
        "error": error,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = exc.context
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and response bodies.

    Handler hierarchy:
        ValidationError      → 400
        AuthenticationError  → 401
        LocatorError         → 403
        NotFoundError        → 404
        BlobNotFoundError    → 404
        RecordStoreError     → 502
        BlobStoreError       → 502
        NoteSyncError (base) → 500
        Exception (fallback) → 500

    Context dicts are logged server-side and returned only for validation
    errors.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc, details=True)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        response = _error_response(401, "unauthenticated", exc)
        response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(LocatorError)
    async def handle_locator_error(request: Request, exc: LocatorError):
        logger.warning("[%s] Rejected locator: %s", request_id_var.get(""), exc.context)
        return _error_response(403, "invalid_locator", exc)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc)

    @app.exception_handler(BlobNotFoundError)
    async def handle_blob_not_found(request: Request, exc: BlobNotFoundError):
        return _error_response(404, "not_found", exc)

    @app.exception_handler(RecordStoreError)
    async def handle_record_store_error(request: Request, exc: RecordStoreError):
        logger.error("[%s] Record store error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(502, "record_store_error", exc)

    @app.exception_handler(BlobStoreError)
    async def handle_blob_store_error(request: Request, exc: BlobStoreError):
        logger.error("[%s] Blob store error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(502, "blob_store_error", exc)

    @app.exception_handler(NoteSyncError)
    async def handle_app_error(request: Request, exc: NoteSyncError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    record_store: Optional[RecordStore] = None,
    blob_store: Optional[BlobStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Stores are built from settings unless passed in, which lets tests run the
    full HTTP surface against in-memory fakes.
    """
    config = config or default_settings

    app = FastAPI(
        title="NoteSync API",
        description="Create, list and delete notes with optional images.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.record_store = record_store or build_record_store(config)
    app.state.blob_store = blob_store or build_blob_store(config)
    app.state.sessions = SessionRegistry(config.session_tokens_list)
    app.state.workflow_options = WorkflowOptions.from_settings(config)

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(files.router)
    app.include_router(session.router)
    app.include_router(health.router)

    return app


app = create_app()
