"""
Butterfly API — FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() wires the JSON database, the services,
       middleware, exception handlers and routers into one FastAPI app.
Who:   uvicorn (``uvicorn butterfly_api.main:app``), ``python -m butterfly_api``
       and the test suite (``create_app(tmp_path / "db.json")``).

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                     FastAPI App                       │
    │                                                       │
    │  Middleware:  Request ID → Logging → CORS             │
    │                                                       │
    │  Routes:                                              │
    │   GET /            GET /health                        │
    │   GET|POST /butterflies   GET|POST /users             │
    │   GET /ratings/{user_id}  PUT /ratings                │
    │                                                       │
    │  app.state:                                           │
    │   database (JSONDatabase) → RecordStore               │
    │                           → butterfly_service         │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, read the JSON document into memory
    Shutdown:  nothing to release; every mutation was already persisted
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from butterfly_api import __version__
from butterfly_api.config import settings
from butterfly_api.database import JSONDatabase
from butterfly_api.exceptions import (
    ButterflyAPIError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)
from butterfly_api.middleware.logging import RequestLoggingMiddleware
from butterfly_api.middleware.request_id import RequestIDMiddleware, request_id_var
from butterfly_api.routes import butterflies, health, ratings, users
from butterfly_api.services.butterfly_service import ButterflyService
from butterfly_api.services.record_store import RecordStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Load the JSON document before the first request is served.

    A document that cannot be read (bad JSON, permission denied) aborts
    startup: serving from an empty document would overwrite it on the
    first write.
    """
    setup_logging()
    database: JSONDatabase = app.state.database
    logger.info("Butterfly API %s starting up...", __version__)

    await database.read()

    logger.info("Database: %s", database.path.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Butterfly API shut down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and JSON bodies.

        ValidationError          → 400
        RequestValidationError   → 400 (unparseable body or bad parameter)
        InvalidReferenceError    → 401
        NotFoundError            → 404
        ButterflyAPIError        → 500
        Exception                → 500 (persistence failures end up here)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), exc.errors())
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Invalid request body"),
        )

    @app.exception_handler(InvalidReferenceError)
    async def handle_invalid_reference(request: Request, exc: InvalidReferenceError):
        return JSONResponse(
            status_code=401,
            content=_error_body("invalid_reference", exc.message, exc.context),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(ButterflyAPIError)
    async def handle_app_error(request: Request, exc: ButterflyAPIError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Generic 500; the stack trace is logged, never returned."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database_path: Optional[Union[str, Path]] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database_path: JSON document to serve from. Defaults to
                       ``settings.database_path``.

    The database, record store and service are attached to ``app.state``
    so each app instance (one per test, for example) owns its own document.
    The document itself is loaded by the lifespan handler; callers driving
    the app without lifespan events must ``await app.state.database.read()``.
    """
    app = FastAPI(
        title="Butterfly API",
        description="Butterflies, users and their ratings, stored in a JSON document.",
        version=__version__,
        lifespan=lifespan,
    )

    database = JSONDatabase(str(database_path or settings.database_path))
    app.state.database = database
    app.state.record_store = RecordStore(database)
    app.state.butterfly_service = ButterflyService(app.state.record_store)

    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(butterflies.router)
    app.include_router(users.router)
    app.include_router(ratings.router)

    return app


app = create_app()
