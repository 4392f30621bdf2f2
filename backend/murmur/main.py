"""
Murmur Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) assembles middleware, exception handlers and
       routers; the lifespan builds the store handle and services on startup
       and releases them on shutdown.
Who:   uvicorn (`uvicorn murmur.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware: RequestID → Logging → GZip → CORS      │
    │                                                     │
    │  Routes:                                            │
    │   /api/register  /api/login         (public)        │
    │   /api/posts  /api/follow/{id}  /api/feed (Bearer)  │
    │   /  /api  /health                  (public)        │
    │                                                     │
    │  Exception Handlers:                                │
    │   MurmurError → its status │ validation → 400       │
    │   anything else → 500                               │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (missing SECRET_KEY aborts startup)
    3. Build Database, PasswordHasher, TokenService on app.state
    4. Optionally create tables (DB_AUTO_CREATE)

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from murmur import __version__
from murmur.config import Settings, settings as default_settings
from murmur.database import Database
from murmur.exceptions import (
    DatabaseError,
    MurmurError,
    StoreUnavailableError,
    UnauthorizedError,
)
from murmur.middleware.logging import RequestLoggingMiddleware
from murmur.middleware.request_id import RequestIDMiddleware, request_id_var
from murmur.routes import auth, feed, follows, health, posts
from murmur.services.passwords import PasswordHasher
from murmur.services.token_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure the root logger once, writing to stdout.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the lifecycle of every process-wide resource.

    Everything a request needs is placed on `app.state` here and read back
    through murmur.dependencies; there are no module-level connections.
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("Murmur backend starting up...")

    # A ConfigurationError propagates and aborts startup
    config.validate_required()

    database = Database(config)
    app.state.database = database
    app.state.hasher = PasswordHasher(rounds=config.bcrypt_rounds)
    app.state.tokens = TokenService(config)

    try:
        if config.db_auto_create:
            await database.create_all()
            logger.info("Database tables ensured (DB_AUTO_CREATE)")

        logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
        yield
    finally:
        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("Murmur backend shutting down...")
        await database.dispose()
        logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to one status code and a JSON `{error, message}` body.

    Handler hierarchy:
        UnauthorizedError       → 401 + WWW-Authenticate: Bearer
        StoreUnavailableError   → 503 + Retry-After
        DatabaseError           → 500, generic message
        MurmurError (base)      → exc.status_code
        RequestValidationError  → 400 invalid_input
        Exception (fallback)    → 500 internal_server_error

    Internal context is logged server-side and never returned.
    """

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "request_id": _request_id(request),
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        rid = _request_id(request)
        logger.error("[%s] Store unavailable: %s", rid, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "request_id": rid,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = _request_id(request)
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.error_code,
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(MurmurError)
    async def handle_murmur_error(request: Request, exc: MurmurError):
        rid = _request_id(request)
        logger.info("[%s] %s: %s", rid, exc.error_code, exc.message)
        content = {
            "error": exc.error_code,
            "message": exc.message,
            "request_id": rid,
        }
        field = getattr(exc, "field", None)
        if field:
            content["details"] = {"field": field}
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON, wrong field types, non-integer path ids."""
        rid = _request_id(request)
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={
                "error": "invalid_input",
                "message": "Request could not be parsed",
                "details": {"errors": errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "Something went wrong",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit configuration; defaults to the environment-backed
                  singleton. Tests pass their own instance.
    """
    config = settings or default_settings

    app = FastAPI(
        title="Murmur API",
        description="Minimal social backend: register, log in, post, follow, read a feed.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS → route
    origins = config.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(follows.router)
    app.include_router(feed.router)

    return app


app = create_app()
