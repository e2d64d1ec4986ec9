"""
RedSocial Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Rate Limit → Logging → ...    │
    │                                                          │
    │  Routers:     /api (users, follows, publications,        │
    │               comments)   /auth (API gate)   /health     │
    │                                                          │
    │  Dependencies: get_db_session, get_optional_identity,    │
    │                get_current_identity, require_api_gate    │
    │                                                          │
    │  Exception Handlers: one per error kind                  │
    │    400 validation │ 401 unauthorized │ 403 forbidden     │
    │    404 not_found  │ 409 conflict     │ 429 │ 500         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (placeholder secrets are logged as errors)
    3. Wait for the database (tenacity backoff)

    Shutdown:
    1. Dispose database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Type

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine, wait_for_database
from app.exceptions import (
    ConflictError,
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    RedSocialError,
    UnauthorizedError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from app.routes import auth, comments, follows, health, publications, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] app.services.user_service: User registered: alice (id=1)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "passlib", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("RedSocial Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: placeholders are acceptable for local runs
        logger.error("Configuration error: %s", str(e))

    await wait_for_database()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("RedSocial Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# Client errors: the message and context are safe to return as-is
CLIENT_ERROR_STATUS: Dict[Type[RedSocialError], int] = {
    ValidationError: 400,
    UnauthorizedError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
    ConflictError: 409,
}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map each error kind to its HTTP status and the ErrorResponse body.

    Handler hierarchy:
        ValidationError         → 400
        UnauthorizedError       → 401 (+ WWW-Authenticate: Bearer)
        ForbiddenError          → 403
        NotFoundError           → 404
        ConflictError           → 409
        DatabaseError           → 500 (generic message)
        RedSocialError (base)   → 500
        Exception (fallback)    → 500

    429 never reaches these handlers: RateLimitMiddleware answers it directly.

    Starlette resolves handlers along the exception's MRO, so the specific
    classes win over the RedSocialError catch-all. Every handler logs the
    error kind with the request ID.
    """

    async def handle_client_error(request: Request, exc: RedSocialError):
        rid = request_id_var.get("")
        status_code = CLIENT_ERROR_STATUS[type(exc)]
        logger.warning("[%s] %s (%d): %s", rid, exc.kind, status_code, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code,
            content=exc.to_body(rid),
            headers=headers,
        )

    for exc_class in CLIENT_ERROR_STATUS:
        app.add_exception_handler(exc_class, handle_client_error)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client; details stay in the server log."""
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, exc.kind, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": exc.kind,
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(RedSocialError)
    async def handle_app_error(request: Request, exc: RedSocialError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, exc.kind, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=exc.to_body(rid, include_details=False),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: the stack trace is logged, never returned."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers."""
    app = FastAPI(
        title="RedSocial API",
        description=(
            "Social network backend: users, follow graph, publications, "
            "comments and bearer token authentication."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After", "WWW-Authenticate"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    # users first: /api/user/all must be matched before /api/user/{user_id}
    app.include_router(users.router)
    app.include_router(follows.router)
    app.include_router(publications.router)
    app.include_router(comments.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
