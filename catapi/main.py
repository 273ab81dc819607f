"""
Cat API — FastAPI Application Factory
=======================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers.
Who:   uvicorn (`uvicorn catapi.main:app`) and the test client.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware:  Request ID → Access Log → Rate Limit   │
    │                                                      │
    │  Routes:  /cats  /users  /auth/login  /uploads       │
    │           /health                                    │
    │                                                      │
    │  Exception handlers:                                 │
    │    CatApiError → its status_code                     │
    │    RequestValidationError → 400                      │
    │    HTTPException → its status code                   │
    │    Exception → 500                                   │
    └──────────────────────────────────────────────────────┘

Every error body has the shape {"error", "message", "request_id"}.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catapi import __version__
from catapi.config import settings
from catapi.database import dispose_engine
from catapi.exceptions import CatApiError
from catapi.middleware.logging import RequestLoggingMiddleware
from catapi.middleware.rate_limit import RateLimitMiddleware
from catapi.middleware.request_id import RequestIDMiddleware, request_id_var
from catapi.routes import auth, cats, files, health, users

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "Something went wrong with the server"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger for the whole process.

    Format: 2026-01-15T12:00:00 [INFO] catapi.access: GET /cats 200 3.1ms ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, storage directory.
    Shutdown: dispose the database engine.
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Cat API %s starting up...", __version__)

    # A weak configuration is reported but does not stop the server
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    logger.info("Admin account: %s", settings.admin_email)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Cat API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message, "request_id": request_id_var.get("")}


def format_validation_errors(errors) -> str:
    """
    Collapse FastAPI/pydantic validation errors into one line.

    Each error becomes "<msg>: <field>"; errors are joined with ", ".
    """
    parts = []
    for err in errors:
        loc = err.get("loc") or ()
        field = str(loc[-1]) if loc else "request"
        parts.append(f"{err.get('msg', 'Invalid value')}: {field}")
    return ", ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the shared JSON error shape.

    Handler hierarchy:
        CatApiError             → exc.status_code (400/401/403/404/500)
        RequestValidationError  → 400 (field messages joined)
        HTTPException           → exc.status_code (unknown route, bad method)
        Exception (fallback)    → 500

    500 responses never carry internal details; the context dict and the
    traceback are logged server-side only.
    """

    @app.exception_handler(CatApiError)
    async def handle_app_error(request: Request, exc: CatApiError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid,
                type(exc).__name__,
                exc.message,
                exc.context,
            )
            message = GENERIC_SERVER_MESSAGE
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
            message = exc.message
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, message),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = format_validation_errors(exc.errors())
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return JSONResponse(status_code=400, content=_error_body("validation_error", message))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body("http_error", str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("internal_server_error", GENERIC_SERVER_MESSAGE),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Cat API",
        description=(
            "Share cat photos on a map. Users upload cats with a photo whose GPS "
            "metadata sets the location, query cats by bounding box, and manage "
            "their own records."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → RateLimit → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(cats.router)
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


app = create_app()
