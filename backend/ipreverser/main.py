"""
IP Reverser: FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings, record_store) returns a configured
       FastAPI instance. run() is the console entry point that serves it with uvicorn.
Who:   `ipreverser` console script, `uvicorn --factory --no-server-header ipreverser.main:create_app`,
       and the test suite (with an in-memory store).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────────┐ ┌────────┐  │
    │  │  Req ID  │→│ Logging  │→│ Security │→│  CORS  │  │
    │  └──────────┘ └──────────┘ └──────────┘ └────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────┐ ┌──────────┐ ┌─────────┐ ┌────────────┐ │
    │  │ GET /  │ │ GET /ips │ │ /health │ │ /health/   │ │
    │  │        │ │          │ │         │ │   store    │ │
    │  └────────┘ └──────────┘ └─────────┘ └────────────┘ │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Initialize the record store schema (StartupError aborts startup,
       uvicorn then exits non-zero before accepting traffic)

    Shutdown (SIGTERM / SIGINT, handled by uvicorn):
    1. Stop accepting new connections
    2. Close the record store pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ipreverser import __version__
from ipreverser.config import Settings, get_settings
from ipreverser.exceptions import StartupError
from ipreverser.middleware.logging import RequestLoggingMiddleware
from ipreverser.middleware.request_id import RequestIDMiddleware
from ipreverser.middleware.security_headers import SecurityHeadersMiddleware
from ipreverser.routes import health, ip
from ipreverser.services.record_store import RecordStore, SqlRecordStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] ipreverser.access: GET / 200 ...

    Handlers:
        - stdout (always), which container runtimes collect
        - LOG_FILE (optional), appended to
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=handlers,
        force=True,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Initialize the record store on startup and close it on shutdown.

    A StartupError is logged and re-raised: uvicorn reports
    "Application startup failed" and the process exits with status 3.
    """
    settings: Settings = app.state.settings
    store: RecordStore = app.state.record_store

    setup_logging(settings)
    logger.info("IP Reverser %s starting up...", __version__)

    try:
        await store.initialize()
    except StartupError as e:
        logger.critical("Failed to start server: %s | Context: %s", e.message, e.context)
        await store.close()
        raise

    logger.info("Server running on port %d", settings.port)

    yield

    logger.info("Shutting down gracefully...")
    await store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Catch-all for errors that escape a route.

    Routes already turn InvalidInputError and StorageError into their own
    500 bodies; this only sees bugs. The stack trace goes to the log, the
    client gets a generic body with the request ID.
    """

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    record_store: Optional[RecordStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings:     Configuration; read from the environment when omitted.
        record_store: Store to use; a pooled SqlRecordStore built from
                      `settings` when omitted.
    """
    settings = settings or get_settings()
    if record_store is None:
        record_store = SqlRecordStore.from_settings(settings)

    app = FastAPI(
        title="IP Reverser API",
        description=(
            "Returns the caller's IPv4 address with its octets reversed and "
            "keeps a history of every reversal."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.record_store = record_store

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → SecurityHeaders → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(ip.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn on HOST:PORT."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        server_header=False,
    )


if __name__ == "__main__":
    run()
