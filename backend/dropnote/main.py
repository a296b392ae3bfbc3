"""
Dropnote Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the route table, turns it into a
       dispatcher with build_router(), and mounts it at the site root behind
       the middleware chain and exception handlers.
Who:   Called by uvicorn (uvicorn dropnote.main:app) or the `dropnote` script.
When:  Once at server startup; the returned app handles all later requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:  Request ID → GZip               │
    │                                                     │
    │  Mounted at "/":    dispatcher from build_router()  │
    │    /static/*        → assets directory              │
    │    declared routes  → logged handlers               │
    │    no match         → logged not-found ("404")      │
    │                                                     │
    │  Exception Handlers:                                │
    │    BackendUnavailable→503 │ Dropnote→500 │ *→500    │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Check the assets directory (warn, don't exit)
    3. Log startup complete

    Shutdown:
    1. Log shutdown complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from dropnote import __version__
from dropnote.config import Settings, settings as default_settings
from dropnote.exceptions import BackendUnavailableError, DropnoteError
from dropnote.middleware.request_id import RequestIDMiddleware, request_id_var
from dropnote.routes.messages import MessageActions
from dropnote.routes.pages import not_found
from dropnote.routes.table import declare_routes
from dropnote.routing import build_router
from dropnote.schemas.message import ErrorResponse
from dropnote.services.message_backend import MessageBackend

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] dropnote.access: GET\t/\tIndex\t0.4ms [a1b2c3d4]
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # The dispatcher writes its own access line per request.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("Dropnote %s starting up...", __version__)

    try:
        settings.check_assets_dir()
    except ValueError as e:
        # Static requests answer 404 until the directory appears.
        logger.warning("Configuration problem: %s", str(e))
    else:
        logger.info("Serving %s from %s", settings.static_prefix, settings.assets_path.resolve())

    if app.state.backend is None:
        logger.warning("No message backend configured; message routes answer 503")

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

        BackendUnavailableError → 503 Service Unavailable
        DropnoteError (base)    → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    Internal details (context, stack traces) are logged, never returned.
    """

    @app.exception_handler(BackendUnavailableError)
    async def handle_backend_unavailable(request: Request, exc: BackendUnavailableError):
        rid = request_id_var.get("")
        logger.warning("[%s] Backend unavailable: %s", rid, exc.message)
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(
                error="service_unavailable", message=exc.message, request_id=rid
            ).model_dump(),
        )

    @app.exception_handler(DropnoteError)
    async def handle_dropnote_error(request: Request, exc: DropnoteError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="server_error", message=exc.message, request_id=rid
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="internal_server_error",
                message="An unexpected error occurred. Please try again later.",
                request_id=rid,
            ).model_dump(),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    backend: Optional[MessageBackend] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the module-level singleton.
        backend:  Message storage. Without one the message routes answer 503.

    Raises:
        RouteConfigurationError: the route table is invalid. Startup stops here.
    """
    settings = settings or default_settings

    # The token route would shadow /docs/ and friends, so they are off.
    app = FastAPI(
        title="Dropnote",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.backend = backend

    # Last added runs first: RequestID → GZip → dispatcher
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    routes = declare_routes(MessageActions(backend))
    dispatcher = build_router(
        routes,
        assets_dir=settings.assets_dir,
        not_found=not_found,
        static_prefix=settings.static_prefix,
    )
    app.mount("/", dispatcher, name="dropnote")

    return app


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    uvicorn.run(
        "dropnote.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


app = create_app()
