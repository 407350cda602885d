"""
Mockup Approval Proxy - FastAPI Application Factory
=====================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn mockup_proxy.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │   POST /send-to-docusign     GET /api/docusign-logs      │
    │   GET  /image                GET /fetch-image            │
    │   GET  /api/brightpearl/...  GET / /health /check-limits │
    │                                                          │
    │  Exception Handlers:                                     │
    │   ValidationError→400  UpstreamError→upstream status     │
    │   Configuration/Authentication/Submission/Image→500      │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Report unconfigured integrations (the server still starts)
    3. Create the send log table when DATABASE_URL is set

    Shutdown:
    1. Close the shared outbound HTTP client
    2. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from mockup_proxy import __version__
from mockup_proxy.config import settings
from mockup_proxy.database import dispose_engine, init_models
from mockup_proxy.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ImageFetchError,
    ProxyError,
    SubmissionError,
    UpstreamError,
    ValidationError,
)
from mockup_proxy.middleware.logging import RequestLoggingMiddleware
from mockup_proxy.middleware.request_id import RequestIDMiddleware, request_id_var
from mockup_proxy.routes import brightpearl, health, images, send_logs, signature
from mockup_proxy.services.http_client import close_http_client

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Per-operation chatter from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("asyncssh").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Mockup Approval Proxy %s starting up...", __version__)

    for problem in settings.missing_integrations():
        logger.warning("Integration not configured: %s", problem)

    if settings.use_database:
        try:
            await init_models()
        except (SQLAlchemyError, OSError) as e:
            # Sends still succeed; their log rows fail and are reported
            logger.error("Could not prepare send log table: %s", str(e))
    else:
        logger.info("Send log file: %s", settings.docusign_log_file)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Mockup Approval Proxy shutting down...")
    await close_http_client()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs in ServerErrorMiddleware, outside RequestIDMiddleware
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "request_id": _request_id(request),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        UpstreamError                            → upstream status
        ConfigurationError                       → 500
        AuthenticationError                      → 500
        SubmissionError                          → 500
        ImageFetchError                          → 500
        ProxyError (base)                        → 500
        Exception (fallback)                     → 500, generic message
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(request, 400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        # Malformed JSON or wrong query types; same body shape as ValidationError
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), details)
        return _error_response(request, 400, f"Invalid request: {details}")

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        logger.error("[%s] Configuration error: %s", request_id_var.get(""), exc.message)
        return _error_response(request, 500, exc.message)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.error(
            "[%s] DocuSign authentication error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(request, 500, exc.message)

    @app.exception_handler(SubmissionError)
    async def handle_submission_error(request: Request, exc: SubmissionError):
        logger.error(
            "[%s] DocuSign submission error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(request, 500, exc.message)

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(request: Request, exc: UpstreamError):
        logger.warning(
            "[%s] Upstream answered %d: %s",
            request_id_var.get(""),
            exc.status_code,
            exc.message,
        )
        return _error_response(request, exc.status_code, exc.message)

    @app.exception_handler(ImageFetchError)
    async def handle_image_fetch_error(request: Request, exc: ImageFetchError):
        logger.error("[%s] Image fetch error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(request, 500, exc.message)

    @app.exception_handler(ProxyError)
    async def handle_proxy_error(request: Request, exc: ProxyError):
        logger.error("[%s] %s: %s | Context: %s", request_id_var.get(""), type(exc).__name__, exc.message, exc.context)
        return _error_response(request, 500, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace is logged server-side only."""
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=True,
        )
        return _error_response(request, 500, "An unexpected error occurred. Please try again or contact support.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Mockup Approval Proxy",
        description=(
            "Backend for the mockup approval workflow: sends mockup sheets to "
            "DocuSign for signature, keeps a send log, and proxies SFTP images "
            "and Brightpearl order lookups."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        # Credentials cannot be combined with a wildcard origin
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(signature.router)
    app.include_router(send_logs.router)
    app.include_router(images.router)
    app.include_router(brightpearl.router)

    return app


app = create_app()
