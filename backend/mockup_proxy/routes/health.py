"""
Mockup Approval Proxy - Health Routes
=======================================

What:  GET /              plain liveness banner
       GET /health        integration and send log status
       GET /check-limits  body size limit the front end should respect

Status levels (/health):
    - healthy:   every integration configured, send log reachable
    - degraded:  an integration is unconfigured (its routes answer 500)
    - unhealthy: the database send log is configured but unreachable (503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mockup_proxy import __version__
from mockup_proxy.config import settings
from mockup_proxy.database import get_engine
from mockup_proxy.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness banner")
async def root() -> str:
    return "SFTP Proxy for Mockup Sheets is running"


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Send log database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    """
    Report which integrations are configured and whether the send log works.

    Integrations are not called; a configured Brightpearl token may still be
    revoked. Only the database gets a live SELECT 1.
    """
    overall = "healthy"

    missing = settings.missing_integrations()
    integrations = {
        name: "not_configured" if any(m.startswith(f"{name}:") for m in missing) else "configured"
        for name in ("DocuSign", "Brightpearl", "SFTP")
    }
    if missing:
        overall = "degraded"

    send_log = "json_file"
    engine = get_engine()
    if engine is not None:
        send_log = "database"
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            send_log = "database_unreachable"
            overall = "unhealthy"
            logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        send_log=send_log,
        integrations=integrations,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body


@router.get("/check-limits", summary="Request size limits")
async def check_limits() -> dict:
    return {"message": "Server is configured", "limits": settings.max_body_size}
