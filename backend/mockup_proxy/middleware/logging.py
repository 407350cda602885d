"""
Mockup Approval Proxy - Request Logging Middleware
====================================================

What:  One access-log line per request: method, path, status, duration,
       request ID, client IP.
Why:   Uvicorn's access log has no request ID and no duration.
How:   Level follows the status (5xx ERROR, 4xx WARNING, else INFO).

Never logged: request bodies (base64 PDFs, recipient emails) and query
strings (image URLs may carry signed tokens).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from mockup_proxy.middleware.request_id import request_id_var

logger = logging.getLogger("mockup_proxy.access")

# Probed every few seconds by the host; not worth a line each
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request after the response is produced.

    Typical durations:
        GET /health                 1-5ms
        GET /image                  300-1500ms (SFTP handshake dominates)
        POST /send-to-docusign      1-4s (token exchange + envelope create)
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        if path in QUIET_PATHS:
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
