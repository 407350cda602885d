"""
Mockup Approval Proxy - Request ID Middleware
===============================================

What:  Assigns a correlation ID to each request and echoes it back.
Why:   A send touches three systems (browser, DocuSign, send log); one ID
       ties the access line, the service logs and the error body together.
How:   Reuses the caller's X-Request-ID header when present, otherwise an
       8-character UUID prefix. Stored in a ContextVar for the exception
       handlers and in request.state for routes.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets request_id_var and the X-Request-ID response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
