"""
Mockup Approval Proxy - Shared Outbound HTTP Client
=====================================================

What:  One `httpx.AsyncClient` for every outbound REST call (DocuSign,
       Brightpearl, image proxy).
Why:   A shared client reuses TCP/TLS connections to the same few hosts.
How:   Created lazily on first use, closed by the lifespan shutdown hook.
"""

import logging
from typing import Optional

import httpx

from mockup_proxy.config import settings

logger = logging.getLogger(__name__)

_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Return the process-wide client, creating it on first call."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(timeout=settings.http_timeout_s)
    return _client


async def close_http_client() -> None:
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.info("Outbound HTTP client closed")
    _client = None
