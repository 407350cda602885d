"""
Mockup Approval Proxy - Send Log Route
========================================

What:  GET /api/docusign-logs: newest-first history of envelopes sent.
Who:   The admin log view in the front end.

Query parameters:
    startDate, endDate   ISO 8601 date or datetime, inclusive, optional
    limit                1-1000, default 50
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from mockup_proxy.schemas.common import ErrorResponse
from mockup_proxy.schemas.send_log import SendLogPage
from mockup_proxy.services.send_log_store import (
    DEFAULT_QUERY_LIMIT,
    get_send_logger,
    parse_date_bound,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Send Log"])


@router.get(
    "/docusign-logs",
    response_model=SendLogPage,
    response_model_by_alias=True,
    responses={
        400: {"description": "Unparseable date bound", "model": ErrorResponse},
        500: {"description": "Send log unreadable", "model": ErrorResponse},
    },
    summary="List DocuSign sends",
)
async def list_send_logs(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    limit: int = Query(default=DEFAULT_QUERY_LIMIT, ge=1, le=1000),
) -> SendLogPage:
    start = parse_date_bound(start_date, "startDate")
    end = parse_date_bound(end_date, "endDate")
    return await get_send_logger().query(start=start, end=end, limit=limit)
