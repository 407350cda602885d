"""
Mockup Approval Proxy - Image Routes
======================================

What:  GET /image?code=   product photo from the SFTP store (image/jpeg)
       GET /fetch-image?url=   any image URL, streamed through the proxy
Why:   The editor draws these onto a canvas; same-origin bytes keep the
       canvas exportable to PDF.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from mockup_proxy.schemas.common import ErrorResponse
from mockup_proxy.services.image_service import image_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])


@router.get(
    "/image",
    response_class=Response,
    responses={
        200: {"content": {"image/jpeg": {}}, "description": "Product image"},
        400: {"description": "Missing code", "model": ErrorResponse},
        500: {"description": "SFTP failure", "model": ErrorResponse},
    },
    summary="Fetch a product image from SFTP",
)
async def get_sftp_image(code: Optional[str] = Query(default=None)) -> Response:
    data = await image_service.fetch_sftp_image(code or "")
    return Response(content=data, media_type="image/jpeg")


@router.get(
    "/fetch-image",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"image/*": {}}, "description": "Proxied image"},
        400: {"description": "Missing url", "model": ErrorResponse},
        500: {"description": "Upstream failure", "model": ErrorResponse},
    },
    summary="Proxy an image from a URL",
)
async def proxy_image(url: Optional[str] = Query(default=None)) -> StreamingResponse:
    image = await image_service.open_url_image(url or "")
    return StreamingResponse(
        image.response.aiter_bytes(),
        media_type=image.content_type,
        background=BackgroundTask(image.close),
    )
