"""
Mockup Approval Proxy - Signature Route
=========================================

What:  POST /send-to-docusign: send an approved mockup sheet for signature.
Who:   Called by the mockup editor once the sheet is rendered to PDF.

Request body (camelCase):
    {
        "pdfBase64": "JVBERi0xLjQK...",
        "recipientEmail": "buyer@example.com",
        "recipientName": "Pat Buyer",
        "signaturePositions": [{"page": 1, "x": 50, "y": 60}]
    }

`logoPositions` is accepted in place of `signaturePositions` for older
front-end builds.
"""

import logging

from fastapi import APIRouter, Request

from mockup_proxy.schemas.common import ErrorResponse
from mockup_proxy.schemas.signature import SendRequest, SendResponse
from mockup_proxy.services.signature_service import signature_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Signature"])


@router.post(
    "/send-to-docusign",
    response_model=SendResponse,
    response_model_by_alias=True,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Configuration, authentication or submission failure", "model": ErrorResponse},
    },
    summary="Send a mockup sheet for signature",
)
async def send_to_docusign(body: SendRequest, request: Request) -> SendResponse:
    user_agent = request.headers.get("user-agent")
    ip_address = request.client.host if request.client else None
    return await signature_service.send_for_signature(
        body,
        user_agent=user_agent,
        ip_address=ip_address,
    )
