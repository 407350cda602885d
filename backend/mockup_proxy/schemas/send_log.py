"""
Mockup Approval Proxy - Send Log Schemas
==========================================

What:  The SendLogEntry record and the paginated read response.
Who:   Built by SignatureService after a send; stored by either send log
       store; returned by GET /api/docusign-logs.

Wire format (camelCase, kept compatible with the existing JSON log file):
    {
        "timestamp": "2025-01-17T15:04:05.123000Z",
        "envelopeId": "...",
        "status": "sent",
        "recipientEmail": "...",
        "recipientName": "...",
        "signatureCount": 2,
        "pdfSizeBytes": 183422,
        "userAgent": "...",
        "ipAddress": "..."
    }
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from mockup_proxy.schemas.signature import CamelModel


class SendLogEntry(CamelModel):
    """One envelope sent. Append-only; never mutated after creation."""

    timestamp: datetime
    envelope_id: str
    status: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_name: Optional[str] = None
    signature_count: Optional[int] = None
    pdf_size_bytes: Optional[int] = None
    user_agent: Optional[str] = "unknown"
    ip_address: Optional[str] = "unknown"


class SendLogPage(CamelModel):
    """
    Filtered, newest-first slice of the send log.

    `total` counts every stored entry regardless of the date filter, so the
    log view can show "12 of 340".
    """

    success: bool = True
    total: int = Field(description="Number of entries stored (unfiltered)")
    returned: int = Field(description="Number of entries in this response")
    logs: List[SendLogEntry] = Field(default_factory=list)
