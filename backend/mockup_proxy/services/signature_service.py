"""
Mockup Approval Proxy - Signature Service (Orchestrator)
==========================================================

What:  Runs one mockup sheet through validate → build → authenticate →
       submit → record.
Why:   Routes stay thin; every rule about what a valid send looks like and
       what order the provider calls happen in lives here.
Who:   Called by POST /send-to-docusign.

Send Workflow:
    ┌───────────┐   ┌─────────┐   ┌──────────────┐   ┌─────────┐   ┌────────┐
    │ Validate  │ → │  Build  │ → │ Authenticate │ → │ Submit  │ → │ Record │
    │ (no I/O)  │   │ (pure)  │   │ (JWT grant)  │   │ (POST)  │   │ (best  │
    └───────────┘   └─────────┘   └──────────────┘   └─────────┘   │ effort)│
                                                                  └────────┘
    Any failure before Submit means no envelope exists on the provider.
    A failure in Record is logged and does not change the response.
"""

import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from mockup_proxy.config import Settings, settings as default_settings
from mockup_proxy.exceptions import ValidationError
from mockup_proxy.schemas.send_log import SendLogEntry
from mockup_proxy.schemas.signature import SendRequest, SendResponse
from mockup_proxy.services.credentials import DocuSignCredentials, resolve_credentials
from mockup_proxy.services.docusign_auth import JWTTokenProvider, TokenProvider
from mockup_proxy.services.envelope_builder import Recipient, build_envelope
from mockup_proxy.services.envelope_submitter import EnvelopeSubmitter
from mockup_proxy.services.send_log_store import SendLogger, get_send_logger

logger = logging.getLogger(__name__)


def decode_document(pdf_base64: str) -> bytes:
    """
    Strictly decode a base64 document.

    A `data:application/pdf;base64,` prefix (what FileReader.readAsDataURL
    produces) is stripped first. Whitespace is ignored.
    """
    payload = pdf_base64.strip()
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    payload = "".join(payload.split())
    try:
        document = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(message="pdfBase64 is not valid base64", field="pdfBase64")
    if not document:
        raise ValidationError(message="pdfBase64 decodes to an empty document", field="pdfBase64")
    return document


class SignatureService:
    """
    Orchestrates a single envelope send.

    Collaborators are injected so tests can substitute a stub token
    provider, a submitter bound to a mocked transport, or an in-memory
    send log.
    """

    def __init__(
        self,
        credentials: DocuSignCredentials,
        token_provider: Optional[TokenProvider] = None,
        submitter: Optional[EnvelopeSubmitter] = None,
        send_logger: Optional[SendLogger] = None,
        config: Settings = default_settings,
    ):
        self.credentials = credentials
        self.token_provider = token_provider or JWTTokenProvider()
        self.submitter = submitter or EnvelopeSubmitter(credentials.base_path)
        self._send_logger = send_logger
        self.include_initial_fields = config.docusign_include_initial_fields
        self.email_subject = config.docusign_email_subject
        self.cc_recipient = None
        if config.docusign_cc_email:
            self.cc_recipient = Recipient(
                email=config.docusign_cc_email,
                name=config.docusign_cc_name or config.docusign_cc_email,
            )

    @property
    def send_logger(self) -> SendLogger:
        # Resolved lazily so the store follows DATABASE_URL at first use
        if self._send_logger is None:
            self._send_logger = get_send_logger()
        return self._send_logger

    # ── Step 1: Validation ────────────────────────────────────────────────

    @staticmethod
    def validate_request(request: SendRequest) -> List[Any]:
        """
        Check required fields and pick the positions list.

        Returns:
            The raw positions list (signaturePositions, else logoPositions).

        Raises:
            ValidationError: Names every missing field in one message.
        """
        missing = [
            alias
            for alias, value in (
                ("pdfBase64", request.pdf_base64),
                ("recipientEmail", request.recipient_email),
                ("recipientName", request.recipient_name),
            )
            if not isinstance(value, str) or not value.strip()
        ]
        if missing:
            raise ValidationError(
                message=f"Missing required fields: {', '.join(missing)}",
                context={"missing": missing},
            )

        positions = request.signature_positions
        if positions is None:
            positions = request.logo_positions
        if not isinstance(positions, list):
            raise ValidationError(
                message="signaturePositions must be an array",
                field="signaturePositions",
            )
        if not positions:
            raise ValidationError(
                message="signaturePositions must contain at least one position",
                field="signaturePositions",
            )
        return positions

    # ── Full workflow ─────────────────────────────────────────────────────

    async def send_for_signature(
        self,
        request: SendRequest,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> SendResponse:
        """
        Send the mockup sheet for signature.

        Raises:
            ValidationError: Bad input (nothing sent, no token requested).
            ConfigurationError: DocuSign credentials incomplete.
            AuthenticationError: JWT grant rejected.
            SubmissionError: Envelope creation rejected.
        """
        positions = self.validate_request(request)
        document = decode_document(request.pdf_base64)

        # Build before authenticating so bad coordinates never cost a token
        envelope = build_envelope(
            document,
            request.recipient_email,
            request.recipient_name,
            positions,
            include_initial_fields=self.include_initial_fields,
            cc_recipient=self.cc_recipient,
            email_subject=self.email_subject,
        )

        logger.info(
            "Sending mockup sheet (%d bytes, %d positions) for signature",
            len(document),
            len(envelope.fields),
        )

        token = await self.token_provider.authenticate(self.credentials)
        summary = await self.submitter.submit(envelope, self.credentials.account_id, token)

        await self.send_logger.record(
            SendLogEntry(
                timestamp=datetime.now(timezone.utc),
                envelope_id=summary.envelope_id,
                status=summary.status,
                recipient_email=envelope.recipient.email,
                recipient_name=envelope.recipient.name,
                signature_count=len(envelope.fields),
                pdf_size_bytes=len(document),
                user_agent=user_agent or "unknown",
                ip_address=ip_address or "unknown",
            )
        )

        return SendResponse(envelope_id=summary.envelope_id, status=summary.status)


# Module-level singleton; credentials are resolved from settings once
signature_service = SignatureService(credentials=resolve_credentials())
