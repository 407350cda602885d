"""
Mockup Approval Proxy - Document Envelope Builder
===================================================

What:  Builds the signature-request payload for one mockup sheet.
Why:   The field-placement mapping (positions → sign-here and initial tabs)
       is the one structured transformation in the send flow, so it lives
       in a pure function with no I/O.
How:   `build_envelope()` validates inputs and returns an immutable
       Envelope; `Envelope.to_definition()` renders DocuSign's REST body.

Placement rules (per position at 0-based index i):
    sign-here  "Logo_Approval_{i+1}"  at (x, y)        required
    initial    "Initial_{i+1}"        at (x + 150, y)  optional, when enabled

The document is always document "1"; the signer is recipient "1" with
routing order "1"; an optional carbon copy is recipient "2".
"""

import base64
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mockup_proxy.exceptions import ValidationError

DOCUMENT_ID = "1"
DOCUMENT_NAME = "Mockup Sheet"
DOCUMENT_EXTENSION = "pdf"
SIGNER_RECIPIENT_ID = "1"
CC_RECIPIENT_ID = "2"
DEFAULT_EMAIL_SUBJECT = "Please approve the mockup sheet"
ENVELOPE_STATUS = "sent"

DEFAULT_PAGE = 1
DEFAULT_X = 100
DEFAULT_Y = 100
INITIAL_X_OFFSET = 150


@dataclass(frozen=True)
class SignaturePosition:
    page: int = DEFAULT_PAGE
    x: float = DEFAULT_X
    y: float = DEFAULT_Y


@dataclass(frozen=True)
class Recipient:
    email: str
    name: str


@dataclass(frozen=True)
class Tab:
    """A placed marker on the rendered document."""

    label: str
    page: int
    x: float
    y: float
    optional: bool

    def to_definition(self) -> Dict[str, str]:
        return {
            "documentId": DOCUMENT_ID,
            "pageNumber": str(self.page),
            "xPosition": _format_coordinate(self.x),
            "yPosition": _format_coordinate(self.y),
            "tabLabel": self.label,
            "optional": "true" if self.optional else "false",
        }


@dataclass(frozen=True)
class SignatureField:
    """A required sign-here tab plus its optional companion initial tab."""

    sign_here: Tab
    initial: Optional[Tab] = None


@dataclass(frozen=True)
class Envelope:
    document_bytes: bytes
    recipient: Recipient
    fields: Tuple[SignatureField, ...]
    email_subject: str = DEFAULT_EMAIL_SUBJECT
    cc_recipient: Optional[Recipient] = None
    document_name: str = DOCUMENT_NAME
    status: str = ENVELOPE_STATUS

    @property
    def sign_here_tabs(self) -> List[Tab]:
        return [f.sign_here for f in self.fields]

    @property
    def initial_tabs(self) -> List[Tab]:
        return [f.initial for f in self.fields if f.initial is not None]

    @property
    def document_base64(self) -> str:
        return base64.b64encode(self.document_bytes).decode("ascii")

    def to_definition(self) -> Dict[str, Any]:
        """Render the envelopeDefinition JSON body for the create-envelope call."""
        tabs: Dict[str, Any] = {
            "signHereTabs": [tab.to_definition() for tab in self.sign_here_tabs],
        }
        initial_tabs = self.initial_tabs
        if initial_tabs:
            tabs["initialHereTabs"] = [tab.to_definition() for tab in initial_tabs]

        recipients: Dict[str, Any] = {
            "signers": [
                {
                    "email": self.recipient.email,
                    "name": self.recipient.name,
                    "recipientId": SIGNER_RECIPIENT_ID,
                    "routingOrder": "1",
                    "tabs": tabs,
                }
            ]
        }
        if self.cc_recipient is not None:
            recipients["carbonCopies"] = [
                {
                    "email": self.cc_recipient.email,
                    "name": self.cc_recipient.name,
                    "recipientId": CC_RECIPIENT_ID,
                    "routingOrder": "2",
                }
            ]

        return {
            "emailSubject": self.email_subject,
            "status": self.status,
            "documents": [
                {
                    "documentBase64": self.document_base64,
                    "name": self.document_name,
                    "fileExtension": DOCUMENT_EXTENSION,
                    "documentId": DOCUMENT_ID,
                }
            ],
            "recipients": recipients,
        }


def _format_coordinate(value: float) -> str:
    # 50.0 -> "50", 50.5 -> "50.5"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _coerce_number(value: Any, name: str, index: int) -> float:
    if isinstance(value, bool):
        raise ValidationError(
            message=f"signaturePositions[{index}].{name} must be a number",
            field="signaturePositions",
            context={"index": index},
        )
    if not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValidationError(
                message=f"signaturePositions[{index}].{name} must be a number",
                field="signaturePositions",
                context={"index": index, "value": repr(value)},
            )
    if not math.isfinite(value) or value < 0:
        raise ValidationError(
            message=f"signaturePositions[{index}].{name} must be a non-negative number",
            field="signaturePositions",
            context={"index": index},
        )
    return value


def normalize_position(raw: Any, index: int = 0) -> SignaturePosition:
    """
    Turn a caller-supplied {page, x, y} mapping into a SignaturePosition.

    Missing (or null) components take the defaults page=1, x=100, y=100.
    Zero is a valid coordinate; page numbers start at 1.
    """
    if isinstance(raw, SignaturePosition):
        return raw
    if hasattr(raw, "model_dump"):
        raw = raw.model_dump()
    if not isinstance(raw, dict):
        raise ValidationError(
            message=f"signaturePositions[{index}] must be an object with page, x and y",
            field="signaturePositions",
            context={"index": index},
        )

    page = raw.get("page")
    x = raw.get("x")
    y = raw.get("y")

    page_value = DEFAULT_PAGE if page is None else _coerce_number(page, "page", index)
    if page_value < 1 or not float(page_value).is_integer():
        raise ValidationError(
            message=f"signaturePositions[{index}].page must be a positive integer",
            field="signaturePositions",
            context={"index": index},
        )

    return SignaturePosition(
        page=int(page_value),
        x=DEFAULT_X if x is None else _coerce_number(x, "x", index),
        y=DEFAULT_Y if y is None else _coerce_number(y, "y", index),
    )


def build_signature_fields(
    positions: Sequence[SignaturePosition],
    include_initial_fields: bool = True,
) -> Tuple[SignatureField, ...]:
    """Map positions 1:1 to fields, preserving input order."""
    fields = []
    for i, pos in enumerate(positions):
        ordinal = i + 1
        sign_here = Tab(
            label=f"Logo_Approval_{ordinal}",
            page=pos.page,
            x=pos.x,
            y=pos.y,
            optional=False,
        )
        initial = None
        if include_initial_fields:
            initial = Tab(
                label=f"Initial_{ordinal}",
                page=pos.page,
                x=pos.x + INITIAL_X_OFFSET,
                y=pos.y,
                optional=True,
            )
        fields.append(SignatureField(sign_here=sign_here, initial=initial))
    return tuple(fields)


def build_envelope(
    document_bytes: bytes,
    recipient_email: str,
    recipient_name: str,
    positions: Sequence[Any],
    *,
    include_initial_fields: bool = True,
    cc_recipient: Optional[Recipient] = None,
    email_subject: str = DEFAULT_EMAIL_SUBJECT,
) -> Envelope:
    """
    Build an Envelope for one document, one signer, and N positions.

    Args:
        document_bytes: Raw PDF bytes (non-empty).
        recipient_email: Signer email (non-empty).
        recipient_name: Signer display name (non-empty).
        positions: SignaturePosition values or {page, x, y} mappings.
        include_initial_fields: Emit an optional initial tab per position.
        cc_recipient: Optional carbon-copy recipient.
        email_subject: Subject line of the provider's notification email.

    Raises:
        ValidationError: Shape or value problems, before any network call.
    """
    if not isinstance(document_bytes, (bytes, bytearray)) or not document_bytes:
        raise ValidationError(message="Document is empty", field="pdfBase64")
    if not isinstance(recipient_email, str) or not recipient_email.strip():
        raise ValidationError(message="Recipient email is required", field="recipientEmail")
    if not isinstance(recipient_name, str) or not recipient_name.strip():
        raise ValidationError(message="Recipient name is required", field="recipientName")
    if isinstance(positions, (str, bytes, dict)) or not isinstance(positions, Sequence):
        raise ValidationError(
            message="signaturePositions must be an array",
            field="signaturePositions",
        )

    normalized = [normalize_position(raw, i) for i, raw in enumerate(positions)]

    return Envelope(
        document_bytes=bytes(document_bytes),
        recipient=Recipient(email=recipient_email.strip(), name=recipient_name.strip()),
        fields=build_signature_fields(normalized, include_initial_fields),
        email_subject=email_subject,
        cc_recipient=cc_recipient,
    )
