"""
Mockup Approval Proxy - Signature Request/Response Schemas
============================================================

What:  Pydantic models for POST /send-to-docusign.
Why:   The browser speaks camelCase JSON; these models keep the wire names
       while the Python side uses snake_case attributes.
How:   `alias_generator=to_camel` + `populate_by_name=True`. FastAPI
       serializes response models by alias.

Design Decision:
    Request fields are all Optional and positions are typed `Any`. Required
    fields and position shapes are checked by SignatureService so that a
    bad request yields HTTP 400 `{"success": false, "error": ...}` naming
    the missing fields, instead of FastAPI's generic 422 payload.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SendRequest(CamelModel):
    """
    Inbound submission from the mockup approval front end.

    `logo_positions` is the field name older front-end builds still send;
    `signature_positions` wins when both are present.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    pdf_base64: Optional[str] = Field(default=None, description="Base64-encoded PDF mockup sheet")
    recipient_email: Optional[str] = Field(default=None, description="Signer email address")
    recipient_name: Optional[str] = Field(default=None, description="Signer display name")
    signature_positions: Optional[Any] = Field(
        default=None,
        description="List of {page, x, y} where sign-here fields are placed",
    )
    logo_positions: Optional[Any] = Field(
        default=None,
        description="Legacy name for signaturePositions",
    )


class SendResponse(CamelModel):
    """Successful submission: provider-assigned envelope id and status."""

    success: bool = True
    envelope_id: str
    status: str

