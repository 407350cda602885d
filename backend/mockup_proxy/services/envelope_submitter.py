"""
Mockup Approval Proxy - Envelope Submitter
============================================

What:  Sends a built Envelope to DocuSign's create-envelope endpoint.
How:   One POST to {base_path}/v2.1/accounts/{account_id}/envelopes with
       the bearer token attached. No retry: a failed attempt is a failed
       operation, surfaced to the caller as SubmissionError.
Who:   Called by SignatureService after authentication succeeded.

There is no partial-success state. With status "sent" the provider either
creates and sends the envelope or creates nothing.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from mockup_proxy.exceptions import SubmissionError
from mockup_proxy.services.docusign_auth import AccessToken
from mockup_proxy.services.envelope_builder import Envelope
from mockup_proxy.services.http_client import get_http_client

logger = logging.getLogger(__name__)

API_VERSION = "v2.1"


@dataclass(frozen=True)
class EnvelopeSummary:
    envelope_id: str
    status: str


def _error_message(response: httpx.Response) -> str:
    """DocuSign errors are JSON {errorCode, message}; fall back to raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("errorCode") or response.text)
    return response.text


class EnvelopeSubmitter:
    """Thin client for the DocuSign envelope-create call."""

    def __init__(self, base_path: str, http: Optional[httpx.AsyncClient] = None):
        self.base_path = base_path.rstrip("/")
        self._http = http

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http or get_http_client()

    def envelopes_url(self, account_id: str) -> str:
        return f"{self.base_path}/{API_VERSION}/accounts/{account_id}/envelopes"

    async def submit(
        self,
        envelope: Envelope,
        account_id: str,
        access_token: AccessToken,
    ) -> EnvelopeSummary:
        """
        Create (and, with status "sent", send) the envelope.

        Returns:
            EnvelopeSummary with the provider-assigned id and echoed status.

        Raises:
            SubmissionError: Transport failure (status_code None) or a 4xx/5xx
                answer carrying the provider's status and message.
        """
        url = self.envelopes_url(account_id)
        headers = {
            "Authorization": access_token.authorization_header,
            "Accept": "application/json",
        }

        try:
            response = await self.http.post(url, json=envelope.to_definition(), headers=headers)
        except httpx.HTTPError as e:
            logger.error("Envelope submission did not complete: %s", str(e))
            raise SubmissionError(
                message=f"Envelope submission failed: {e}",
                context={"error_type": type(e).__name__},
            ) from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.error(
                "DocuSign rejected envelope (%d): %s",
                response.status_code,
                message,
            )
            raise SubmissionError(
                message=f"DocuSign rejected the envelope ({response.status_code}): {message}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            summary = EnvelopeSummary(
                envelope_id=str(body["envelopeId"]),
                status=str(body.get("status", envelope.status)),
            )
        except (ValueError, KeyError, TypeError) as e:
            raise SubmissionError(
                message="DocuSign response did not include an envelope id",
                status_code=response.status_code,
            ) from e

        logger.info(
            "Envelope %s created (status=%s, %d sign-here fields)",
            summary.envelope_id,
            summary.status,
            len(envelope.fields),
        )
        return summary
