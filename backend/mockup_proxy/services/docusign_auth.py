"""
Mockup Approval Proxy - DocuSign Auth Token Provider
======================================================

What:  Exchanges DocuSign credentials for a short-lived bearer token using
       the OAuth JWT-bearer grant (no interactive login).
How:   Signs an RS256 assertion with the integration's private key and
       form-posts it to https://<oauth host>/oauth/token.
Who:   Called by SignatureService once per submission.

Token lifetime:
    Tokens live 3600 seconds and are re-acquired on every submission.
    TokenProvider is an abstract interface so a caching provider can wrap
    JWTTokenProvider without touching callers.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
import jwt

from mockup_proxy.exceptions import AuthenticationError
from mockup_proxy.services.credentials import DocuSignCredentials
from mockup_proxy.services.http_client import get_http_client

logger = logging.getLogger(__name__)

JWT_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"
SCOPES = ("signature", "impersonation")
TOKEN_LIFETIME_SECONDS = 3600


@dataclass(frozen=True)
class AccessToken:
    value: str
    token_type: str = "Bearer"
    expires_in: int = TOKEN_LIFETIME_SECONDS

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.value}"


class TokenProvider(ABC):
    """
    Contract for obtaining a bearer token for the signature provider.

    Implementations raise AuthenticationError on any failure; callers must
    not proceed to envelope submission in that case.
    """

    @abstractmethod
    async def authenticate(self, credentials: DocuSignCredentials) -> AccessToken:
        ...


def build_jwt_assertion(credentials: DocuSignCredentials, now: Optional[int] = None) -> str:
    """Build the RS256 JWT assertion for the DocuSign JWT grant."""
    iat = int(now if now is not None else time.time())
    payload: Dict[str, Any] = {
        "iss": credentials.integration_key,
        "sub": credentials.user_id,
        "aud": credentials.oauth_host,
        "iat": iat,
        "exp": iat + TOKEN_LIFETIME_SECONDS,
        "scope": " ".join(SCOPES),
    }
    token = jwt.encode(payload, credentials.private_key, algorithm="RS256")
    return token.decode("utf-8") if isinstance(token, bytes) else token


def _provider_message(response: httpx.Response) -> str:
    """Pull `error_description`/`error` out of an OAuth error body, else raw text."""
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict):
        return str(body.get("error_description") or body.get("error") or response.text)
    return response.text


class JWTTokenProvider(TokenProvider):
    """
    JWT-bearer grant against the DocuSign account server.

    No token is stored; each call performs a fresh exchange.
    """

    def __init__(self, http: Optional[httpx.AsyncClient] = None):
        self._http = http

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http or get_http_client()

    async def authenticate(self, credentials: DocuSignCredentials) -> AccessToken:
        """
        Exchange a signed assertion for an access token.

        Raises:
            ConfigurationError: A credential field is missing (no network call).
            AuthenticationError: The key cannot sign, the token endpoint is
                unreachable, or DocuSign rejected the grant.
        """
        credentials.require()

        try:
            assertion = build_jwt_assertion(credentials)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            logger.error("Could not sign DocuSign JWT assertion: %s", type(e).__name__)
            raise AuthenticationError(
                message=f"DocuSign private key could not sign the JWT assertion: {e}",
                context={"error_type": type(e).__name__},
            ) from e

        url = f"https://{credentials.oauth_host}/oauth/token"
        try:
            response = await self.http.post(
                url,
                data={"grant_type": JWT_GRANT_TYPE, "assertion": assertion},
            )
        except httpx.HTTPError as e:
            logger.error("DocuSign token request failed: %s", str(e))
            raise AuthenticationError(
                message=f"DocuSign token request failed: {e}",
                context={"error_type": type(e).__name__},
            ) from e

        if response.status_code >= 400:
            message = _provider_message(response)
            logger.error("DocuSign rejected JWT grant (%d): %s", response.status_code, message)
            raise AuthenticationError(
                message=f"DocuSign authentication failed: {message}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
            value = body["access_token"]
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError(
                message="DocuSign token response did not contain an access token",
                status_code=response.status_code,
            ) from e

        logger.info("Obtained DocuSign access token (expires in %ss)", body.get("expires_in"))
        return AccessToken(
            value=value,
            token_type=body.get("token_type", "Bearer"),
            expires_in=int(body.get("expires_in", TOKEN_LIFETIME_SECONDS)),
        )
