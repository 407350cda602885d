"""
Mockup Approval Proxy - Image Service
=======================================

What:  Two image sources for the mockup editor:
       - product photos from the SFTP image store (by product code)
       - any image URL, proxied so the canvas is not tainted by CORS
How:   asyncssh opens one SFTP session per request and reads the whole
       file; the URL proxy streams the upstream body through httpx.

Neither path retries. Failures surface as ImageFetchError (HTTP 500).
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Optional

import asyncssh
import httpx

from mockup_proxy.config import Settings, settings as default_settings
from mockup_proxy.exceptions import ConfigurationError, ImageFetchError, ValidationError
from mockup_proxy.services.http_client import get_http_client

logger = logging.getLogger(__name__)

SFTP_IMAGE_EXTENSION = ".jpg"
DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


@dataclass
class ProxiedImage:
    """An open upstream response; the caller must close it."""

    response: httpx.Response
    content_type: str

    async def close(self) -> None:
        await self.response.aclose()


class ImageService:
    def __init__(self, config: Settings = default_settings, http: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._http = http

    @property
    def http(self) -> httpx.AsyncClient:
        return self._http or get_http_client()

    def sftp_path(self, product_code: str) -> str:
        """`<SFTP_IMAGE_DIR>/<code>.jpg`; path separators in the code are rejected."""
        code = (product_code or "").strip()
        if not code:
            raise ValidationError(message='Missing "code" query parameter', field="code")
        if "/" in code or "\\" in code or code in (".", ".."):
            raise ValidationError(message="Invalid product code", field="code")
        return posixpath.join(self.config.sftp_image_dir, f"{code}{SFTP_IMAGE_EXTENSION}")

    async def fetch_sftp_image(self, product_code: str) -> bytes:
        """
        Read one product image from the SFTP store.

        Raises:
            ValidationError: Missing or unsafe product code.
            ConfigurationError: SFTP_HOST or SFTP_USERNAME unset.
            ImageFetchError: Connection, authentication or read failure.
        """
        path = self.sftp_path(product_code)
        if not self.config.sftp_host or not self.config.sftp_username:
            raise ConfigurationError(
                message="SFTP image store not configured",
                missing=[
                    name for name, value in (
                        ("SFTP_HOST", self.config.sftp_host),
                        ("SFTP_USERNAME", self.config.sftp_username),
                    ) if not value
                ],
            )

        try:
            async with asyncssh.connect(
                self.config.sftp_host,
                port=self.config.sftp_port,
                username=self.config.sftp_username,
                password=self.config.sftp_password or None,
                known_hosts=self.config.sftp_known_hosts,
            ) as conn:
                async with conn.start_sftp_client() as sftp:
                    async with sftp.open(path, "rb") as remote_file:
                        data = await remote_file.read()
        except (OSError, asyncssh.Error) as e:
            logger.error("Error fetching image from SFTP: %s (%s)", path, str(e))
            raise ImageFetchError(
                message="Error fetching image from SFTP.",
                context={"path": path, "error_type": type(e).__name__},
            ) from e

        logger.info("Fetched SFTP image %s (%d bytes)", path, len(data))
        return data

    async def open_url_image(self, url: str) -> ProxiedImage:
        """
        Start streaming an image from an arbitrary URL.

        Returns an open ProxiedImage; the response body has not been read.

        Raises:
            ValidationError: Missing url.
            ImageFetchError: Transport failure or non-2xx upstream status.
        """
        if not url or not url.strip():
            raise ValidationError(message='Missing "url" query parameter', field="url")

        try:
            request = self.http.build_request("GET", url)
            response = await self.http.send(request, stream=True, follow_redirects=True)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error("Error proxying image from %s: %s", url, str(e))
            raise ImageFetchError(message=f"Error proxying image: {e}") from e

        if not response.is_success:
            await response.aclose()
            logger.error("Error proxying image from %s: status %d", url, response.status_code)
            raise ImageFetchError(
                message=f"Error proxying image: Failed to fetch {url}",
                context={"status_code": response.status_code},
            )

        content_type = response.headers.get("content-type") or DEFAULT_IMAGE_CONTENT_TYPE
        return ProxiedImage(response=response, content_type=content_type)


image_service = ImageService()
