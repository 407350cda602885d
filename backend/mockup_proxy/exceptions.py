"""
Mockup Approval Proxy - Custom Exception Hierarchy
====================================================

What:  Application-specific exceptions for each failure the proxy can meet.
Why:   Each integration fails in its own way (bad credentials, rejected JWT,
       rejected envelope, upstream 404). Typed exceptions let the global
       handlers in main.py pick the status code and keep routes thin.
How:   Each exception carries a message and an optional context dict.
       Handlers return `{"success": false, "error": <message>}` bodies.
Who:   Raised by services; caught by global handlers (or, for LoggingError,
       by the send logger itself).

Exception Hierarchy:
    ProxyError (base)
    ├── ValidationError       → 400 Bad Request (caller can fix the input)
    ├── ConfigurationError    → 500 (credentials or settings missing/malformed)
    ├── AuthenticationError   → 500 (DocuSign rejected the JWT grant)
    ├── SubmissionError       → 500 (DocuSign rejected envelope creation)
    ├── UpstreamError         → mirrors the upstream status (Brightpearl)
    ├── ImageFetchError       → 500 (SFTP or URL image proxy failed)
    └── LoggingError          → never returned; send already succeeded
"""

from typing import Any, Dict, Optional


class ProxyError(Exception):
    """
    Base exception for all proxy errors.

    Attributes:
        message:  Error description returned to the caller
        context:  Additional debug info (logged, not returned)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ProxyError):
    """
    Raised when caller input fails validation.

    When:    Missing pdfBase64/recipientEmail/recipientName, positions that are
             not a list, negative coordinates, undecodable base64.
    HTTP:    400 Bad Request

    Raised before any outbound call, so a bad request never costs a token
    exchange.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class ConfigurationError(ProxyError):
    """
    Raised when an integration is used without the settings it needs.

    When:    DocuSign credentials absent, Brightpearl token absent, unknown
             Brightpearl datacenter, SFTP host absent.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Server configuration is incomplete",
        missing: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if missing:
            ctx["missing"] = list(missing)
        super().__init__(message=message, context=ctx)
        self.missing = list(missing or [])


class AuthenticationError(ProxyError):
    """
    Raised when the signature provider rejects the JWT-bearer grant.

    When:    Private key cannot sign, consent not granted, revoked integration,
             clock skew, token endpoint unreachable.
    HTTP:    500 Internal Server Error

    The submission is aborted; no envelope exists on the provider side.
    """

    def __init__(
        self,
        message: str = "Authentication with the signature provider failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class SubmissionError(ProxyError):
    """
    Raised when envelope creation fails.

    When:    Provider answered 4xx/5xx, or the request never completed
             (status_code is None in that case).
    HTTP:    500 Internal Server Error

    Not retried: a single failed attempt is a failed operation.
    """

    def __init__(
        self,
        message: str = "Envelope submission failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class UpstreamError(ProxyError):
    """
    Raised when a pass-through upstream (Brightpearl) answers non-2xx.

    HTTP:    Same status the upstream returned; body carries its raw text.
    """

    def __init__(
        self,
        message: str = "Upstream request failed",
        status_code: int = 502,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class ImageFetchError(ProxyError):
    """
    Raised when an image cannot be read from SFTP or proxied from a URL.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Error fetching image",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LoggingError(ProxyError):
    """
    Raised by a send log store when an append or read fails.

    Appends are best effort: SendLogger catches this and reports it, since
    the envelope it describes has already been sent. Reads propagate and
    become a 500 through the catch-all handler.
    """

    def __init__(
        self,
        message: str = "Send log operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
