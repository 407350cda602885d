"""
Mockup Approval Proxy - Shared Response Schemas
=================================================

What:  Error and health payloads shared by every route.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "success": false,
            "error": "Missing required fields: recipientEmail",
            "request_id": "a1b2c3d4"
        }
    """
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    Health check response.

    Integrations report "configured" or "not_configured"; the send log
    reports which store is active and, for PostgreSQL, whether it answers.
    """
    status: str = Field(description="Overall status: healthy, degraded, unhealthy")
    version: str
    send_log: str = Field(description="json_file, database, or database_unreachable")
    integrations: Dict[str, str]
    uptime_seconds: float
