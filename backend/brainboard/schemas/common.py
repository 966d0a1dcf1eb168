"""
Brainboard Backend: Shared Response Schemas
===========================================

What:  Response shapes used across several routers: the error envelope, the
       `{"status": ...}` acknowledgement and the health check.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "image_url is required for kind=image",
            "code": "invalid_input",
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class StatusResponse(BaseModel):
    """Acknowledgement returned by update/delete/grant/revoke operations."""
    status: str = Field(description="updated, deleted, granted or revoked")


class UrlResponse(BaseModel):
    url: str = Field(description="Public URL of the stored image")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
