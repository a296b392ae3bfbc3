"""
Dropnote Backend — Pydantic Response Schemas
==============================================

What:  Pydantic models for the JSON bodies the service returns.
Who:   Used by the message actions and the exception handlers in main.py.
"""

from pydantic import BaseModel, Field


class NewMessageResponse(BaseModel):
    """Returned by POST / once the backend has stored the message."""
    success: bool = Field(default=True)
    token: str = Field(description="Opaque token; the message lives at /{token}/")


class DeleteMessageResponse(BaseModel):
    """Returned by DELETE /{token}/."""
    success: bool = Field(description="Whether a message was removed")


class NotFoundResponse(BaseModel):
    """JSON flavour of the not-found page."""
    error: str = Field(default="Not found")


class ErrorResponse(BaseModel):
    """
    Standard error body used by the exception handlers.

    Example:
        {
            "error": "service_unavailable",
            "message": "Message storage is not configured",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: str = Field(default="", description="Request ID for support correlation")
