"""Notification API schemas."""

from pydantic import BaseModel, Field


class WhatsAppLinkRequest(BaseModel):
    """Phone in any common Indian format and the message to prefill."""

    phone: str = Field(..., min_length=5, max_length=32)
    message: str = Field(..., min_length=1, max_length=4000)


class WhatsAppLinkResponse(BaseModel):
    phone: str
    link: str
