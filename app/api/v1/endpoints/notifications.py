"""Notification helpers exposed to the dashboard."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import require_operator
from app.application.services.whatsapp import format_phone_number, generate_whatsapp_link
from app.core.config import get_settings
from app.domain.exceptions import ValidationException
from app.schemas.notification import WhatsAppLinkRequest, WhatsAppLinkResponse
from app.shared.context import ActorContext

router = APIRouter()


@router.post("/whatsapp-link", response_model=WhatsAppLinkResponse)
def whatsapp_link(
    body: WhatsAppLinkRequest,
    actor: Annotated[ActorContext, Depends(require_operator)],
) -> WhatsAppLinkResponse:
    """Build a wa.me click-to-chat link with the message pre-filled."""
    settings = get_settings()
    phone = format_phone_number(body.phone, settings.default_country_code)
    if not phone:
        raise ValidationException("Phone number has no digits", field="phone")
    link = generate_whatsapp_link(
        body.phone,
        body.message,
        base_url=settings.whatsapp_link_base,
        country_code=settings.default_country_code,
    )
    return WhatsAppLinkResponse(phone=phone, link=link)
