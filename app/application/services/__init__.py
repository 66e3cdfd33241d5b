"""Application services: audit trail, notifications, WhatsApp message formatting."""

from app.application.services.audit_service import (
    AuditService,
    create_audit_event,
    diff_objects,
)
from app.application.services.notification_service import NotificationService
from app.application.services.notification_templates import get_template_renderer
from app.application.services.whatsapp import (
    format_inr,
    format_phone_number,
    generate_whatsapp_link,
)

__all__ = [
    "AuditService",
    "NotificationService",
    "create_audit_event",
    "diff_objects",
    "format_inr",
    "format_phone_number",
    "generate_whatsapp_link",
    "get_template_renderer",
]
