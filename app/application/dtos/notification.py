"""DTOs for notification payloads (channel-agnostic message intent)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.shared.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationType,
    RecipientType,
)


@dataclass(frozen=True)
class RenderedNotification:
    """Template output: email subject, in-app title/body and call to action."""

    subject: str
    title: str
    body: str
    action_url: str | None = None
    action_label: str | None = None


@dataclass(frozen=True)
class NotificationPayload:
    """A fully rendered notification ready for dispatch. Immutable once built.

    recipient_contact carries the phone number or email the send step
    needs (e.g. the WhatsApp link channel); it may be None for in-app only.
    """

    type: NotificationType
    recipient_id: str
    recipient_type: RecipientType
    channels: tuple[NotificationChannel, ...]
    content: RenderedNotification
    data: dict[str, Any] = field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.NORMAL
    recipient_contact: str | None = None
    scheduled_at: datetime | None = None
    workspace_id: str | None = None
