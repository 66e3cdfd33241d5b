"""Notification repository: notification_queue rows and in-app inbox rows."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.notification import NotificationPayload
from app.domain.exceptions import ValidationException
from app.infrastructure.persistence.models.notification import (
    Notification,
    NotificationQueueItem,
)
from app.shared.enums import NotificationChannel
from app.shared.utils.generators import generate_cuid


def _workspace_of(payload: NotificationPayload) -> str:
    if not payload.workspace_id:
        raise ValidationException(
            "Notification payload has no workspace_id", field="workspace_id"
        )
    return payload.workspace_id


class NotificationRepository:
    """Implements INotificationRepository on SQLAlchemy."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def enqueue(
        self,
        channel: NotificationChannel,
        payload: NotificationPayload,
        extra: dict[str, Any] | None = None,
    ) -> str:
        """Insert a pending queue row for channel; return its id."""
        extra = extra or {}
        row = NotificationQueueItem(
            id=generate_cuid(),
            workspace_id=_workspace_of(payload),
            channel=channel.value,
            recipient_id=payload.recipient_id,
            recipient_type=payload.recipient_type.value,
            recipient_contact=payload.recipient_contact,
            notification_type=payload.type.value,
            subject=payload.content.subject,
            title=payload.content.title,
            body=payload.content.body,
            action_url=payload.content.action_url,
            action_label=payload.content.action_label,
            data=dict(payload.data),
            priority=payload.priority.value,
            scheduled_at=payload.scheduled_at,
            whatsapp_link=extra.get("whatsapp_link"),
            status="pending",
        )
        async with self.db.begin_nested():
            self.db.add(row)
        return row.id

    async def create_in_app(self, payload: NotificationPayload) -> str:
        """Insert an unread inbox row for the recipient; return its id."""
        row = Notification(
            id=generate_cuid(),
            workspace_id=_workspace_of(payload),
            user_id=payload.recipient_id,
            type=payload.type.value,
            title=payload.content.title,
            body=payload.content.body,
            action_url=payload.content.action_url,
            data=dict(payload.data),
            read=False,
        )
        async with self.db.begin_nested():
            self.db.add(row)
        return row.id
