"""Notification ORM models: outbound channel queue and in-app inbox."""

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import WorkspaceModel, status_check
from app.shared.enums import NotificationChannel, NotificationPriority

QUEUE_STATUSES = ["pending", "sent", "failed", "cancelled"]


class NotificationQueueItem(WorkspaceModel, Base):
    """One pending delivery on one channel. Drained by an external worker."""

    __tablename__ = "notification_queue"

    channel: Mapped[str] = mapped_column(String(16), nullable=False)
    recipient_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    recipient_type: Mapped[str] = mapped_column(String(16), nullable=False)
    recipient_contact: Mapped[str | None] = mapped_column(String(320), nullable=True)
    notification_type: Mapped[str] = mapped_column(String(48), nullable=False)
    subject: Mapped[str] = mapped_column(String(300), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    action_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    action_label: Mapped[str | None] = mapped_column(String(100), nullable=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=NotificationPriority.NORMAL.value
    )
    whatsapp_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")

    __table_args__ = (
        status_check("notification_queue", QUEUE_STATUSES),
        status_check("notification_queue", NotificationChannel.values(), column="channel"),
        Index("ix_notification_queue_status", "status", "scheduled_at"),
    )


class Notification(WorkspaceModel, Base):
    """In-app inbox entry for a user."""

    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(48), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    action_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
