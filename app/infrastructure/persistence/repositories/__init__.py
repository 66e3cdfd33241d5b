"""Persistence repositories. Re-exports for dependency injection."""

from app.infrastructure.persistence.repositories.audit_event_repo import AuditEventRepository
from app.infrastructure.persistence.repositories.base import BaseRepository
from app.infrastructure.persistence.repositories.entity_repo import (
    CascadeApplier,
    EntityRepository,
)
from app.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)

__all__ = [
    "AuditEventRepository",
    "BaseRepository",
    "CascadeApplier",
    "EntityRepository",
    "NotificationRepository",
]
