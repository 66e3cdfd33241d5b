"""Application layer: interfaces, services, workflow use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (entity, audit and notification
repositories, channel senders, cascade applier, workflow engine).
"""

from app.application.interfaces import (
    IAuditEventRepository,
    IAuditService,
    ICascadeApplier,
    IEntityRepository,
    INotificationChannelSender,
    INotificationRepository,
    INotificationService,
    IWorkflowEngine,
)
from app.application.services.audit_service import AuditService
from app.application.services.notification_service import NotificationService

__all__ = [
    "AuditService",
    "IAuditEventRepository",
    "IAuditService",
    "ICascadeApplier",
    "IEntityRepository",
    "INotificationChannelSender",
    "INotificationRepository",
    "INotificationService",
    "IWorkflowEngine",
    "NotificationService",
]
