"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from app.infrastructure.
"""

from app.application.interfaces.repositories import (
    IAuditEventRepository,
    IEntityRepository,
    INotificationRepository,
)
from app.application.interfaces.services import (
    IAuditService,
    ICascadeApplier,
    INotificationChannelSender,
    INotificationService,
    IWorkflowEngine,
)

__all__ = [
    "IAuditEventRepository",
    "IAuditService",
    "ICascadeApplier",
    "IEntityRepository",
    "INotificationChannelSender",
    "INotificationRepository",
    "INotificationService",
    "IWorkflowEngine",
]
