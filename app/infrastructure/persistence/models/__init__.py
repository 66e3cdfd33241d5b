"""Persistence models: ORM entities and mixins.

ENTITY_MODELS maps each EntityType the workflows read or write to its table.
Entity types with no table here (expenses, visitors, meter readings...) are
owned by other services.
"""

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.approval import Approval, Complaint
from app.infrastructure.persistence.models.audit_event import AuditEntry
from app.infrastructure.persistence.models.billing import Bill, Payment, PaymentRefund
from app.infrastructure.persistence.models.exit_clearance import ExitClearance
from app.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    WorkspaceMixin,
    WorkspaceModel,
    status_check,
)
from app.infrastructure.persistence.models.notification import (
    Notification,
    NotificationQueueItem,
)
from app.infrastructure.persistence.models.property import Bed, Property, Room
from app.infrastructure.persistence.models.tenant import Tenant, TenantStay
from app.shared.enums import EntityType

ENTITY_MODELS: dict[EntityType, type[Base]] = {
    EntityType.PROPERTY: Property,
    EntityType.ROOM: Room,
    EntityType.BED: Bed,
    EntityType.TENANT: Tenant,
    EntityType.TENANT_STAY: TenantStay,
    EntityType.BILL: Bill,
    EntityType.PAYMENT: Payment,
    EntityType.PAYMENT_REFUND: PaymentRefund,
    EntityType.EXIT_CLEARANCE: ExitClearance,
    EntityType.APPROVAL: Approval,
    EntityType.COMPLAINT: Complaint,
}

__all__ = [
    "ENTITY_MODELS",
    "Approval",
    "AuditEntry",
    "Bed",
    "Bill",
    "Complaint",
    "CuidMixin",
    "ExitClearance",
    "Notification",
    "NotificationQueueItem",
    "Payment",
    "PaymentRefund",
    "Property",
    "Room",
    "Tenant",
    "TenantStay",
    "TimestampMixin",
    "WorkspaceMixin",
    "WorkspaceModel",
    "status_check",
]
