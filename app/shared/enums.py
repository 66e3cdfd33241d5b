"""Shared enumerations for the ManageKar application.

Cross-cutting enums used by application and infrastructure (e.g. audit,
actor type, workflow, notifications). Domain-specific enums (e.g.
TenantStatus) live in app.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ActorType(_ValuesMixin, str, Enum):
    """Who performed an action (audit attribution and permission context)."""

    OWNER = "owner"
    STAFF = "staff"
    TENANT = "tenant"
    SYSTEM = "system"


class EntityType(_ValuesMixin, str, Enum):
    """Closed set of entity kinds that audit events and cascades may reference."""

    TENANT = "tenant"
    PROPERTY = "property"
    ROOM = "room"
    BED = "bed"
    TENANT_STAY = "tenant_stay"
    BILL = "bill"
    PAYMENT = "payment"
    PAYMENT_REFUND = "payment_refund"
    EXPENSE = "expense"
    COMPLAINT = "complaint"
    NOTICE = "notice"
    VISITOR = "visitor"
    STAFF = "staff"
    EXIT_CLEARANCE = "exit_clearance"
    APPROVAL = "approval"
    METER_READING = "meter_reading"
    CHARGE = "charge"
    ROLE = "role"
    WORKSPACE = "workspace"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types recorded against an entity."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"
    APPROVE = "approve"
    REJECT = "reject"
    ASSIGN = "assign"
    COMPLETE = "complete"
    CANCEL = "cancel"
    VIEW = "view"
    EXPORT = "export"
    BULK_UPDATE = "bulk_update"


class CascadeAction(_ValuesMixin, str, Enum):
    """Secondary mutation applied after a workflow's steps succeed."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS_CHANGE = "status_change"


class WorkflowStepStatus(_ValuesMixin, str, Enum):
    """Lifecycle of one step inside a workflow run."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class NotificationChannel(_ValuesMixin, str, Enum):
    """Delivery channel for a notification payload."""

    EMAIL = "email"
    WHATSAPP = "whatsapp"
    IN_APP = "in_app"
    PUSH = "push"


class NotificationType(_ValuesMixin, str, Enum):
    """Template identity for a notification."""

    BILL_GENERATED = "bill_generated"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_REMINDER = "payment_reminder"
    COMPLAINT_UPDATE = "complaint_update"
    APPROVAL_REQUIRED = "approval_required"
    APPROVAL_DECISION = "approval_decision"
    EXIT_CLEARANCE_INITIATED = "exit_clearance_initiated"
    EXIT_CLEARANCE_COMPLETED = "exit_clearance_completed"
    WELCOME = "welcome"
    INVITATION = "invitation"


class NotificationPriority(_ValuesMixin, str, Enum):
    """Queue priority for a notification."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class RecipientType(_ValuesMixin, str, Enum):
    """Kind of user a notification is addressed to."""

    OWNER = "owner"
    STAFF = "staff"
    TENANT = "tenant"
