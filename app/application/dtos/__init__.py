"""Application DTOs (no ORM dependency)."""

from app.application.dtos.audit import (
    AuditEvent,
    AuditEventRecord,
    AuditQuery,
    FieldDiff,
)
from app.application.dtos.cascade import CascadeEffect
from app.application.dtos.notification import NotificationPayload, RenderedNotification
from app.application.dtos.service_result import ErrorCode, ServiceError, ServiceResult
from app.application.dtos.workflow import (
    WorkflowContext,
    WorkflowOptions,
    WorkflowResult,
    WorkflowStep,
)

__all__ = [
    "AuditEvent",
    "AuditEventRecord",
    "AuditQuery",
    "CascadeEffect",
    "ErrorCode",
    "FieldDiff",
    "NotificationPayload",
    "RenderedNotification",
    "ServiceError",
    "ServiceResult",
    "WorkflowContext",
    "WorkflowOptions",
    "WorkflowResult",
    "WorkflowStep",
]
