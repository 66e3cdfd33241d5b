"""Shared utilities: context, enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.context import (
    ActorContext,
    clear_current_actor,
    get_actor_context,
    get_current_workspace_id,
    set_current_actor,
)
from app.shared.enums import (
    ActorType,
    AuditAction,
    CascadeAction,
    EntityType,
    NotificationChannel,
    NotificationPriority,
    NotificationType,
    RecipientType,
    WorkflowStepStatus,
)
from app.shared.utils import (
    generate_cuid,
    utc_now,
)

__all__ = [
    "set_current_actor",
    "clear_current_actor",
    "get_current_workspace_id",
    "get_actor_context",
    "ActorContext",
    "ActorType",
    "AuditAction",
    "CascadeAction",
    "EntityType",
    "NotificationChannel",
    "NotificationPriority",
    "NotificationType",
    "RecipientType",
    "WorkflowStepStatus",
    "generate_cuid",
    "utc_now",
]
