"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP). All of them
return ServiceResult and never raise across the boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from app.application.dtos.audit import AuditEvent, AuditEventRecord, AuditQuery
    from app.application.dtos.cascade import CascadeEffect
    from app.application.dtos.notification import NotificationPayload
    from app.application.dtos.service_result import ServiceResult
    from app.application.dtos.workflow import WorkflowOptions, WorkflowResult
    from app.domain.entities.workflow import WorkflowDefinition
    from app.shared.enums import ActorType


# Audit service interface
class IAuditService(Protocol):
    """Protocol for appending and querying audit events."""

    async def log_audit_event(self, event: AuditEvent) -> ServiceResult[str]:
        """Persist one event; return its id."""

    async def log_audit_events(self, events: list[AuditEvent]) -> ServiceResult[list[str]]:
        """Persist events in order; return their ids."""

    async def query_audit_events(self, query: AuditQuery) -> ServiceResult[list[AuditEventRecord]]:
        """Return workspace-scoped events matching query."""


# Notification service interface
class INotificationService(Protocol):
    """Protocol for dispatching rendered notification payloads."""

    async def send_notification(self, payload: NotificationPayload) -> ServiceResult[str]:
        """Dispatch to every requested channel; return joined dispatch ids."""

    async def send_notifications(
        self, payloads: list[NotificationPayload]
    ) -> ServiceResult[list[str]]:
        """Dispatch sequentially; return ids of successful sends."""


# Channel sender interface
class INotificationChannelSender(Protocol):
    """One delivery channel (email, WhatsApp link, in-app, push)."""

    async def send(self, payload: NotificationPayload) -> ServiceResult[str]:
        """Deliver or queue the payload on this channel; return a dispatch id."""


# Cascade applier interface
class ICascadeApplier(Protocol):
    """Applies one typed cascade effect as a direct entity-table write."""

    async def apply(self, effect: CascadeEffect, workspace_id: str) -> ServiceResult[None]:
        """Apply the effect within workspace_id."""


# Workflow engine interface
class IWorkflowEngine(Protocol):
    """Runs workflow definitions as sagas."""

    async def execute_workflow[TInput, TOutput](
        self,
        definition: WorkflowDefinition[TInput, TOutput],
        input: TInput,
        actor_id: str,
        actor_type: ActorType,
        workspace_id: str,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[TOutput]:
        """Run definition on behalf of the actor in workspace_id."""
