"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the request actor, DB sessions and the
workflow sets. Everything is built from infrastructure implementations
here; routes depend only on these dependencies, not on infra directly.

Write routes share one transactional session per request (FastAPI caches
dependencies per request), so workflow steps, cascades, audit events and
queued notifications commit together.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.services.audit_service import AuditService
from app.application.services.notification_service import NotificationService
from app.application.use_cases.workflows import (
    ApprovalWorkflows,
    ExitWorkflows,
    PaymentWorkflows,
    TenantWorkflows,
)
from app.core.config import get_settings
from app.core.workspace_context import actor_from_headers
from app.domain.exceptions import AuthorizationException
from app.infrastructure.persistence.database import get_db, get_db_transactional
from app.infrastructure.persistence.repositories import (
    AuditEventRepository,
    CascadeApplier,
    EntityRepository,
    NotificationRepository,
)
from app.infrastructure.services import WorkflowEngine, build_channel_senders
from app.shared.context import ActorContext
from app.shared.enums import ActorType, NotificationChannel
from app.shared.request_audit import client_identity


def get_actor(request: Request) -> ActorContext:
    """Actor for this request from the identity headers (trusted as given)."""
    ip_address, user_agent = client_identity(request.scope)
    return actor_from_headers(
        request.scope.get("headers", []),
        get_settings(),
        ip_address=ip_address,
        user_agent=user_agent,
    )


def require_actor_types(*allowed: ActorType, resource: str, action: str) -> Callable:
    """Dependency factory: the actor type must be one of allowed."""

    def _require(actor: Annotated[ActorContext, Depends(get_actor)]) -> ActorContext:
        if actor.actor_type not in allowed:
            raise AuthorizationException(resource, action)
        return actor

    return _require


# ---- Audit (read path) ----


async def get_audit_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditService:
    return AuditService(AuditEventRepository(db))


# ---- Workflow engine (write path) ----


async def get_entity_repository(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> EntityRepository:
    return EntityRepository(db)


async def get_notification_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> NotificationService:
    """Notification service wired to the request transaction.

    Email and push only have senders when the notification queue is enabled;
    otherwise those channels are logged and skipped.
    """
    settings = get_settings()
    senders = build_channel_senders(
        NotificationRepository(db),
        link_base=settings.whatsapp_link_base,
        country_code=settings.default_country_code,
    )
    if not settings.notification_queue_enabled:
        senders.pop(NotificationChannel.EMAIL)
        senders.pop(NotificationChannel.PUSH)
    return NotificationService(senders)


async def get_workflow_engine(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    entities: Annotated[EntityRepository, Depends(get_entity_repository)],
    notifications: Annotated[NotificationService, Depends(get_notification_service_for_write)],
) -> WorkflowEngine:
    return WorkflowEngine(
        AuditService(AuditEventRepository(db)),
        notifications,
        CascadeApplier(entities),
    )


async def get_tenant_workflows(
    engine: Annotated[WorkflowEngine, Depends(get_workflow_engine)],
    entities: Annotated[EntityRepository, Depends(get_entity_repository)],
) -> TenantWorkflows:
    return TenantWorkflows(engine, entities)


async def get_payment_workflows(
    engine: Annotated[WorkflowEngine, Depends(get_workflow_engine)],
    entities: Annotated[EntityRepository, Depends(get_entity_repository)],
) -> PaymentWorkflows:
    return PaymentWorkflows(engine, entities)


async def get_exit_workflows(
    engine: Annotated[WorkflowEngine, Depends(get_workflow_engine)],
    entities: Annotated[EntityRepository, Depends(get_entity_repository)],
) -> ExitWorkflows:
    return ExitWorkflows(engine, entities)


async def get_approval_workflows(
    engine: Annotated[WorkflowEngine, Depends(get_workflow_engine)],
    entities: Annotated[EntityRepository, Depends(get_entity_repository)],
    tenants: Annotated[TenantWorkflows, Depends(get_tenant_workflows)],
) -> ApprovalWorkflows:
    return ApprovalWorkflows(engine, entities, tenants=tenants)


# Owners and staff run operations; tenants may only raise approval requests.
require_operator = require_actor_types(
    ActorType.OWNER, ActorType.STAFF, ActorType.SYSTEM, resource="workspace", action="write"
)
require_approval_requester = require_actor_types(
    ActorType.OWNER, ActorType.STAFF, ActorType.TENANT, resource="approval", action="create"
)
require_approval_decider = require_actor_types(
    ActorType.OWNER, ActorType.STAFF, resource="approval", action="decide"
)
require_audit_reader = require_actor_types(
    ActorType.OWNER, ActorType.STAFF, ActorType.SYSTEM, resource="audit_event", action="read"
)
