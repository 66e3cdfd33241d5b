"""Audit trail API (read-only). Writes happen inside workflows only."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import get_audit_service, require_audit_reader
from app.application.dtos import AuditEventRecord, AuditQuery, ServiceResult
from app.application.services.audit_service import AuditService
from app.core.config import get_settings
from app.domain.exceptions import ManageKarException
from app.schemas.audit_event import AuditEventListResponse, AuditEventResponse
from app.shared.context import ActorContext
from app.shared.enums import AuditAction, EntityType

router = APIRouter()


def _records_or_raise(result: ServiceResult[list[AuditEventRecord]]) -> list[AuditEventRecord]:
    if not result.success:
        error = result.error
        raise ManageKarException(error.message, error.code.value, error.to_dict())
    return result.data or []


@router.get("", response_model=AuditEventListResponse)
async def list_audit_events(
    actor: Annotated[ActorContext, Depends(require_audit_reader)],
    audit: Annotated[AuditService, Depends(get_audit_service)],
    entity_type: EntityType | None = None,
    entity_id: str | None = None,
    actor_id: str | None = None,
    action: AuditAction | None = None,
    from_time: datetime | None = None,
    to_time: datetime | None = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1)] = 50,
) -> AuditEventListResponse:
    """List audit events in the actor's workspace, newest first."""
    limit = min(limit, get_settings().audit_query_max_limit)
    records = _records_or_raise(
        await audit.query_audit_events(
            AuditQuery(
                workspace_id=actor.workspace_id,
                entity_type=entity_type,
                entity_id=entity_id,
                actor_id=actor_id,
                action=action,
                from_time=from_time,
                to_time=to_time,
                limit=limit,
                offset=offset,
            )
        )
    )
    return AuditEventListResponse(
        items=[AuditEventResponse.model_validate(r) for r in records],
        offset=offset,
        limit=limit,
    )


@router.get("/{entity_type}/{entity_id}", response_model=list[AuditEventResponse])
async def get_entity_history(
    entity_type: EntityType,
    entity_id: str,
    actor: Annotated[ActorContext, Depends(require_audit_reader)],
    audit: Annotated[AuditService, Depends(get_audit_service)],
) -> list[AuditEventResponse]:
    """Latest events for one entity."""
    records = _records_or_raise(
        await audit.get_entity_history(entity_type, entity_id, actor.workspace_id)
    )
    return [AuditEventResponse.model_validate(r) for r in records]
