"""Audit event repository. Append-only; implements IAuditEventRepository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.dtos.audit import AuditEvent, AuditEventRecord, AuditQuery
from app.infrastructure.persistence.models.audit_event import AuditEntry
from app.shared.utils.generators import generate_cuid


def _orm_to_result(row: AuditEntry) -> AuditEventRecord:
    """Map ORM to application DTO."""
    return AuditEventRecord(
        id=row.id,
        entity_type=row.entity_type,
        entity_id=row.entity_id,
        action=row.action,
        actor_id=row.actor_id,
        actor_type=row.actor_type,
        workspace_id=row.workspace_id,
        before=row.before,
        after=row.after,
        fields_changed=list(row.fields_changed or []),
        metadata=dict(row.event_metadata or {}),
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        occurred_at=row.occurred_at,
    )


def _conditions(query: AuditQuery) -> list[Any]:
    conditions = [AuditEntry.workspace_id == query.workspace_id]
    if query.entity_type is not None:
        conditions.append(AuditEntry.entity_type == query.entity_type.value)
    if query.entity_id is not None:
        conditions.append(AuditEntry.entity_id == query.entity_id)
    if query.actor_id is not None:
        conditions.append(AuditEntry.actor_id == query.actor_id)
    if query.action is not None:
        conditions.append(AuditEntry.action == query.action.value)
    if query.from_time is not None:
        conditions.append(AuditEntry.occurred_at >= query.from_time)
    if query.to_time is not None:
        conditions.append(AuditEntry.occurred_at <= query.to_time)
    return conditions


class AuditEventRepository:
    """Append-only audit event repository. No update/delete."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, event: AuditEvent) -> str:
        """Append one audit event; return its id."""
        row = AuditEntry(
            id=generate_cuid(),
            workspace_id=event.workspace_id,
            entity_type=event.entity_type.value,
            entity_id=event.entity_id,
            action=event.action.value,
            actor_id=event.actor_id,
            actor_type=event.actor_type.value,
            before=event.before,
            after=event.after,
            fields_changed=list(event.fields_changed),
            event_metadata=dict(event.metadata),
            ip_address=event.ip_address,
            user_agent=event.user_agent,
            occurred_at=event.occurred_at,
        )
        async with self.db.begin_nested():
            self.db.add(row)
        return row.id

    async def list(self, query: AuditQuery) -> list[AuditEventRecord]:
        """List events for the workspace with optional filters (newest first)."""
        stmt = (
            select(AuditEntry)
            .where(and_(*_conditions(query)))
            .order_by(AuditEntry.occurred_at.desc(), AuditEntry.id.desc())
            .offset(query.offset)
            .limit(query.limit)
        )
        result = await self.db.execute(stmt)
        return [_orm_to_result(r) for r in result.scalars().all()]

    async def count(self, query: AuditQuery) -> int:
        """Count events matching the query filters."""
        stmt = select(func.count()).select_from(AuditEntry).where(and_(*_conditions(query)))
        result = await self.db.execute(stmt)
        return int(result.scalar_one())
