"""Audit event ORM model. Append-only entity change log; rows are never updated or deleted."""

from datetime import datetime
from typing import Any

from sqlalchemy import Connection, DateTime, Index, String, Text, event, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column

from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import status_check
from app.shared.enums import ActorType, AuditAction, EntityType
from app.shared.utils.generators import generate_cuid


class AuditEntry(Base):
    """Who changed which entity, how, and when, with before/after snapshots."""

    __tablename__ = "audit_events"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=generate_cuid)
    workspace_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    entity_type: Mapped[str] = mapped_column(String(32), nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    actor_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    actor_type: Mapped[str] = mapped_column(String(16), nullable=False)
    before: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    after: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    fields_changed: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)
    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, default=dict
    )
    ip_address: Mapped[str | None] = mapped_column(String, nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=text("now()"), nullable=False
    )

    __table_args__ = (
        status_check("audit_events", EntityType.values(), column="entity_type"),
        status_check("audit_events", AuditAction.values(), column="action"),
        status_check("audit_events", ActorType.values(), column="actor_type"),
        Index("ix_audit_events_entity", "workspace_id", "entity_type", "entity_id"),
        Index("ix_audit_events_occurred", "workspace_id", "occurred_at"),
    )


@event.listens_for(AuditEntry, "before_update")
def _prevent_audit_event_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditEntry
) -> None:
    """Audit events are append-only; updates are forbidden."""
    raise ValueError("Audit events are immutable and cannot be updated.")


@event.listens_for(AuditEntry, "before_delete")
def _prevent_audit_event_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: AuditEntry
) -> None:
    """Audit events cannot be deleted."""
    raise ValueError("Audit events cannot be deleted.")
