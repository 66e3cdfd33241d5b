"""DTOs for audit events (append-only entity change log)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.shared.enums import ActorType, AuditAction, EntityType


@dataclass(frozen=True)
class FieldDiff:
    """One changed field between two snapshots."""

    field: str
    old: Any
    new: Any

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field, "old": self.old, "new": self.new}


@dataclass(frozen=True)
class AuditEvent:
    """Input for appending one audit event. Immutable once built."""

    entity_type: EntityType
    entity_id: str
    action: AuditAction
    actor_id: str
    actor_type: ActorType
    workspace_id: str
    occurred_at: datetime
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    fields_changed: tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class AuditEventRecord:
    """Persisted audit event (read-model for query and history)."""

    id: str
    entity_type: str
    entity_id: str
    action: str
    actor_id: str
    actor_type: str
    workspace_id: str
    before: dict[str, Any] | None
    after: dict[str, Any] | None
    fields_changed: list[str]
    metadata: dict[str, Any]
    ip_address: str | None
    user_agent: str | None
    occurred_at: datetime


@dataclass(frozen=True)
class AuditQuery:
    """Filters for listing audit events. workspace_id is always required."""

    workspace_id: str
    entity_type: EntityType | None = None
    entity_id: str | None = None
    actor_id: str | None = None
    action: AuditAction | None = None
    from_time: datetime | None = None
    to_time: datetime | None = None
    limit: int = 50
    offset: int = 0
