"""Audit event API schemas (read-only)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditEventResponse(BaseModel):
    """Single audit event."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    entity_type: str
    entity_id: str
    action: str
    actor_id: str
    actor_type: str
    workspace_id: str
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    fields_changed: list[str]
    metadata: dict[str, Any]
    ip_address: str | None = None
    user_agent: str | None = None
    occurred_at: datetime


class AuditEventListResponse(BaseModel):
    """Page of audit events, newest first."""

    items: list[AuditEventResponse]
    offset: int
    limit: int
