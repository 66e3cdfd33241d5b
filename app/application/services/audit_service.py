"""Audit service: build, append and query immutable audit events.

create_audit_event builds an event from before/after snapshots and attaches
an advisory field diff; AuditService persists events through an append-only
repository and answers workspace-scoped queries. Nothing here raises across
the service boundary.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from app.application.dtos.audit import AuditEvent, AuditEventRecord, AuditQuery, FieldDiff
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.interfaces.repositories import IAuditEventRepository
from app.shared.context import ActorContext
from app.shared.enums import AuditAction, EntityType
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

ENTITY_HISTORY_LIMIT = 100
MAX_QUERY_LIMIT = 500

_SENSITIVE_KEYS = frozenset({
    "password", "hashed_password", "secret", "api_key", "token",
    "access_token", "refresh_token", "aadhaar_number", "pan_number",
})


def _json_safe(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Mapping):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_json_safe(v) for v in value]
    return value


def sanitize_snapshot(data: Mapping[str, Any] | None) -> dict[str, Any] | None:
    """Return a JSON-safe copy of an entity snapshot with secrets redacted."""
    if data is None:
        return None
    out: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in _SENSITIVE_KEYS:
            out[key] = "[REDACTED]"
        else:
            out[key] = _json_safe(value)
    return out


def _canonical(value: Any) -> str:
    return json.dumps(_json_safe(value), sort_keys=True, default=str)


def diff_objects(
    before: Mapping[str, Any] | None, after: Mapping[str, Any] | None
) -> list[FieldDiff]:
    """Return one FieldDiff per key whose value differs between snapshots.

    Keys are taken from the union of both mappings, before's order first.
    Equality is structural (canonical JSON), so equal nested values, Decimals
    and dates compare equal regardless of identity. A key present on only one
    side is a change even when the other value is None.
    """
    before = before or {}
    after = after or {}
    keys = list(before.keys()) + [k for k in after.keys() if k not in before]
    diffs: list[FieldDiff] = []
    for key in keys:
        old = before.get(key)
        new = after.get(key)
        if (key in before) != (key in after) or _canonical(old) != _canonical(new):
            diffs.append(FieldDiff(field=key, old=old, new=new))
    return diffs


def create_audit_event(
    entity_type: EntityType,
    entity_id: str,
    action: AuditAction,
    actor: ActorContext,
    *,
    before: Mapping[str, Any] | None = None,
    after: Mapping[str, Any] | None = None,
    metadata: Mapping[str, Any] | None = None,
    logger: logging.Logger | None = None,
) -> AuditEvent:
    """Build an audit event for one entity mutation.

    When both snapshots are present the field diff is stored under
    metadata["diff"] and the changed field names in fields_changed. A failure
    computing the diff is logged and the event is still returned.
    """
    log = logger or get_logger(__name__)
    before_snapshot = sanitize_snapshot(before)
    after_snapshot = sanitize_snapshot(after)
    event_metadata: dict[str, Any] = sanitize_snapshot(metadata) or {}
    fields_changed: tuple[str, ...] = ()

    if before_snapshot is not None and after_snapshot is not None:
        try:
            diffs = diff_objects(before_snapshot, after_snapshot)
            event_metadata["diff"] = [d.to_dict() for d in diffs]
            fields_changed = tuple(d.field for d in diffs)
        except Exception:
            log.warning(
                "Audit diff failed for %s %s; recording event without diff",
                entity_type.value,
                entity_id,
                exc_info=True,
            )

    return AuditEvent(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor.actor_id,
        actor_type=actor.actor_type,
        workspace_id=actor.workspace_id,
        occurred_at=utc_now(),
        before=before_snapshot,
        after=after_snapshot,
        fields_changed=fields_changed,
        metadata=event_metadata,
        ip_address=actor.ip_address,
        user_agent=actor.user_agent,
    )


class AuditService:
    """Appends audit events and answers workspace-scoped audit queries (implements IAuditService)."""

    def __init__(
        self,
        repository: IAuditEventRepository,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self._logger = logger or get_logger(__name__)

    async def log_audit_event(self, event: AuditEvent) -> ServiceResult[str]:
        """Append one event; return its id."""
        try:
            event_id = await self.repository.create(event)
        except Exception as exc:
            self._logger.exception(
                "Failed to log audit event %s.%s (entity_id=%s, workspace_id=%s)",
                event.entity_type.value,
                event.action.value,
                event.entity_id,
                event.workspace_id,
            )
            return ServiceResult.fail(
                ErrorCode.UNKNOWN_ERROR, "Failed to log audit event", cause=exc
            )
        self._logger.debug(
            "Logged audit event %s for %s.%s (entity_id=%s)",
            event_id,
            event.entity_type.value,
            event.action.value,
            event.entity_id,
        )
        return ServiceResult.ok(event_id)

    async def log_audit_events(self, events: list[AuditEvent]) -> ServiceResult[list[str]]:
        """Append events in order; stop at the first failure."""
        if not events:
            return ServiceResult.ok([])
        ids: list[str] = []
        for event in events:
            result = await self.log_audit_event(event)
            if not result.success:
                return ServiceResult.fail(
                    ErrorCode.UNKNOWN_ERROR,
                    "Failed to log audit events",
                    details={"logged": ids},
                    cause=result.error.cause if result.error else None,
                )
            ids.append(result.data)
        return ServiceResult.ok(ids)

    async def query_audit_events(self, query: AuditQuery) -> ServiceResult[list[AuditEventRecord]]:
        """Return events for query.workspace_id matching the filters (newest first)."""
        if not query.workspace_id:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR, "workspace_id is required", field="workspace_id"
            )
        if not 1 <= query.limit <= MAX_QUERY_LIMIT:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR,
                f"limit must be between 1 and {MAX_QUERY_LIMIT}",
                field="limit",
            )
        if query.offset < 0:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR, "offset must not be negative", field="offset"
            )
        if query.from_time and query.to_time and query.from_time > query.to_time:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR, "from_time must not be after to_time", field="from_time"
            )
        try:
            records = await self.repository.list(query)
        except Exception as exc:
            self._logger.exception(
                "Failed to query audit events (workspace_id=%s)", query.workspace_id
            )
            return ServiceResult.fail(
                ErrorCode.UNKNOWN_ERROR, "Failed to query audit events", cause=exc
            )
        return ServiceResult.ok(records)

    async def get_entity_history(
        self,
        entity_type: EntityType,
        entity_id: str,
        workspace_id: str,
    ) -> ServiceResult[list[AuditEventRecord]]:
        """Return the latest events for one entity in the workspace."""
        return await self.query_audit_events(
            AuditQuery(
                workspace_id=workspace_id,
                entity_type=entity_type,
                entity_id=entity_id,
                limit=ENTITY_HISTORY_LIMIT,
            )
        )
