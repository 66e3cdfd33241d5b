"""Audit event construction, diffing and AuditService with an in-memory repository."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.application.dtos import AuditQuery, ErrorCode
from app.application.services.audit_service import (
    AuditService,
    create_audit_event,
    diff_objects,
    sanitize_snapshot,
)
from app.shared.context import ActorContext
from app.shared.enums import ActorType, AuditAction, EntityType

ACTOR = ActorContext("owner_1", ActorType.OWNER, "ws_1", ip_address="1.2.3.4", user_agent="ua")


def test_diff_reports_only_changed_fields_in_key_order() -> None:
    diffs = diff_objects(
        {"status": "active", "rent": Decimal("8000"), "room": "101"},
        {"status": "notice_period", "rent": Decimal("8000"), "extra": 1},
    )
    assert [d.field for d in diffs] == ["status", "room", "extra"]
    assert diffs[0].old == "active"
    assert diffs[0].new == "notice_period"


def test_diff_compares_nested_values_structurally() -> None:
    before = {"items": [{"a": 1}], "meta": {"x": 1, "y": 2}}
    after = {"items": [{"a": 1}], "meta": {"y": 2, "x": 1}}
    assert diff_objects(before, after) == []


def test_diff_reports_key_missing_on_one_side_against_none() -> None:
    diffs = diff_objects({"notes": None, "room": "101"}, {"room": "101", "bed_id": None})
    assert [(d.field, d.old, d.new) for d in diffs] == [
        ("notes", None, None),
        ("bed_id", None, None),
    ]
    assert diff_objects({"notes": None}, {"notes": None}) == []


def test_diff_of_missing_snapshots_is_empty() -> None:
    assert diff_objects(None, None) == []


def test_sanitize_snapshot_redacts_secrets_and_serializes_values() -> None:
    snapshot = sanitize_snapshot({
        "password": "hunter2",
        "aadhaar_number": "1234",
        "amount": Decimal("10.50"),
        "day": date(2025, 2, 1),
        "type": ActorType.TENANT,
    })
    assert snapshot == {
        "password": "[REDACTED]",
        "aadhaar_number": "[REDACTED]",
        "amount": "10.50",
        "day": "2025-02-01",
        "type": "tenant",
    }


def test_create_audit_event_with_both_snapshots_records_diff() -> None:
    event = create_audit_event(
        EntityType.TENANT,
        "t1",
        AuditAction.STATUS_CHANGE,
        ACTOR,
        before={"status": "active"},
        after={"status": "checked_out"},
        metadata={"reason": "exit"},
    )
    assert event.workspace_id == "ws_1"
    assert event.actor_id == "owner_1"
    assert event.ip_address == "1.2.3.4"
    assert event.fields_changed == ("status",)
    assert event.metadata["reason"] == "exit"
    assert event.metadata["diff"] == [
        {"field": "status", "old": "active", "new": "checked_out"}
    ]
    assert event.occurred_at.tzinfo is not None


def test_create_audit_event_without_before_has_no_diff() -> None:
    event = create_audit_event(
        EntityType.PAYMENT, "p1", AuditAction.CREATE, ACTOR, after={"amount": 100}
    )
    assert event.before is None
    assert event.fields_changed == ()
    assert "diff" not in event.metadata


async def test_log_audit_events_returns_ids_in_order(audit_repo) -> None:
    service = AuditService(audit_repo)
    events = [
        create_audit_event(EntityType.TENANT, "t1", AuditAction.CREATE, ACTOR),
        create_audit_event(EntityType.ROOM, "r1", AuditAction.UPDATE, ACTOR),
    ]
    result = await service.log_audit_events(events)
    assert result.success
    assert result.data == ["audit_1", "audit_2"]


async def test_log_audit_events_stops_at_first_failure() -> None:
    repo = AsyncMock()
    repo.create = AsyncMock(side_effect=["a1", RuntimeError("insert failed"), "a3"])
    service = AuditService(repo)
    events = [
        create_audit_event(EntityType.TENANT, f"t{i}", AuditAction.CREATE, ACTOR)
        for i in range(3)
    ]

    result = await service.log_audit_events(events)

    assert not result.success
    assert result.error.details["logged"] == ["a1"]
    assert repo.create.await_count == 2


async def test_log_audit_event_never_raises() -> None:
    repo = AsyncMock()
    repo.create = AsyncMock(side_effect=RuntimeError("down"))
    result = await AuditService(repo).log_audit_event(
        create_audit_event(EntityType.TENANT, "t1", AuditAction.CREATE, ACTOR)
    )
    assert not result.success
    assert result.error.code == ErrorCode.UNKNOWN_ERROR


async def test_query_is_scoped_to_workspace_and_newest_first(audit_repo) -> None:
    service = AuditService(audit_repo)
    other = ActorContext("owner_2", ActorType.OWNER, "ws_2")
    await service.log_audit_events([
        create_audit_event(EntityType.TENANT, "t1", AuditAction.CREATE, ACTOR),
        create_audit_event(EntityType.TENANT, "t1", AuditAction.UPDATE, ACTOR),
        create_audit_event(EntityType.TENANT, "t9", AuditAction.CREATE, other),
    ])

    result = await service.query_audit_events(AuditQuery(workspace_id="ws_1"))

    assert result.success
    assert [r.action for r in result.data] == ["update", "create"]
    assert all(r.workspace_id == "ws_1" for r in result.data)


async def test_entity_history_filters_by_entity(audit_repo) -> None:
    service = AuditService(audit_repo)
    await service.log_audit_events([
        create_audit_event(EntityType.TENANT, "t1", AuditAction.CREATE, ACTOR),
        create_audit_event(EntityType.TENANT, "t2", AuditAction.CREATE, ACTOR),
    ])
    result = await service.get_entity_history(EntityType.TENANT, "t2", "ws_1")
    assert [r.entity_id for r in result.data] == ["t2"]


@pytest.mark.parametrize(
    ("query", "field"),
    [
        (AuditQuery(workspace_id=""), "workspace_id"),
        (AuditQuery(workspace_id="ws_1", limit=0), "limit"),
        (AuditQuery(workspace_id="ws_1", limit=501), "limit"),
        (AuditQuery(workspace_id="ws_1", offset=-1), "offset"),
        (
            AuditQuery(
                workspace_id="ws_1",
                from_time=datetime(2025, 1, 2, tzinfo=timezone.utc),
                to_time=datetime(2025, 1, 2, tzinfo=timezone.utc) - timedelta(days=1),
            ),
            "from_time",
        ),
    ],
)
async def test_query_rejects_invalid_filters(audit_repo, query, field) -> None:
    result = await AuditService(audit_repo).query_audit_events(query)
    assert not result.success
    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert result.error.field == field
