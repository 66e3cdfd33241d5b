"""Approval requests and owner decisions, including the per-type handlers."""

from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from app.application.dtos import ErrorCode
from app.application.dtos.approval import ApprovalDecisionInput, CreateApprovalInput
from app.domain.enums import ApprovalStatus, ApprovalType
from app.shared.enums import (
    AuditAction,
    EntityType,
    NotificationChannel,
    NotificationPriority,
    NotificationType,
)


@pytest.fixture
def make_approval(entities, resident, actor):
    def _make(approval_type: ApprovalType, payload: dict[str, Any] | None = None, **values) -> dict:
        return entities.seed(
            EntityType.APPROVAL,
            requester_tenant_id=resident["id"],
            owner_id=actor.actor_id,
            type=approval_type.value,
            title=approval_type.label,
            payload=payload or {},
            status=values.pop("status", "pending"),
            **values,
        )

    return _make


def _decide(approval: dict, decision: ApprovalStatus = ApprovalStatus.APPROVED, **kwargs):
    return ApprovalDecisionInput(approval_id=approval["id"], decision=decision, **kwargs)


async def test_create_approval_notifies_owner(
    approval_workflows, entities, audit_repo, notification_repo, resident, actor
) -> None:
    result = await approval_workflows.create_approval(
        CreateApprovalInput(
            tenant_id=resident["id"],
            owner_id=actor.actor_id,
            type=ApprovalType.COMPLAINT,
            title="Water heater broken",
            payload={"complaint_id": "c1"},
            priority=NotificationPriority.URGENT,
        ),
        actor,
    )

    assert result.success, result.errors
    assert result.data.status == "pending"
    row = entities.row(EntityType.APPROVAL, result.data.approval_id)
    assert row["status"] == "pending"
    assert row["priority"] == "urgent"
    assert row["payload"] == {"complaint_id": "c1"}

    (event,) = audit_repo.for_entity(EntityType.APPROVAL, result.data.approval_id)
    assert event.action == AuditAction.CREATE

    (notice,) = notification_repo.in_app
    assert notice.type == NotificationType.APPROVAL_REQUIRED
    assert notice.recipient_id == actor.actor_id
    assert notice.priority == NotificationPriority.HIGH
    assert notice.data["request_type"] == "Complaint Resolution"
    assert [c for c, _, _ in notification_repo.queued] == [NotificationChannel.EMAIL]


async def test_checked_out_tenant_cannot_raise_requests(
    approval_workflows, entities, resident, actor
) -> None:
    entities.row(EntityType.TENANT, resident["id"])["status"] = "checked_out"

    result = await approval_workflows.create_approval(
        CreateApprovalInput(
            tenant_id=resident["id"],
            owner_id=actor.actor_id,
            type=ApprovalType.OTHER,
            title="Anything",
        ),
        actor,
    )

    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert result.error.message == "Cannot create approval for checked-out tenant"


async def test_approving_name_change_updates_tenant(
    approval_workflows, entities, audit_repo, notification_repo, resident, make_approval, actor
) -> None:
    approval = make_approval(ApprovalType.NAME_CHANGE, {"new_name": "Asha R. Rao"})

    result = await approval_workflows.process_approval(
        _decide(approval, decision_notes="Verified ID"), actor
    )

    assert result.success, result.errors
    assert result.data.decision == "approved"
    assert result.data.change_applied is True
    assert result.data.cascading_actions == ("tenant_name_updated",)
    assert entities.row(EntityType.TENANT, resident["id"])["name"] == "Asha R. Rao"

    stored = entities.row(EntityType.APPROVAL, approval["id"])
    assert stored["status"] == "approved"
    assert stored["decided_by"] == actor.actor_id
    assert stored["change_applied"] is True

    (event,) = audit_repo.for_entity(EntityType.APPROVAL, approval["id"])
    assert event.action == AuditAction.APPROVE
    assert event.metadata["approval_type"] == "name_change"

    (notice,) = notification_repo.in_app
    assert notice.type == NotificationType.APPROVAL_DECISION
    assert notice.recipient_id == "user_tenant_1"


async def test_missing_change_value_reopens_approval(
    approval_workflows, entities, audit_repo, resident, make_approval, actor
) -> None:
    approval = make_approval(ApprovalType.PHONE_CHANGE, {})

    result = await approval_workflows.process_approval(_decide(approval), actor)

    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert result.error.field == "new_phone"
    assert result.steps_completed == 3
    stored = entities.row(EntityType.APPROVAL, approval["id"])
    assert stored["status"] == "pending"
    assert stored["decided_by"] is None
    assert entities.row(EntityType.TENANT, resident["id"])["phone"] == "9123456780"
    assert audit_repo.events == []


async def test_rejection_changes_nothing_else(
    approval_workflows, entities, audit_repo, resident, make_approval, actor
) -> None:
    approval = make_approval(ApprovalType.NAME_CHANGE, {"new_name": "Someone Else"})

    result = await approval_workflows.process_approval(
        _decide(approval, ApprovalStatus.REJECTED, decision_notes="Documents missing"), actor
    )

    assert result.success
    assert result.data.change_applied is False
    assert result.data.cascading_actions == ("rejected_no_changes",)
    assert entities.row(EntityType.TENANT, resident["id"])["name"] == "Asha Rao"
    assert entities.row(EntityType.APPROVAL, approval["id"])["status"] == "rejected"
    assert audit_repo.for_entity(EntityType.APPROVAL, approval["id"])[0].action == AuditAction.REJECT


async def test_unknown_stored_type_is_left_for_manual_handling(
    approval_workflows, entities, resident, actor
) -> None:
    approval = entities.seed(
        EntityType.APPROVAL,
        requester_tenant_id=resident["id"],
        owner_id=actor.actor_id,
        type="legacy_request",
        title="Old request",
        payload={},
        status="pending",
    )

    result = await approval_workflows.process_approval(_decide(approval), actor)

    assert result.success, result.errors
    assert result.data.cascading_actions == ("unknown_type_manual_handling",)
    assert entities.row(EntityType.APPROVAL, approval["id"])["status"] == "approved"


async def test_processed_approval_cannot_be_decided_again(
    approval_workflows, make_approval, actor
) -> None:
    approval = make_approval(ApprovalType.OTHER, status="approved")

    result = await approval_workflows.process_approval(_decide(approval), actor)

    assert result.error.code == ErrorCode.APPROVAL_ALREADY_PROCESSED
    assert result.error.message == "Approval already approved"


async def test_room_change_runs_the_transfer(
    approval_workflows, entities, pg, resident, make_approval, actor
) -> None:
    approval = make_approval(
        ApprovalType.ROOM_CHANGE,
        {"requested_room_id": pg["single"]["id"], "transfer_date": "2025-02-01", "new_rent": "9500"},
    )

    result = await approval_workflows.process_approval(_decide(approval), actor)

    assert result.success, result.errors
    assert result.data.cascading_actions == (
        "room_transfer_completed",
        "old_room_released",
        "new_room_assigned",
        "rent_adjusted",
    )
    tenant = entities.row(EntityType.TENANT, resident["id"])
    assert tenant["room_id"] == pg["single"]["id"]
    assert tenant["monthly_rent"] == Decimal("9500")
    assert entities.row(EntityType.ROOM, pg["single"]["id"])["occupied_beds"] == 1
    assert entities.row(EntityType.ROOM, pg["room"]["id"])["occupied_beds"] == 0


async def test_room_change_to_full_room_fails_before_deciding(
    approval_workflows, entities, pg, make_approval, actor
) -> None:
    entities.row(EntityType.ROOM, pg["single"]["id"])["occupied_beds"] = 1
    approval = make_approval(ApprovalType.ROOM_CHANGE, {"requested_room_id": pg["single"]["id"]})

    result = await approval_workflows.process_approval(_decide(approval), actor)

    assert result.error.code == ErrorCode.ROOM_AT_CAPACITY
    assert result.steps_completed == 1
    assert entities.row(EntityType.APPROVAL, approval["id"])["status"] == "pending"


async def test_bill_dispute_adjusts_bill(
    approval_workflows, entities, pg, resident, make_approval, actor
) -> None:
    bill = entities.seed(
        EntityType.BILL,
        tenant_id=resident["id"],
        property_id=pg["property"]["id"],
        total_amount=Decimal("8000"),
        paid_amount=Decimal("2000"),
        balance_due=Decimal("6000"),
        late_fee=Decimal("200"),
        status="overdue",
        notes=None,
    )
    approval = make_approval(ApprovalType.BILL_DISPUTE, {"bill_id": bill["id"]})

    result = await approval_workflows.process_approval(
        _decide(
            approval,
            adjustment_amount=Decimal("-500"),
            new_due_date=date(2099, 1, 10),
            waive_late_fee=True,
        ),
        actor,
    )

    assert result.success, result.errors
    assert result.data.cascading_actions == (
        "bill_adjusted_by_-500",
        "due_date_updated",
        "late_fee_waived",
        "overdue_status_cleared",
        "bill_dispute_resolved",
    )
    stored = entities.row(EntityType.BILL, bill["id"])
    assert stored["total_amount"] == Decimal("7300")
    assert stored["balance_due"] == Decimal("5300")
    assert stored["late_fee"] == 0
    assert stored["status"] == "pending"
    assert stored["due_date"] == date(2099, 1, 10)
    assert stored["notes"] == f"Adjustment: -500 (Approval #{approval['id']})"


async def test_payment_dispute_notes_duplicate(
    approval_workflows, entities, resident, make_approval, actor
) -> None:
    payment = entities.seed(
        EntityType.PAYMENT, tenant_id=resident["id"], amount=Decimal("8000"), notes="Paid at desk"
    )
    approval = make_approval(
        ApprovalType.PAYMENT_DISPUTE,
        {"payment_id": payment["id"], "dispute_type": "duplicate_payment"},
    )

    result = await approval_workflows.process_approval(_decide(approval), actor)

    assert result.data.cascading_actions == ("duplicate_payment_flagged",)
    assert entities.row(EntityType.PAYMENT, payment["id"])["notes"] == (
        "Paid at desk\nDISPUTE: Duplicate payment claim - Review for refund"
    )


async def test_rent_revision_updates_monthly_rent(
    approval_workflows, entities, resident, make_approval, actor
) -> None:
    approval = make_approval(
        ApprovalType.TENANCY_ISSUE, {"issue_type": "rent_revision", "new_rent": 8500}
    )

    result = await approval_workflows.process_approval(_decide(approval), actor)

    assert result.data.cascading_actions == ("tenancy_issue_logged", "rent_revised")
    tenant = entities.row(EntityType.TENANT, resident["id"])
    assert tenant["monthly_rent"] == Decimal("8500")
    assert "rent_revision" in tenant["notes"]


async def test_room_issue_logs_note_on_tenant_room(
    approval_workflows, entities, pg, make_approval, actor
) -> None:
    approval = make_approval(ApprovalType.ROOM_ISSUE, {"issue_type": "maintenance"})

    result = await approval_workflows.process_approval(
        _decide(approval, decision_notes="Plumber booked"), actor
    )

    assert result.data.cascading_actions == ("room_issue_logged", "maintenance_acknowledged")
    assert entities.row(EntityType.ROOM, pg["room"]["id"])["notes"].endswith(
        "maintenance - Plumber booked"
    )


async def test_bulk_decisions_report_each_item(
    approval_workflows, entities, make_approval, actor
) -> None:
    first = make_approval(ApprovalType.OTHER)
    done = make_approval(ApprovalType.OTHER, status="rejected")
    second = make_approval(ApprovalType.COMPLAINT)

    output = await approval_workflows.bulk_approve(
        [first["id"], done["id"], second["id"]], actor, decision_notes="Batch"
    )

    assert output.succeeded == 2
    assert output.failed == 1
    assert [i.success for i in output.results] == [True, False, True]
    assert output.results[1].error == "Approval already rejected"

    rejected = await approval_workflows.bulk_reject([first["id"]], actor)
    assert rejected.failed == 1
    assert entities.row(EntityType.APPROVAL, first["id"])["status"] == "approved"
