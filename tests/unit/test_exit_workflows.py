"""Exit clearance: settlement on initiation, check-out on completion."""

from datetime import date
from decimal import Decimal

import pytest

from app.application.dtos import ErrorCode
from app.application.dtos.exit_clearance import CompleteExitInput, Deduction, InitiateExitInput
from app.domain.enums import SettlementType
from app.shared.enums import AuditAction, EntityType, NotificationType


def _initiate(tenant_id: str, *deductions: Deduction) -> InitiateExitInput:
    return InitiateExitInput(
        tenant_id=tenant_id,
        requested_exit_date=date(2025, 3, 31),
        exit_reason="Job relocation",
        deductions=deductions,
        items_checklist={"keys": True},
    )


@pytest.fixture
def unpaid_bills(entities, pg, resident) -> None:
    for status, balance in (("pending", "3000"), ("partial", "1000"), ("paid", "0")):
        entities.seed(
            EntityType.BILL,
            tenant_id=resident["id"],
            property_id=pg["property"]["id"],
            status=status,
            balance_due=Decimal(balance),
        )


async def test_initiate_computes_settlement_and_starts_notice_period(
    exit_workflows, entities, audit_repo, notification_repo, resident, unpaid_bills, actor
) -> None:
    result = await exit_workflows.initiate_exit(
        _initiate(resident["id"], Deduction("Wall paint", Decimal("500"))), actor
    )

    assert result.success, result.errors
    settlement = result.data.settlement
    assert settlement.total_dues == Decimal("4000")
    assert settlement.deduction_amount == Decimal("500")
    assert settlement.net_amount == Decimal("5500")
    assert settlement.settlement_type == SettlementType.REFUND

    tenant = entities.row(EntityType.TENANT, resident["id"])
    assert tenant["status"] == "notice_period"
    assert tenant["expected_exit_date"] == date(2025, 3, 31)
    assert tenant["notice_date"] is not None

    clearance = entities.row(EntityType.EXIT_CLEARANCE, result.data.clearance_id)
    assert clearance["status"] == "initiated"
    assert clearance["refund_amount"] == Decimal("5500")
    assert clearance["additional_payment"] == Decimal("0")
    assert clearance["deductions"] == [{"description": "Wall paint", "amount": "500"}]

    status_event = audit_repo.for_entity(EntityType.TENANT, resident["id"])[0]
    assert status_event.action == AuditAction.STATUS_CHANGE
    assert status_event.after == {"status": "notice_period"}

    recipients = {p.recipient_id for p in notification_repo.in_app}
    assert recipients == {actor.actor_id, "user_tenant_1"}
    assert all(p.type == NotificationType.EXIT_CLEARANCE_INITIATED for p in notification_repo.in_app)


async def test_dues_above_deposit_mean_additional_payment(
    exit_workflows, entities, pg, resident, actor
) -> None:
    entities.seed(
        EntityType.BILL,
        tenant_id=resident["id"],
        property_id=pg["property"]["id"],
        status="overdue",
        balance_due=Decimal("12000"),
    )
    result = await exit_workflows.initiate_exit(_initiate(resident["id"]), actor)

    settlement = result.data.settlement
    assert settlement.settlement_type == SettlementType.ADDITIONAL_PAYMENT
    assert settlement.additional_payment == Decimal("2000")
    assert settlement.refund_amount == Decimal("0")


async def test_second_initiation_is_rejected(exit_workflows, resident, actor) -> None:
    first = await exit_workflows.initiate_exit(_initiate(resident["id"]), actor)
    assert first.success

    second = await exit_workflows.initiate_exit(_initiate(resident["id"]), actor)
    assert second.error.code == ErrorCode.EXIT_ALREADY_INITIATED


async def test_checked_out_tenant_cannot_exit_again(exit_workflows, entities, resident, actor) -> None:
    entities.row(EntityType.TENANT, resident["id"])["status"] = "checked_out"

    result = await exit_workflows.initiate_exit(_initiate(resident["id"]), actor)

    assert result.error.code == ErrorCode.TENANT_ALREADY_EXITED


async def test_unknown_tenant_is_not_found(exit_workflows, actor) -> None:
    result = await exit_workflows.initiate_exit(_initiate("ghost"), actor)
    assert result.error.code == ErrorCode.NOT_FOUND


async def test_failed_clearance_insert_restores_tenant_status(
    exit_workflows, entities, audit_repo, resident, actor
) -> None:
    entities.fail_on.add(("insert", EntityType.EXIT_CLEARANCE))

    result = await exit_workflows.initiate_exit(_initiate(resident["id"]), actor)

    assert not result.success
    assert result.steps_completed == 3
    tenant = entities.row(EntityType.TENANT, resident["id"])
    assert tenant["status"] == "active"
    assert tenant["notice_date"] is None
    assert tenant["expected_exit_date"] is None
    assert audit_repo.events == []


@pytest.fixture
async def clearance_id(exit_workflows, entities, pg, resident, actor) -> str:
    entities.row(EntityType.TENANT, resident["id"])["bed_id"] = pg["bed"]["id"]
    bed = entities.row(EntityType.BED, pg["bed"]["id"])
    bed.update(status="occupied", current_tenant_id=resident["id"])
    entities.seed(EntityType.TENANT_STAY, tenant_id=resident["id"], status="active")
    result = await exit_workflows.initiate_exit(_initiate(resident["id"]), actor)
    return result.data.clearance_id


async def test_complete_exit_checks_out_and_frees_the_room(
    exit_workflows, entities, audit_repo, notification_repo, pg, resident, clearance_id, actor
) -> None:
    notification_repo.in_app.clear()

    result = await exit_workflows.complete_exit(
        CompleteExitInput(
            clearance_id=clearance_id,
            actual_exit_date=date(2025, 3, 30),
            settlement_mode="upi",
        ),
        actor,
    )

    assert result.success, result.errors
    assert result.data.room_released is True
    assert result.data.tenant_status == "checked_out"
    assert result.cascades_failed == 0

    tenant = entities.row(EntityType.TENANT, resident["id"])
    assert tenant["status"] == "checked_out"
    assert tenant["check_out_date"] == date(2025, 3, 30)
    assert tenant["room_id"] is None and tenant["bed_id"] is None

    stays = list(entities.tables[EntityType.TENANT_STAY].values())
    assert [s["status"] for s in stays] == ["completed"]
    assert stays[0]["exit_reason"] == "Job relocation"

    bed = entities.row(EntityType.BED, pg["bed"]["id"])
    assert bed["status"] == "available"
    assert bed["current_tenant_id"] is None

    room = entities.row(EntityType.ROOM, pg["room"]["id"])
    assert room["occupied_beds"] == 0
    assert room["status"] == "available"

    clearance = entities.row(EntityType.EXIT_CLEARANCE, clearance_id)
    assert clearance["status"] == "completed"
    assert clearance["completed_by"] == actor.actor_id

    room_event = audit_repo.for_entity(EntityType.ROOM, pg["room"]["id"])[-1]
    assert room_event.metadata["action"] == "tenant_exit"

    (notice,) = notification_repo.in_app
    assert notice.type == NotificationType.EXIT_CLEARANCE_COMPLETED
    assert notice.data["settlement_amount"] == "₹10,000"


async def test_completed_clearance_cannot_complete_twice(
    exit_workflows, clearance_id, actor
) -> None:
    payload = CompleteExitInput(clearance_id=clearance_id, actual_exit_date=date(2025, 3, 30))
    assert (await exit_workflows.complete_exit(payload, actor)).success

    again = await exit_workflows.complete_exit(payload, actor)
    assert again.error.code == ErrorCode.VALIDATION_ERROR
    assert again.error.message == "Exit clearance already completed"


async def test_room_cascade_failure_does_not_block_exit(
    exit_workflows, entities, pg, resident, clearance_id, actor
) -> None:
    entities.fail_on.add(("update", EntityType.ROOM))

    result = await exit_workflows.complete_exit(
        CompleteExitInput(clearance_id=clearance_id, actual_exit_date=date(2025, 3, 30)), actor
    )

    assert result.success
    assert result.cascades_failed == 1
    assert result.data.room_released is False
    assert entities.row(EntityType.TENANT, resident["id"])["status"] == "checked_out"
    assert entities.row(EntityType.ROOM, pg["room"]["id"])["occupied_beds"] == 1
