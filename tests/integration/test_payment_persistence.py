"""Payment recording against Postgres. Session is rolled back after each test."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.application.dtos import ErrorCode
from app.application.dtos.payment import RecordPaymentInput
from app.application.use_cases.workflows import PaymentWorkflows
from app.domain.enums import PaymentMethod
from app.infrastructure.persistence.repositories import CascadeApplier, EntityRepository
from app.infrastructure.services import WorkflowEngine
from app.shared.context import ActorContext
from app.shared.enums import ActorType, EntityType
from app.shared.utils.generators import format_sequence_number

WORKSPACE = "ws_payment_test"


async def _tenant_with_bill(repo: EntityRepository) -> tuple[dict, dict]:
    prop = await repo.insert(EntityType.PROPERTY, WORKSPACE, {"name": "Payment Test PG"})
    tenant = await repo.insert(
        EntityType.TENANT,
        WORKSPACE,
        {
            "property_id": prop["id"],
            "name": "Asha Rao",
            "phone": "9123456780",
            "check_in_date": date(2025, 1, 1),
            "monthly_rent": Decimal("8000"),
        },
    )
    bill = await repo.insert(
        EntityType.BILL,
        WORKSPACE,
        {
            "tenant_id": tenant["id"],
            "property_id": prop["id"],
            "bill_number": "BILL-00001",
            "due_date": date(2025, 2, 5),
            "total_amount": Decimal("8000"),
            "paid_amount": Decimal("0"),
            "balance_due": Decimal("8000"),
            "status": "pending",
        },
    )
    return tenant, bill


@pytest.mark.requires_db
async def test_duplicate_receipt_number_is_duplicate_entry(db_session) -> None:
    repo = EntityRepository(db_session)
    tenant, bill = await _tenant_with_bill(repo)
    taken = format_sequence_number("RCP", await repo.count(EntityType.PAYMENT, WORKSPACE) + 2, 6)
    await repo.insert(
        EntityType.PAYMENT,
        WORKSPACE,
        {
            "tenant_id": tenant["id"],
            "property_id": tenant["property_id"],
            "amount": Decimal("500"),
            "payment_date": date(2025, 1, 20),
            "payment_method": "cash",
            "receipt_number": taken,
            "status": "completed",
        },
    )
    engine = WorkflowEngine(AsyncMock(), AsyncMock(), CascadeApplier(repo))
    actor = ActorContext(actor_id="owner_1", actor_type=ActorType.OWNER, workspace_id=WORKSPACE)

    result = await PaymentWorkflows(engine, repo).record_payment(
        RecordPaymentInput(
            tenant_id=tenant["id"],
            bill_id=bill["id"],
            amount=Decimal("1000"),
            payment_method=PaymentMethod.UPI,
            send_receipt=False,
        ),
        actor,
    )

    assert not result.success
    assert result.error.code == ErrorCode.DUPLICATE_ENTRY
    assert result.steps_completed == 2
    stored = await repo.get(EntityType.BILL, bill["id"], WORKSPACE)
    assert stored["paid_amount"] == Decimal("0")
    assert await repo.count(EntityType.PAYMENT, WORKSPACE, {"receipt_number": taken}) == 1
