"""HTTP tests for the workflow routes, audit reads and notification helpers.

Write-path dependencies are overridden with the in-memory stores from
conftest, so these exercise routing, identity headers, request validation
and the workflow-result envelope end to end.
"""

from decimal import Decimal

import pytest

from app.core.config import get_settings
from app.shared.enums import EntityType


def _tenant_body(pg, **overrides) -> dict:
    body = {
        "property_id": pg["property"]["id"],
        "room_id": pg["room"]["id"],
        "name": "Vikram Shah",
        "phone": "9988776655",
        "check_in_date": "2025-02-01",
        "monthly_rent": "7500",
        "security_deposit": "15000",
    }
    body.update(overrides)
    return body


@pytest.fixture
def tenant_headers(resident) -> dict[str, str]:
    return {"X-Workspace-ID": "ws_test", "X-Actor-ID": resident["id"], "X-Actor-Type": "tenant"}


async def test_missing_workspace_header_is_rejected(client, pg) -> None:
    response = await client.post(
        "/api/v1/tenants", json=_tenant_body(pg), headers={"X-Actor-ID": "owner_1"}
    )
    assert response.status_code == 400
    assert response.json()["error"] == "WORKSPACE_REQUIRED"


async def test_missing_actor_id_is_unauthenticated(client, pg) -> None:
    response = await client.post(
        "/api/v1/tenants", json=_tenant_body(pg), headers={"X-Workspace-ID": "ws_test"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_tenant_actor_cannot_onboard_tenants(client, pg, tenant_headers) -> None:
    response = await client.post("/api/v1/tenants", json=_tenant_body(pg), headers=tenant_headers)
    assert response.status_code == 403
    assert response.json()["details"] == {"resource": "workspace", "action": "write"}


async def test_invalid_body_returns_validation_error(client, pg, owner_headers) -> None:
    response = await client.post(
        "/api/v1/tenants", json=_tenant_body(pg, monthly_rent="-1"), headers=owner_headers
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_create_tenant_returns_workflow_envelope(
    client, entities, pg, owner_headers
) -> None:
    response = await client.post("/api/v1/tenants", json=_tenant_body(pg), headers=owner_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["errors"] == []
    assert body["audit_events"]
    tenant_id = body["data"]["tenant_id"]
    tenant = entities.row(EntityType.TENANT, tenant_id)
    assert tenant["name"] == "Vikram Shah"
    assert tenant["monthly_rent"] == Decimal("7500")
    assert entities.row(EntityType.ROOM, pg["room"]["id"])["occupied_beds"] == 2


async def test_create_tenant_in_full_room_is_unprocessable(
    client, entities, pg, owner_headers
) -> None:
    entities.row(EntityType.ROOM, pg["room"]["id"])["occupied_beds"] = 2

    response = await client.post("/api/v1/tenants", json=_tenant_body(pg), headers=owner_headers)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["errors"][0]["code"] == "ROOM_AT_CAPACITY"


async def test_transfer_to_unknown_room_is_not_found(client, resident, owner_headers) -> None:
    response = await client.post(
        f"/api/v1/tenants/{resident['id']}/transfer",
        json={"new_room_id": "missing", "transfer_date": "2025-02-01", "reason": "Quieter room"},
        headers=owner_headers,
    )
    assert response.status_code == 404
    assert response.json()["errors"][0]["message"] == "New room not found"


async def test_transfer_requires_rent_when_adjusting(client, pg, resident, owner_headers) -> None:
    response = await client.post(
        f"/api/v1/tenants/{resident['id']}/transfer",
        json={
            "new_room_id": pg["single"]["id"],
            "transfer_date": "2025-02-01",
            "reason": "Single room",
            "adjust_rent": True,
        },
        headers=owner_headers,
    )
    assert response.status_code == 422


async def test_record_payment_and_overpayment(client, entities, pg, resident, owner_headers) -> None:
    bill = entities.seed(
        EntityType.BILL,
        tenant_id=resident["id"],
        property_id=pg["property"]["id"],
        bill_number="BILL-00007",
        total_amount=Decimal("8000"),
        paid_amount=Decimal("0"),
        balance_due=Decimal("8000"),
        status="pending",
    )
    payload = {"tenant_id": resident["id"], "bill_id": bill["id"], "payment_method": "upi"}

    paid = await client.post(
        "/api/v1/payments", json={**payload, "amount": "3000"}, headers=owner_headers
    )
    assert paid.status_code == 201
    assert paid.json()["data"]["receipt_number"] == "RCP-000001"
    assert paid.json()["data"]["bill_status"] == "partial"

    over = await client.post(
        "/api/v1/payments", json={**payload, "amount": "6000"}, headers=owner_headers
    )
    assert over.status_code == 422
    assert over.json()["errors"][0]["code"] == "PAYMENT_EXCEEDS_DUE"


async def test_bulk_payments_report_failures(client, resident, owner_headers) -> None:
    response = await client.post(
        "/api/v1/payments/bulk",
        json={
            "payments": [
                {
                    "tenant_id": resident["id"],
                    "bill_id": "nope",
                    "amount": "100",
                    "payment_method": "cash",
                }
            ]
        },
        headers=owner_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["total_payments"] == 0
    assert body["failures"] == [{"bill_id": "nope", "message": "Bill not found"}]


async def test_exit_clearance_round_trip(client, entities, resident, owner_headers) -> None:
    started = await client.post(
        "/api/v1/exit-clearances",
        json={
            "tenant_id": resident["id"],
            "requested_exit_date": "2025-03-31",
            "exit_reason": "Moving cities",
            "deductions": [{"description": "Cleaning", "amount": "1000"}],
        },
        headers=owner_headers,
    )
    assert started.status_code == 201
    clearance_id = started.json()["data"]["clearance_id"]
    assert entities.row(EntityType.TENANT, resident["id"])["status"] == "notice_period"

    again = await client.post(
        "/api/v1/exit-clearances",
        json={"tenant_id": resident["id"], "requested_exit_date": "2025-03-31", "exit_reason": "x"},
        headers=owner_headers,
    )
    assert again.status_code == 409
    assert again.json()["errors"][0]["code"] == "EXIT_ALREADY_INITIATED"

    completed = await client.post(
        f"/api/v1/exit-clearances/{clearance_id}/complete",
        json={"actual_exit_date": "2025-03-30", "settlement_mode": "cash"},
        headers=owner_headers,
    )
    assert completed.status_code == 200
    assert completed.json()["data"]["tenant_status"] == "checked_out"


async def test_tenant_raises_and_owner_decides_approval(
    client, entities, resident, owner_headers, tenant_headers
) -> None:
    created = await client.post(
        "/api/v1/approvals",
        json={
            "tenant_id": resident["id"],
            "owner_id": "owner_1",
            "type": "email_change",
            "title": "New email",
            "payload": {"new_email": "asha.rao@example.com"},
        },
        headers=tenant_headers,
    )
    assert created.status_code == 201
    approval_id = created.json()["data"]["approval_id"]

    forbidden = await client.post(
        f"/api/v1/approvals/{approval_id}/decision",
        json={"decision": "approved"},
        headers=tenant_headers,
    )
    assert forbidden.status_code == 403

    decided = await client.post(
        f"/api/v1/approvals/{approval_id}/decision",
        json={"decision": "approved", "decision_notes": "ok"},
        headers=owner_headers,
    )
    assert decided.status_code == 200
    assert decided.json()["data"]["cascading_actions"] == ["tenant_email_updated"]
    assert entities.row(EntityType.TENANT, resident["id"])["email"] == "asha.rao@example.com"

    repeat = await client.post(
        "/api/v1/approvals/bulk-reject",
        json={"approval_ids": [approval_id]},
        headers=owner_headers,
    )
    assert repeat.status_code == 200
    assert repeat.json()["failed"] == 1
    assert repeat.json()["results"][0]["error"] == "Approval already approved"


async def test_pending_is_not_a_decision(client, owner_headers) -> None:
    response = await client.post(
        "/api/v1/approvals/abc/decision", json={"decision": "pending"}, headers=owner_headers
    )
    assert response.status_code == 422


async def test_audit_events_list_and_entity_history(
    client, resident, owner_headers, tenant_headers
) -> None:
    await client.post(
        f"/api/v1/tenants/{resident['id']}/transfer",
        json={"new_room_id": "missing", "transfer_date": "2025-02-01", "reason": "x"},
        headers=owner_headers,
    )
    exit_started = await client.post(
        "/api/v1/exit-clearances",
        json={"tenant_id": resident["id"], "requested_exit_date": "2025-03-31", "exit_reason": "x"},
        headers=owner_headers,
    )
    assert exit_started.status_code == 201

    listing = await client.get(
        "/api/v1/audit-events",
        params={"entity_type": "tenant", "limit": 100000},
        headers=owner_headers,
    )
    assert listing.status_code == 200
    body = listing.json()
    assert body["limit"] == get_settings().audit_query_max_limit
    assert [e["action"] for e in body["items"]] == ["status_change"]
    assert body["items"][0]["entity_id"] == resident["id"]

    history = await client.get(
        f"/api/v1/audit-events/tenant/{resident['id']}", headers=owner_headers
    )
    assert history.status_code == 200
    assert len(history.json()) == 1

    denied = await client.get("/api/v1/audit-events", headers=tenant_headers)
    assert denied.status_code == 403


async def test_audit_events_reject_unknown_entity_type(client, owner_headers) -> None:
    response = await client.get(
        "/api/v1/audit-events", params={"entity_type": "spaceship"}, headers=owner_headers
    )
    assert response.status_code == 422


async def test_whatsapp_link(client, owner_headers) -> None:
    response = await client.post(
        "/api/v1/notifications/whatsapp-link",
        json={"phone": "+91 98765-43210", "message": "Rent due on 5th"},
        headers=owner_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["phone"] == "919876543210"
    assert body["link"] == "https://wa.me/919876543210?text=Rent%20due%20on%205th"


async def test_whatsapp_link_needs_digits(client, owner_headers) -> None:
    response = await client.post(
        "/api/v1/notifications/whatsapp-link",
        json={"phone": "no-digits", "message": "hi"},
        headers=owner_headers,
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "phone"}
