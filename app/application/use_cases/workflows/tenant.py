"""Tenant workflows: onboarding a new tenant and moving a tenant to another room."""

from __future__ import annotations

from datetime import date
from typing import Any

from app.application.dtos.audit import AuditEvent
from app.application.dtos.notification import NotificationPayload
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.dtos.tenant import (
    CreateTenantInput,
    CreateTenantOutput,
    RoomTransferInput,
    RoomTransferOutput,
)
from app.application.dtos.workflow import WorkflowContext, WorkflowOptions, WorkflowResult
from app.application.services.audit_service import create_audit_event
from app.application.services.notification_service import (
    build_bill_notification,
    build_welcome_notification,
)
from app.application.services.whatsapp import format_inr
from app.application.use_cases.workflows.base import WorkflowSet, actor_of, money
from app.domain.entities.workflow import (
    StepResults,
    WorkflowDefinition,
    WorkflowStepDefinition,
)
from app.domain.enums import BedStatus, BillStatus, RoomStatus, TenantStatus, TenantStayStatus
from app.shared.context import ActorContext
from app.shared.enums import AuditAction, EntityType
from app.shared.utils.datetime import day_of_next_month
from app.shared.utils.generators import format_sequence_number

BILL_PREFIX = "BILL"
BILL_NUMBER_WIDTH = 5
BILL_DUE_DAY = 5


def _has_free_bed(room: dict[str, Any]) -> bool:
    return (room.get("occupied_beds") or 0) < (room.get("total_beds") or 1)


def _status_after_assign(room: dict[str, Any], occupied: int) -> RoomStatus:
    if occupied >= (room.get("total_beds") or 1):
        return RoomStatus.OCCUPIED
    return RoomStatus.PARTIALLY_OCCUPIED


def _status_after_release(occupied: int) -> RoomStatus:
    return RoomStatus.AVAILABLE if occupied == 0 else RoomStatus.OCCUPIED


def bill_month(day: date) -> str:
    """Billing month label, e.g. 'January 2025'."""
    return day.strftime("%B %Y")


def initial_line_items(input: CreateTenantInput) -> list[dict[str, Any]]:
    """First bill: rent for the check-in month plus deposit and advance when non-zero."""
    items: list[dict[str, Any]] = [
        {
            "charge_type": "rent",
            "description": f"Monthly Rent - {bill_month(input.check_in_date)}",
            "amount": str(input.monthly_rent),
        }
    ]
    if input.security_deposit > 0:
        items.append({
            "charge_type": "deposit",
            "description": "Security Deposit",
            "amount": str(input.security_deposit),
        })
    if input.advance_amount > 0:
        items.append({
            "charge_type": "advance",
            "description": "Advance Payment",
            "amount": str(input.advance_amount),
        })
    return items


class TenantWorkflows(WorkflowSet):
    """tenant_create and room_transfer definitions plus their entry points."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.create_workflow: WorkflowDefinition[CreateTenantInput, CreateTenantOutput] = (
            WorkflowDefinition(
                name="tenant_create",
                steps=(
                    WorkflowStepDefinition("validate_room", self._validate_room),
                    WorkflowStepDefinition(
                        "create_tenant", self._create_tenant, rollback=self._delete_tenant
                    ),
                    WorkflowStepDefinition(
                        "create_tenant_stay",
                        self._create_tenant_stay,
                        rollback=self._delete_tenant_stay,
                        optional=True,
                    ),
                    WorkflowStepDefinition(
                        "update_room_occupancy",
                        self._occupy_room,
                        rollback=self._restore_room,
                    ),
                    WorkflowStepDefinition("update_bed", self._occupy_bed, optional=True),
                    WorkflowStepDefinition(
                        "generate_initial_bill", self._generate_initial_bill, optional=True
                    ),
                ),
                build_output=self._create_output,
                audit_events=self._create_audit,
                notifications=self._create_notifications,
            )
        )
        self.transfer_workflow: WorkflowDefinition[RoomTransferInput, RoomTransferOutput] = (
            WorkflowDefinition(
                name="room_transfer",
                steps=(
                    WorkflowStepDefinition("validate", self._validate_transfer),
                    WorkflowStepDefinition(
                        "release_old_room",
                        self._release_old_room,
                        rollback=self._restore_old_room,
                        optional=True,
                    ),
                    WorkflowStepDefinition(
                        "assign_new_room", self._assign_new_room, rollback=self._unassign_new_room
                    ),
                    WorkflowStepDefinition("update_tenant", self._move_tenant),
                    WorkflowStepDefinition("update_beds", self._move_bed, optional=True),
                ),
                build_output=self._transfer_output,
                audit_events=self._transfer_audit,
            )
        )

    async def create_tenant(
        self,
        input: CreateTenantInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[CreateTenantOutput]:
        return await self.run(self.create_workflow, input, actor, options)

    async def transfer_room(
        self,
        input: RoomTransferInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[RoomTransferOutput]:
        return await self.run(self.transfer_workflow, input, actor, options)

    # tenant_create steps

    async def _validate_room(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        found = await self.require(
            EntityType.ROOM, input.room_id, context.workspace_id, "Room not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        room = found.data
        if not _has_free_bed(room):
            return ServiceResult.fail(ErrorCode.ROOM_AT_CAPACITY, "Room is at full capacity")
        property_row = await self.entities.get(
            EntityType.PROPERTY, input.property_id, context.workspace_id
        )
        return ServiceResult.ok({"room": room, "property": property_row})

    async def _create_tenant(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        tenant = await self.entities.insert(
            EntityType.TENANT,
            context.workspace_id,
            {
                "property_id": input.property_id,
                "room_id": input.room_id,
                "bed_id": input.bed_id,
                "user_id": input.user_id,
                "name": input.name,
                "email": input.email,
                "phone": input.phone,
                "address": input.address,
                "status": TenantStatus.ACTIVE.value,
                "check_in_date": input.check_in_date,
                "agreement_start_date": input.check_in_date,
                "monthly_rent": input.monthly_rent,
                "security_deposit": input.security_deposit,
                "advance_amount": input.advance_amount,
                "advance_balance": input.advance_amount,
                "notes": input.notes,
            },
        )
        return ServiceResult.ok(tenant)

    async def _delete_tenant(
        self, context: WorkflowContext, input: CreateTenantInput, tenant: dict[str, Any]
    ) -> None:
        if tenant and tenant.get("id"):
            await self.entities.delete(EntityType.TENANT, tenant["id"], context.workspace_id)

    async def _create_tenant_stay(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> ServiceResult[dict[str, Any] | None]:
        if not input.create_stay_record:
            return ServiceResult.ok(None)
        stay = await self.entities.insert(
            EntityType.TENANT_STAY,
            context.workspace_id,
            {
                "tenant_id": results["create_tenant"]["id"],
                "property_id": input.property_id,
                "room_id": input.room_id,
                "bed_id": input.bed_id,
                "join_date": input.check_in_date,
                "monthly_rent": input.monthly_rent,
                "status": TenantStayStatus.ACTIVE.value,
            },
        )
        return ServiceResult.ok(stay)

    async def _delete_tenant_stay(
        self, context: WorkflowContext, input: CreateTenantInput, stay: dict[str, Any] | None
    ) -> None:
        if stay and stay.get("id"):
            await self.entities.delete(EntityType.TENANT_STAY, stay["id"], context.workspace_id)

    async def _occupy_room(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        room = results["validate_room"]["room"]
        occupied = (room.get("occupied_beds") or 0) + 1
        status = _status_after_assign(room, occupied)
        await self.entities.update(
            EntityType.ROOM,
            input.room_id,
            context.workspace_id,
            {"occupied_beds": occupied, "status": status.value},
        )
        return ServiceResult.ok({
            "new_occupied_beds": occupied,
            "new_status": status.value,
            "previous": {"occupied_beds": room.get("occupied_beds") or 0, "status": room["status"]},
        })

    async def _restore_room(
        self, context: WorkflowContext, input: CreateTenantInput, occupancy: dict[str, Any]
    ) -> None:
        await self.entities.update(
            EntityType.ROOM, input.room_id, context.workspace_id, occupancy["previous"]
        )

    async def _occupy_bed(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        if not input.bed_id:
            return ServiceResult.ok({"bed_updated": False})
        updated = await self.entities.update(
            EntityType.BED,
            input.bed_id,
            context.workspace_id,
            {
                "current_tenant_id": results["create_tenant"]["id"],
                "status": BedStatus.OCCUPIED.value,
            },
        )
        if updated is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Bed not found")
        return ServiceResult.ok({"bed_updated": True})

    async def _generate_initial_bill(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        if not input.generate_initial_bill:
            return ServiceResult.ok({"bill_generated": False, "bill_id": None})
        line_items = initial_line_items(input)
        total = sum((money(item["amount"]) for item in line_items), money(0))
        count = await self.entities.count(EntityType.BILL, context.workspace_id)
        bill_number = format_sequence_number(BILL_PREFIX, count + 1, BILL_NUMBER_WIDTH)
        due = day_of_next_month(input.check_in_date, BILL_DUE_DAY)
        bill = await self.entities.insert(
            EntityType.BILL,
            context.workspace_id,
            {
                "tenant_id": results["create_tenant"]["id"],
                "property_id": input.property_id,
                "bill_number": bill_number,
                "bill_month": bill_month(input.check_in_date),
                "billing_period_start": input.check_in_date,
                "billing_period_end": due,
                "due_date": due,
                "total_amount": total,
                "paid_amount": money(0),
                "balance_due": total,
                "status": BillStatus.PENDING.value,
                "line_items": line_items,
            },
        )
        return ServiceResult.ok({
            "bill_generated": True,
            "bill_id": bill["id"],
            "bill_number": bill_number,
            "total_amount": total,
        })

    def _create_audit(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> list[AuditEvent]:
        actor = actor_of(context)
        tenant_id = results["create_tenant"]["id"]
        occupancy = results["update_room_occupancy"]
        return [
            create_audit_event(
                EntityType.TENANT,
                tenant_id,
                AuditAction.CREATE,
                actor,
                after={
                    "name": input.name,
                    "phone": input.phone,
                    "room_id": input.room_id,
                    "monthly_rent": input.monthly_rent,
                },
            ),
            create_audit_event(
                EntityType.ROOM,
                input.room_id,
                AuditAction.UPDATE,
                actor,
                before=occupancy["previous"],
                after={
                    "occupied_beds": occupancy["new_occupied_beds"],
                    "status": occupancy["new_status"],
                },
                metadata={"action": "tenant_assigned", "tenant_id": tenant_id},
            ),
        ]

    def _create_notifications(
        self, context: WorkflowContext, input: CreateTenantInput, results: StepResults
    ) -> list[NotificationPayload]:
        if not input.email:
            return []
        tenant_id = results["create_tenant"]["id"]
        property_row = results["validate_room"]["property"] or {}
        notifications: list[NotificationPayload] = []
        if input.send_welcome_notification:
            notifications.append(
                build_welcome_notification(
                    tenant_id,
                    property_name=property_row.get("name") or "your PG",
                    tenant_name=input.name,
                    contact=input.email,
                    workspace_id=context.workspace_id,
                )
            )
        bill = results.get("generate_initial_bill") or {}
        if bill.get("bill_generated"):
            notifications.append(
                build_bill_notification(
                    tenant_id,
                    bill_id=bill["bill_id"],
                    bill_number=bill["bill_number"],
                    amount=format_inr(bill["total_amount"]),
                    month=bill_month(input.check_in_date),
                    contact=input.email,
                    workspace_id=context.workspace_id,
                )
            )
        return notifications

    def _create_output(self, results: StepResults) -> CreateTenantOutput:
        stay = results.get("create_tenant_stay")
        bill = results.get("generate_initial_bill") or {}
        return CreateTenantOutput(
            tenant_id=results["create_tenant"]["id"],
            tenant_stay_id=stay["id"] if stay else None,
            initial_bill_id=bill.get("bill_id"),
            invitation_sent=False,
        )

    # room_transfer steps

    async def _validate_transfer(
        self, context: WorkflowContext, input: RoomTransferInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        found = await self.require(
            EntityType.TENANT, input.tenant_id, context.workspace_id, "Tenant not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        tenant = found.data
        if tenant.get("room_id") == input.new_room_id:
            return ServiceResult.fail(
                ErrorCode.ROOM_TRANSFER_INVALID, "Tenant is already in this room"
            )
        found = await self.require(
            EntityType.ROOM, input.new_room_id, context.workspace_id, "New room not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        new_room = found.data
        if not _has_free_bed(new_room):
            return ServiceResult.fail(ErrorCode.ROOM_AT_CAPACITY, "New room is at full capacity")
        old_room = None
        if tenant.get("room_id"):
            old_room = await self.entities.get(
                EntityType.ROOM, tenant["room_id"], context.workspace_id
            )
        return ServiceResult.ok({"tenant": tenant, "new_room": new_room, "old_room": old_room})

    async def _release_old_room(
        self, context: WorkflowContext, input: RoomTransferInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        old_room = results["validate"]["old_room"]
        if old_room is None:
            return ServiceResult.ok({"released": False})
        occupied = max(0, (old_room.get("occupied_beds") or 1) - 1)
        await self.entities.update(
            EntityType.ROOM,
            old_room["id"],
            context.workspace_id,
            {"occupied_beds": occupied, "status": _status_after_release(occupied).value},
        )
        return ServiceResult.ok({
            "released": True,
            "room_id": old_room["id"],
            "previous": {
                "occupied_beds": old_room.get("occupied_beds") or 0,
                "status": old_room["status"],
            },
        })

    async def _restore_old_room(
        self, context: WorkflowContext, input: RoomTransferInput, release: dict[str, Any]
    ) -> None:
        if release.get("released"):
            await self.entities.update(
                EntityType.ROOM, release["room_id"], context.workspace_id, release["previous"]
            )

    async def _assign_new_room(
        self, context: WorkflowContext, input: RoomTransferInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        room = results["validate"]["new_room"]
        occupied = (room.get("occupied_beds") or 0) + 1
        await self.entities.update(
            EntityType.ROOM,
            input.new_room_id,
            context.workspace_id,
            {"occupied_beds": occupied, "status": _status_after_assign(room, occupied).value},
        )
        return ServiceResult.ok({
            "assigned": True,
            "previous": {"occupied_beds": room.get("occupied_beds") or 0, "status": room["status"]},
        })

    async def _unassign_new_room(
        self, context: WorkflowContext, input: RoomTransferInput, assignment: dict[str, Any]
    ) -> None:
        await self.entities.update(
            EntityType.ROOM, input.new_room_id, context.workspace_id, assignment["previous"]
        )

    async def _move_tenant(
        self, context: WorkflowContext, input: RoomTransferInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        values: dict[str, Any] = {"room_id": input.new_room_id, "bed_id": input.new_bed_id}
        rent_adjusted = bool(input.adjust_rent and input.new_rent)
        if rent_adjusted:
            values["monthly_rent"] = input.new_rent
        updated = await self.entities.update(
            EntityType.TENANT, input.tenant_id, context.workspace_id, values
        )
        if updated is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tenant not found")
        return ServiceResult.ok({"updated": True, "rent_adjusted": rent_adjusted})

    async def _move_bed(
        self, context: WorkflowContext, input: RoomTransferInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        tenant = results["validate"]["tenant"]
        if tenant.get("bed_id"):
            await self.entities.update(
                EntityType.BED,
                tenant["bed_id"],
                context.workspace_id,
                {"current_tenant_id": None, "status": BedStatus.AVAILABLE.value},
            )
        if input.new_bed_id:
            await self.entities.update(
                EntityType.BED,
                input.new_bed_id,
                context.workspace_id,
                {"current_tenant_id": input.tenant_id, "status": BedStatus.OCCUPIED.value},
            )
        return ServiceResult.ok({"beds_updated": bool(tenant.get("bed_id") or input.new_bed_id)})

    def _transfer_audit(
        self, context: WorkflowContext, input: RoomTransferInput, results: StepResults
    ) -> list[AuditEvent]:
        validated = results["validate"]
        old_room = validated["old_room"] or {}
        new_room = validated["new_room"]
        after: dict[str, Any] = {
            "room_id": new_room["id"],
            "room_number": new_room.get("room_number"),
        }
        before: dict[str, Any] = {
            "room_id": old_room.get("id"),
            "room_number": old_room.get("room_number"),
        }
        if results["update_tenant"]["rent_adjusted"]:
            before["monthly_rent"] = validated["tenant"].get("monthly_rent")
            after["monthly_rent"] = input.new_rent
        return [
            create_audit_event(
                EntityType.TENANT,
                input.tenant_id,
                AuditAction.UPDATE,
                actor_of(context),
                before=before,
                after=after,
                metadata={"action": "room_transfer", "reason": input.reason},
            )
        ]

    def _transfer_output(self, results: StepResults) -> RoomTransferOutput:
        validated = results["validate"]
        old_room = validated["old_room"]
        return RoomTransferOutput(
            tenant_id=validated["tenant"]["id"],
            old_room_id=old_room["id"] if old_room else None,
            new_room_id=validated["new_room"]["id"],
            rent_adjusted=results["update_tenant"]["rent_adjusted"],
        )
