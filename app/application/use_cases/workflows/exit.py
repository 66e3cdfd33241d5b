"""Exit workflows: initiate a tenant's exit clearance and complete the move-out.

Initiating fixes the deposit settlement (deposit minus unpaid dues minus
deductions) and puts the tenant on notice. Completing checks the tenant
out, closes the stay and bed, and releases the room bed as a cascade so
a failed room update never blocks the exit.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from app.application.dtos.audit import AuditEvent
from app.application.dtos.cascade import CascadeEffect, RoomCascade, RoomFields
from app.application.dtos.exit_clearance import (
    CompleteExitInput,
    CompleteExitOutput,
    InitiateExitInput,
    InitiateExitOutput,
    Settlement,
)
from app.application.dtos.notification import NotificationPayload
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.dtos.workflow import WorkflowContext, WorkflowOptions, WorkflowResult
from app.application.services.audit_service import create_audit_event
from app.application.services.notification_service import build_exit_clearance_notification
from app.application.services.whatsapp import format_display_date, format_inr
from app.application.use_cases.workflows.base import ZERO, WorkflowSet, actor_of, money
from app.domain.entities.workflow import (
    StepResults,
    WorkflowDefinition,
    WorkflowStepDefinition,
)
from app.domain.enums import (
    BedStatus,
    BillStatus,
    ExitClearanceStatus,
    RoomStatus,
    TenantStatus,
    TenantStayStatus,
)
from app.shared.context import ActorContext
from app.shared.enums import AuditAction, CascadeAction, EntityType, RecipientType
from app.shared.utils.datetime import utc_now


class ExitWorkflows(WorkflowSet):
    """exit_clearance and complete_exit definitions plus their entry points."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.initiate_workflow: WorkflowDefinition[InitiateExitInput, InitiateExitOutput] = (
            WorkflowDefinition(
                name="exit_clearance",
                steps=(
                    WorkflowStepDefinition("validate_tenant", self._validate_tenant),
                    WorkflowStepDefinition("calculate_settlement", self._calculate_settlement),
                    WorkflowStepDefinition(
                        "update_tenant_status",
                        self._start_notice_period,
                        rollback=self._restore_tenant_status,
                    ),
                    WorkflowStepDefinition(
                        "create_clearance_record",
                        self._create_clearance,
                        rollback=self._delete_clearance,
                    ),
                ),
                build_output=self._initiate_output,
                audit_events=self._initiate_audit,
                notifications=self._initiate_notifications,
            )
        )
        self.complete_workflow: WorkflowDefinition[CompleteExitInput, CompleteExitOutput] = (
            WorkflowDefinition(
                name="complete_exit",
                steps=(
                    WorkflowStepDefinition("validate_clearance", self._validate_clearance),
                    WorkflowStepDefinition(
                        "update_tenant_status",
                        self._check_out_tenant,
                        rollback=self._undo_check_out,
                    ),
                    WorkflowStepDefinition(
                        "complete_tenant_stay", self._complete_stay, optional=True
                    ),
                    WorkflowStepDefinition("release_bed", self._release_bed, optional=True),
                    WorkflowStepDefinition("complete_clearance", self._complete_clearance),
                ),
                build_output=self._complete_output,
                cascades=self._complete_cascades,
                audit_events=self._complete_audit,
                notifications=self._complete_notifications,
            )
        )

    async def initiate_exit(
        self,
        input: InitiateExitInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[InitiateExitOutput]:
        return await self.run(self.initiate_workflow, input, actor, options)

    async def complete_exit(
        self,
        input: CompleteExitInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[CompleteExitOutput]:
        """Check the tenant out; room_released is False when the room update failed."""
        result = await self.run(self.complete_workflow, input, actor, options)
        if result.success and result.data.room_released and result.cascades_failed:
            return replace(result, data=replace(result.data, room_released=False))
        return result

    # exit_clearance steps

    async def _validate_tenant(
        self, context: WorkflowContext, input: InitiateExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        found = await self.require(
            EntityType.TENANT, input.tenant_id, context.workspace_id, "Tenant not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        tenant = found.data
        if tenant["status"] == TenantStatus.CHECKED_OUT.value:
            return ServiceResult.fail(
                ErrorCode.TENANT_ALREADY_EXITED, "Tenant has already exited"
            )
        open_clearances = await self.entities.count(
            EntityType.EXIT_CLEARANCE,
            context.workspace_id,
            {
                "tenant_id": input.tenant_id,
                "status": [s.value for s in ExitClearanceStatus.open()],
            },
        )
        if open_clearances:
            return ServiceResult.fail(
                ErrorCode.EXIT_ALREADY_INITIATED, "Exit clearance already initiated"
            )
        return ServiceResult.ok(tenant)

    async def _calculate_settlement(
        self, context: WorkflowContext, input: InitiateExitInput, results: StepResults
    ) -> ServiceResult[Settlement]:
        tenant = results["validate_tenant"]
        bills = await self.entities.find(
            EntityType.BILL,
            context.workspace_id,
            {
                "tenant_id": input.tenant_id,
                "status": [s.value for s in BillStatus.unpaid()],
            },
        )
        dues = sum((money(b.get("balance_due")) for b in bills), ZERO)
        deposit = money(tenant.get("security_deposit"))
        deductions = sum((d.amount for d in input.deductions), ZERO)
        return ServiceResult.ok(
            Settlement(
                total_dues=dues,
                deposit_amount=deposit,
                deduction_amount=deductions,
                net_amount=deposit - dues - deductions,
            )
        )

    async def _start_notice_period(
        self, context: WorkflowContext, input: InitiateExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        tenant = results["validate_tenant"]
        previous = {
            "status": tenant["status"],
            "notice_date": tenant.get("notice_date"),
            "expected_exit_date": tenant.get("expected_exit_date"),
        }
        values: dict[str, Any] = {"expected_exit_date": input.requested_exit_date}
        if tenant["status"] == TenantStatus.ACTIVE.value:
            values["status"] = TenantStatus.NOTICE_PERIOD.value
            values["notice_date"] = utc_now()
        await self.entities.update(
            EntityType.TENANT, input.tenant_id, context.workspace_id, values
        )
        status = values.get("status", tenant["status"])
        return ServiceResult.ok({"previous": previous, "status": status})

    async def _restore_tenant_status(
        self, context: WorkflowContext, input: InitiateExitInput, change: dict[str, Any]
    ) -> None:
        await self.entities.update(
            EntityType.TENANT, input.tenant_id, context.workspace_id, change["previous"]
        )

    async def _create_clearance(
        self, context: WorkflowContext, input: InitiateExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        tenant = results["validate_tenant"]
        settlement: Settlement = results["calculate_settlement"]
        clearance = await self.entities.insert(
            EntityType.EXIT_CLEARANCE,
            context.workspace_id,
            {
                "tenant_id": input.tenant_id,
                "property_id": tenant["property_id"],
                "room_id": tenant.get("room_id"),
                "bed_id": tenant.get("bed_id"),
                "initiated_by": context.actor_id,
                "notice_date": utc_now(),
                "requested_exit_date": input.requested_exit_date,
                "exit_reason": input.exit_reason,
                "status": ExitClearanceStatus.INITIATED.value,
                "items_checklist": dict(input.items_checklist),
                "deductions": [
                    {"description": d.description, "amount": str(d.amount)}
                    for d in input.deductions
                ],
                "total_dues": settlement.total_dues,
                "deposit_amount": settlement.deposit_amount,
                "deduction_amount": settlement.deduction_amount,
                "refund_amount": settlement.refund_amount,
                "additional_payment": settlement.additional_payment,
                "notes": input.notes,
            },
        )
        return ServiceResult.ok(clearance)

    async def _delete_clearance(
        self, context: WorkflowContext, input: InitiateExitInput, clearance: dict[str, Any]
    ) -> None:
        if clearance and clearance.get("id"):
            await self.entities.delete(
                EntityType.EXIT_CLEARANCE, clearance["id"], context.workspace_id
            )

    def _initiate_audit(
        self, context: WorkflowContext, input: InitiateExitInput, results: StepResults
    ) -> list[AuditEvent]:
        actor = actor_of(context)
        clearance = results["create_clearance_record"]
        settlement: Settlement = results["calculate_settlement"]
        status_change = results["update_tenant_status"]
        return [
            create_audit_event(
                EntityType.EXIT_CLEARANCE,
                clearance["id"],
                AuditAction.CREATE,
                actor,
                after={
                    "tenant_id": input.tenant_id,
                    "requested_exit_date": input.requested_exit_date,
                    "exit_reason": input.exit_reason,
                    "settlement": settlement.to_dict(),
                },
            ),
            create_audit_event(
                EntityType.TENANT,
                input.tenant_id,
                AuditAction.STATUS_CHANGE,
                actor,
                before={"status": status_change["previous"]["status"]},
                after={"status": status_change["status"]},
                metadata={"exit_clearance_id": clearance["id"]},
            ),
        ]

    def _initiate_notifications(
        self, context: WorkflowContext, input: InitiateExitInput, results: StepResults
    ) -> list[NotificationPayload]:
        tenant = results["validate_tenant"]
        clearance_id = results["create_clearance_record"]["id"]
        exit_date = format_display_date(input.requested_exit_date)
        notifications = [
            build_exit_clearance_notification(
                context.actor_id,
                RecipientType.OWNER,
                completed=False,
                clearance_id=clearance_id,
                tenant_name=tenant["name"],
                exit_date=exit_date,
                workspace_id=context.workspace_id,
            )
        ]
        if tenant.get("user_id"):
            notifications.append(
                build_exit_clearance_notification(
                    tenant["user_id"],
                    RecipientType.TENANT,
                    completed=False,
                    clearance_id=clearance_id,
                    tenant_name=tenant["name"],
                    exit_date=exit_date,
                    workspace_id=context.workspace_id,
                )
            )
        return notifications

    def _initiate_output(self, results: StepResults) -> InitiateExitOutput:
        clearance = results["create_clearance_record"]
        return InitiateExitOutput(
            clearance_id=clearance["id"],
            tenant_id=clearance["tenant_id"],
            settlement=results["calculate_settlement"],
            status=ExitClearanceStatus.INITIATED.value,
        )

    # complete_exit steps

    async def _validate_clearance(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        found = await self.require(
            EntityType.EXIT_CLEARANCE,
            input.clearance_id,
            context.workspace_id,
            "Exit clearance not found",
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        clearance = found.data
        if clearance["status"] == ExitClearanceStatus.COMPLETED.value:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR, "Exit clearance already completed"
            )
        found = await self.require(
            EntityType.TENANT, clearance["tenant_id"], context.workspace_id, "Tenant not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        tenant = found.data
        room = None
        room_id = tenant.get("room_id") or clearance.get("room_id")
        if room_id:
            room = await self.entities.get(EntityType.ROOM, room_id, context.workspace_id)
        return ServiceResult.ok({"clearance": clearance, "tenant": tenant, "room": room})

    async def _check_out_tenant(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        tenant = results["validate_clearance"]["tenant"]
        previous = {
            "status": tenant["status"],
            "check_out_date": tenant.get("check_out_date"),
            "room_id": tenant.get("room_id"),
            "bed_id": tenant.get("bed_id"),
        }
        await self.entities.update(
            EntityType.TENANT,
            tenant["id"],
            context.workspace_id,
            {
                "status": TenantStatus.CHECKED_OUT.value,
                "check_out_date": input.actual_exit_date,
                "room_id": None,
                "bed_id": None,
            },
        )
        return ServiceResult.ok({"tenant_id": tenant["id"], "previous": previous})

    async def _undo_check_out(
        self, context: WorkflowContext, input: CompleteExitInput, change: dict[str, Any]
    ) -> None:
        await self.entities.update(
            EntityType.TENANT, change["tenant_id"], context.workspace_id, change["previous"]
        )

    async def _complete_stay(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        clearance = results["validate_clearance"]["clearance"]
        stays = await self.entities.find(
            EntityType.TENANT_STAY,
            context.workspace_id,
            {"tenant_id": clearance["tenant_id"], "status": TenantStayStatus.ACTIVE.value},
        )
        for stay in stays:
            await self.entities.update(
                EntityType.TENANT_STAY,
                stay["id"],
                context.workspace_id,
                {
                    "status": TenantStayStatus.COMPLETED.value,
                    "exit_date": input.actual_exit_date,
                    "exit_reason": clearance.get("exit_reason"),
                },
            )
        return ServiceResult.ok({"stays_completed": len(stays)})

    async def _release_bed(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        validated = results["validate_clearance"]
        bed_id = validated["tenant"].get("bed_id") or validated["clearance"].get("bed_id")
        if not bed_id:
            return ServiceResult.ok({"bed_released": False})
        await self.entities.update(
            EntityType.BED,
            bed_id,
            context.workspace_id,
            {"current_tenant_id": None, "status": BedStatus.AVAILABLE.value},
        )
        return ServiceResult.ok({"bed_released": True})

    async def _complete_clearance(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        updated = await self.entities.update(
            EntityType.EXIT_CLEARANCE,
            input.clearance_id,
            context.workspace_id,
            {
                "status": ExitClearanceStatus.COMPLETED.value,
                "actual_exit_date": input.actual_exit_date,
                "settlement_mode": input.settlement_mode,
                "settlement_reference": input.settlement_reference,
                "final_notes": input.final_notes,
                "completed_at": utc_now(),
                "completed_by": context.actor_id,
            },
        )
        if updated is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Exit clearance not found")
        return ServiceResult.ok(updated)

    def _complete_cascades(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> list[CascadeEffect]:
        room = results["validate_clearance"]["room"]
        if room is None:
            return []
        occupied = max(0, (room.get("occupied_beds") or 1) - 1)
        status = RoomStatus.AVAILABLE if occupied == 0 else RoomStatus.OCCUPIED
        return [
            RoomCascade(
                entity_id=room["id"],
                action=CascadeAction.UPDATE,
                fields=RoomFields(status=status, occupied_beds=occupied),
            )
        ]

    def _complete_audit(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> list[AuditEvent]:
        actor = actor_of(context)
        validated = results["validate_clearance"]
        tenant = validated["tenant"]
        room = validated["room"]
        events = [
            create_audit_event(
                EntityType.EXIT_CLEARANCE,
                input.clearance_id,
                AuditAction.COMPLETE,
                actor,
                before={"status": validated["clearance"]["status"]},
                after={
                    "status": ExitClearanceStatus.COMPLETED.value,
                    "actual_exit_date": input.actual_exit_date,
                    "settlement_mode": input.settlement_mode,
                },
            ),
            create_audit_event(
                EntityType.TENANT,
                tenant["id"],
                AuditAction.STATUS_CHANGE,
                actor,
                before={"status": tenant["status"]},
                after={"status": TenantStatus.CHECKED_OUT.value},
                metadata={"exit_clearance_id": input.clearance_id},
            ),
        ]
        if room is not None:
            events.append(
                create_audit_event(
                    EntityType.ROOM,
                    room["id"],
                    AuditAction.UPDATE,
                    actor,
                    metadata={"action": "tenant_exit", "tenant_id": tenant["id"]},
                )
            )
        return events

    def _complete_notifications(
        self, context: WorkflowContext, input: CompleteExitInput, results: StepResults
    ) -> list[NotificationPayload]:
        validated = results["validate_clearance"]
        tenant = validated["tenant"]
        if not tenant.get("user_id"):
            return []
        clearance = validated["clearance"]
        amount = money(clearance.get("refund_amount")) or money(
            clearance.get("additional_payment")
        )
        return [
            build_exit_clearance_notification(
                tenant["user_id"],
                RecipientType.TENANT,
                completed=True,
                clearance_id=input.clearance_id,
                tenant_name=tenant["name"],
                settlement_amount=format_inr(amount),
                workspace_id=context.workspace_id,
            )
        ]

    def _complete_output(self, results: StepResults) -> CompleteExitOutput:
        validated = results["validate_clearance"]
        return CompleteExitOutput(
            clearance_id=validated["clearance"]["id"],
            tenant_id=validated["tenant"]["id"],
            room_released=validated["room"] is not None,
            tenant_status=TenantStatus.CHECKED_OUT.value,
        )
