"""Approval workflows: tenants raise requests, owners approve or reject them.

Approving runs the handler registered for the request type, which applies
the requested change and reports the actions it took. Room changes run the
full room_transfer workflow. Rejections change nothing but the approval.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

from app.application.dtos.approval import (
    ApprovalDecisionInput,
    ApprovalDecisionOutput,
    BulkDecisionItem,
    BulkDecisionOutput,
    CreateApprovalInput,
    CreateApprovalOutput,
)
from app.application.dtos.audit import AuditEvent
from app.application.dtos.notification import NotificationPayload
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.dtos.tenant import RoomTransferInput
from app.application.dtos.workflow import WorkflowContext, WorkflowOptions, WorkflowResult
from app.application.services.audit_service import create_audit_event
from app.application.services.notification_service import (
    build_approval_decision_notification,
    build_approval_request_notification,
)
from app.application.use_cases.workflows.base import WorkflowSet, actor_of, money
from app.application.use_cases.workflows.tenant import TenantWorkflows
from app.domain.entities.workflow import (
    StepResults,
    WorkflowDefinition,
    WorkflowStepDefinition,
)
from app.domain.enums import (
    ApprovalStatus,
    ApprovalType,
    BillStatus,
    ComplaintStatus,
    TenantStatus,
)
from app.shared.context import ActorContext
from app.shared.enums import AuditAction, EntityType, NotificationPriority
from app.shared.utils.datetime import utc_now

Row = dict[str, Any]
HandlerApply = Callable[
    [WorkflowContext, Row, ApprovalDecisionInput], Awaitable[ServiceResult[list[str]]]
]
HandlerValidate = Callable[[WorkflowContext, Row], Awaitable[ServiceResult[None]]]


@dataclass(frozen=True)
class ApprovalHandler:
    """Applies an approved request; validate runs before the approval is updated."""

    apply: HandlerApply
    validate: HandlerValidate | None = None


def _append_note(existing: str | None, note: str) -> str:
    return f"{existing}\n{note}" if existing else note


def _parse_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _type_label(value: str | None) -> str:
    try:
        return ApprovalType(value).label
    except ValueError:
        return value or "Request"


class ApprovalWorkflows(WorkflowSet):
    """process_approval and create_approval plus bulk decisions."""

    def __init__(self, *args: Any, tenants: TenantWorkflows, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._tenants = tenants
        self._handlers: dict[ApprovalType, ApprovalHandler] = {
            ApprovalType.NAME_CHANGE: ApprovalHandler(self._apply_name_change),
            ApprovalType.ADDRESS_CHANGE: ApprovalHandler(self._apply_address_change),
            ApprovalType.PHONE_CHANGE: ApprovalHandler(self._apply_phone_change),
            ApprovalType.EMAIL_CHANGE: ApprovalHandler(self._apply_email_change),
            ApprovalType.ROOM_CHANGE: ApprovalHandler(
                self._apply_room_change, validate=self._validate_room_change
            ),
            ApprovalType.COMPLAINT: ApprovalHandler(self._apply_complaint),
            ApprovalType.BILL_DISPUTE: ApprovalHandler(self._apply_bill_dispute),
            ApprovalType.PAYMENT_DISPUTE: ApprovalHandler(self._apply_payment_dispute),
            ApprovalType.TENANCY_ISSUE: ApprovalHandler(self._apply_tenancy_issue),
            ApprovalType.ROOM_ISSUE: ApprovalHandler(self._apply_room_issue),
            ApprovalType.OTHER: ApprovalHandler(self._apply_other),
        }
        self.process_workflow: WorkflowDefinition[
            ApprovalDecisionInput, ApprovalDecisionOutput
        ] = (
            WorkflowDefinition(
                name="process_approval",
                steps=(
                    WorkflowStepDefinition("fetch_approval", self._fetch_approval),
                    WorkflowStepDefinition("validate_type", self._validate_type),
                    WorkflowStepDefinition(
                        "update_approval",
                        self._update_approval,
                        rollback=self._reopen_approval,
                    ),
                    WorkflowStepDefinition("apply_changes", self._apply_changes),
                    WorkflowStepDefinition("mark_applied", self._mark_applied),
                ),
                build_output=self._process_output,
                audit_events=self._process_audit,
                notifications=self._process_notifications,
            )
        )
        self.create_workflow: WorkflowDefinition[CreateApprovalInput, CreateApprovalOutput] = (
            WorkflowDefinition(
                name="create_approval",
                steps=(
                    WorkflowStepDefinition("validate_tenant", self._validate_tenant),
                    WorkflowStepDefinition(
                        "create_approval", self._create_approval, rollback=self._delete_approval
                    ),
                ),
                build_output=self._create_output,
                audit_events=self._create_audit,
                notifications=self._create_notifications,
            )
        )

    def handler_for(self, approval_type: ApprovalType) -> ApprovalHandler | None:
        return self._handlers.get(approval_type)

    async def create_approval(
        self,
        input: CreateApprovalInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[CreateApprovalOutput]:
        return await self.run(self.create_workflow, input, actor, options)

    async def process_approval(
        self,
        input: ApprovalDecisionInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[ApprovalDecisionOutput]:
        return await self.run(self.process_workflow, input, actor, options)

    async def bulk_approve(
        self,
        approval_ids: list[str],
        actor: ActorContext,
        decision_notes: str | None = None,
    ) -> BulkDecisionOutput:
        return await self._bulk(approval_ids, ApprovalStatus.APPROVED, actor, decision_notes)

    async def bulk_reject(
        self,
        approval_ids: list[str],
        actor: ActorContext,
        decision_notes: str | None = None,
    ) -> BulkDecisionOutput:
        return await self._bulk(approval_ids, ApprovalStatus.REJECTED, actor, decision_notes)

    async def _bulk(
        self,
        approval_ids: list[str],
        decision: ApprovalStatus,
        actor: ActorContext,
        decision_notes: str | None,
    ) -> BulkDecisionOutput:
        """Decide each approval in order; one failure does not stop the rest."""
        items: list[BulkDecisionItem] = []
        for approval_id in approval_ids:
            result = await self.process_approval(
                ApprovalDecisionInput(
                    approval_id=approval_id, decision=decision, decision_notes=decision_notes
                ),
                actor,
            )
            items.append(
                BulkDecisionItem(
                    approval_id=approval_id,
                    success=result.success,
                    error=result.error.message if result.error else None,
                )
            )
        succeeded = sum(1 for i in items if i.success)
        self._logger.info(
            "Bulk %s: %d succeeded, %d failed",
            decision.value,
            succeeded,
            len(items) - succeeded,
        )
        return BulkDecisionOutput(
            succeeded=succeeded, failed=len(items) - succeeded, results=tuple(items)
        )

    # process_approval steps

    async def _fetch_approval(
        self, context: WorkflowContext, input: ApprovalDecisionInput, results: StepResults
    ) -> ServiceResult[Row]:
        found = await self.require(
            EntityType.APPROVAL, input.approval_id, context.workspace_id, "Approval not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        approval = dict(found.data)
        if approval["status"] != ApprovalStatus.PENDING.value:
            return ServiceResult.fail(
                ErrorCode.APPROVAL_ALREADY_PROCESSED,
                f"Approval already {approval['status']}",
            )
        approval["tenant"] = await self.entities.get(
            EntityType.TENANT, approval["requester_tenant_id"], context.workspace_id
        )
        return ServiceResult.ok(approval)

    def _handler_for(self, value: str | None) -> ApprovalHandler | None:
        """Handler for a stored approval type; None for types without one."""
        if value not in ApprovalType.values():
            return None
        return self._handlers.get(ApprovalType(value))

    async def _validate_type(
        self, context: WorkflowContext, input: ApprovalDecisionInput, results: StepResults
    ) -> ServiceResult[dict[str, bool]]:
        if input.decision != ApprovalStatus.APPROVED:
            return ServiceResult.ok({"validated": True})
        approval = results["fetch_approval"]
        handler = self._handler_for(approval["type"])
        if handler and handler.validate:
            checked = await handler.validate(context, approval)
            if not checked.success:
                return ServiceResult.fail(checked.error)
        return ServiceResult.ok({"validated": True})

    async def _update_approval(
        self, context: WorkflowContext, input: ApprovalDecisionInput, results: StepResults
    ) -> ServiceResult[dict[str, str]]:
        await self.entities.update(
            EntityType.APPROVAL,
            input.approval_id,
            context.workspace_id,
            {
                "status": input.decision.value,
                "decided_by": context.actor_id,
                "decided_at": utc_now(),
                "decision_notes": input.decision_notes,
            },
        )
        return ServiceResult.ok({"status": input.decision.value})

    async def _reopen_approval(
        self, context: WorkflowContext, input: ApprovalDecisionInput, step_result: Any
    ) -> None:
        await self.entities.update(
            EntityType.APPROVAL,
            input.approval_id,
            context.workspace_id,
            {
                "status": ApprovalStatus.PENDING.value,
                "decided_by": None,
                "decided_at": None,
                "decision_notes": None,
            },
        )

    async def _apply_changes(
        self, context: WorkflowContext, input: ApprovalDecisionInput, results: StepResults
    ) -> ServiceResult[dict[str, list[str]]]:
        if input.decision == ApprovalStatus.REJECTED:
            return ServiceResult.ok({"actions": ["rejected_no_changes"]})
        approval = results["fetch_approval"]
        handler = self._handler_for(approval["type"])
        if handler is None:
            return ServiceResult.ok({"actions": ["unknown_type_manual_handling"]})
        applied = await handler.apply(context, approval, input)
        if not applied.success:
            return ServiceResult.fail(applied.error)
        return ServiceResult.ok({"actions": applied.data})

    async def _mark_applied(
        self, context: WorkflowContext, input: ApprovalDecisionInput, results: StepResults
    ) -> ServiceResult[dict[str, bool]]:
        if input.decision == ApprovalStatus.REJECTED:
            return ServiceResult.ok({"applied": False})
        await self.entities.update(
            EntityType.APPROVAL,
            input.approval_id,
            context.workspace_id,
            {"change_applied": True, "applied_at": utc_now()},
        )
        return ServiceResult.ok({"applied": True})

    def _process_audit(
        self, context: WorkflowContext, input: ApprovalDecisionInput, results: StepResults
    ) -> list[AuditEvent]:
        approval = results["fetch_approval"]
        return [
            create_audit_event(
                EntityType.APPROVAL,
                input.approval_id,
                AuditAction.APPROVE
                if input.decision == ApprovalStatus.APPROVED
                else AuditAction.REJECT,
                actor_of(context),
                after={
                    "decision": input.decision.value,
                    "decision_notes": input.decision_notes,
                    "actions_taken": results["apply_changes"]["actions"],
                },
                metadata={
                    "approval_type": approval["type"],
                    "requester_tenant_id": approval["requester_tenant_id"],
                },
            )
        ]

    def _process_notifications(
        self, context: WorkflowContext, input: ApprovalDecisionInput, results: StepResults
    ) -> list[NotificationPayload]:
        approval = results["fetch_approval"]
        tenant = approval.get("tenant") or {}
        recipient = tenant.get("user_id") or tenant.get("id")
        if not recipient:
            return []
        return [
            build_approval_decision_notification(
                recipient,
                approval_id=input.approval_id,
                request_type=_type_label(approval["type"]),
                approved=input.decision == ApprovalStatus.APPROVED,
                notes=input.decision_notes,
                workspace_id=context.workspace_id,
            )
        ]

    def _process_output(self, results: StepResults) -> ApprovalDecisionOutput:
        return ApprovalDecisionOutput(
            approval_id=results["fetch_approval"]["id"],
            decision=results["update_approval"]["status"],
            change_applied=results["mark_applied"]["applied"],
            cascading_actions=tuple(results["apply_changes"]["actions"]),
        )

    # handlers

    async def _update_tenant(
        self, context: WorkflowContext, approval: Row, values: Row
    ) -> ServiceResult[None]:
        updated = await self.entities.update(
            EntityType.TENANT, approval["requester_tenant_id"], context.workspace_id, values
        )
        if updated is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tenant not found")
        return ServiceResult.ok(None)

    async def _apply_field_change(
        self, context: WorkflowContext, approval: Row, column: str, payload_key: str
    ) -> ServiceResult[list[str]]:
        value = (approval.get("payload") or {}).get(payload_key)
        if not value:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR, f"Missing {payload_key}", field=payload_key
            )
        updated = await self._update_tenant(context, approval, {column: value})
        if not updated.success:
            return ServiceResult.fail(updated.error)
        return ServiceResult.ok([f"tenant_{column}_updated"])

    async def _apply_name_change(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        return await self._apply_field_change(context, approval, "name", "new_name")

    async def _apply_phone_change(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        return await self._apply_field_change(context, approval, "phone", "new_phone")

    async def _apply_email_change(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        return await self._apply_field_change(context, approval, "email", "new_email")

    async def _apply_address_change(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        new_address = (approval.get("payload") or {}).get("new_address")
        if isinstance(new_address, dict):
            tenant = approval.get("tenant") or {}
            others = [a for a in tenant.get("addresses") or [] if not a.get("is_primary")]
            addresses = [{**new_address, "is_primary": True}, *others]
            updated = await self._update_tenant(context, approval, {"addresses": addresses})
            action = "tenant_addresses_updated"
        else:
            updated = await self._update_tenant(context, approval, {"address": new_address})
            action = "tenant_address_updated"
        if not updated.success:
            return ServiceResult.fail(updated.error)
        return ServiceResult.ok([action])

    async def _validate_room_change(
        self, context: WorkflowContext, approval: Row
    ) -> ServiceResult[None]:
        room_id = (approval.get("payload") or {}).get("requested_room_id")
        if not room_id:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR,
                "Missing requested room ID",
                field="requested_room_id",
            )
        room = await self.entities.get(EntityType.ROOM, room_id, context.workspace_id)
        if room is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Requested room not found")
        if (room.get("occupied_beds") or 0) >= (room.get("total_beds") or 1):
            return ServiceResult.fail(ErrorCode.ROOM_AT_CAPACITY, "Requested room is full")
        return ServiceResult.ok(None)

    async def _apply_room_change(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        payload = approval.get("payload") or {}
        new_rent = payload.get("new_rent")
        transfer = await self._tenants.transfer_room(
            RoomTransferInput(
                tenant_id=approval["requester_tenant_id"],
                new_room_id=payload["requested_room_id"],
                transfer_date=_parse_date(payload.get("transfer_date")) or utc_now().date(),
                reason=payload.get("reason")
                or f"Approved room change request (Approval #{approval['id']})",
                new_bed_id=payload.get("requested_bed_id"),
                adjust_rent=new_rent is not None,
                new_rent=money(new_rent) if new_rent is not None else None,
            ),
            actor_of(context),
        )
        if not transfer.success:
            return ServiceResult.fail(
                ErrorCode.WORKFLOW_STEP_FAILED,
                "Room transfer failed",
                details={"cause": transfer.error.message if transfer.error else None},
            )
        return ServiceResult.ok(
            [
                "room_transfer_completed",
                "old_room_released",
                "new_room_assigned",
                "rent_adjusted" if transfer.data.rent_adjusted else "rent_unchanged",
            ]
        )

    async def _apply_complaint(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        actions: list[str] = []
        complaint_id = (approval.get("payload") or {}).get("complaint_id")
        if complaint_id:
            updated = await self.entities.update(
                EntityType.COMPLAINT,
                complaint_id,
                context.workspace_id,
                {
                    "status": ComplaintStatus.RESOLVED.value,
                    "resolution_notes": input.decision_notes
                    or "Resolved via approval workflow",
                    "resolved_at": utc_now(),
                },
            )
            if updated is not None:
                actions.append("complaint_resolved")
        actions.append("complaint_acknowledged")
        return ServiceResult.ok(actions)

    async def _apply_bill_dispute(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        bill_id = (approval.get("payload") or {}).get("bill_id")
        if not bill_id:
            return ServiceResult.ok(["bill_dispute_acknowledged_manual_review"])
        bill = await self.entities.get(EntityType.BILL, bill_id, context.workspace_id)
        if bill is None:
            return ServiceResult.ok(["bill_not_found_manual_review"])

        actions: list[str] = []
        values: Row = {}
        total = money(bill.get("total_amount"))
        paid = money(bill.get("paid_amount"))
        if input.adjustment_amount is not None:
            total += input.adjustment_amount
            sign = "+" if input.adjustment_amount >= 0 else ""
            values["notes"] = _append_note(
                bill.get("notes"),
                f"Adjustment: {sign}{input.adjustment_amount} (Approval #{approval['id']})",
            )
            actions.append(f"bill_adjusted_by_{input.adjustment_amount}")
        if input.new_due_date is not None:
            values["due_date"] = input.new_due_date
            actions.append("due_date_updated")
        late_fee = money(bill.get("late_fee"))
        if input.waive_late_fee and late_fee > 0:
            total -= late_fee
            values["late_fee"] = 0
            actions.append("late_fee_waived")
        if values.keys() - {"due_date"}:
            values["total_amount"] = total
            values["balance_due"] = total - paid
        if (
            bill["status"] == BillStatus.OVERDUE.value
            and input.new_due_date is not None
            and input.new_due_date > utc_now().date()
        ):
            values["status"] = BillStatus.PENDING.value
            actions.append("overdue_status_cleared")

        if values:
            await self.entities.update(EntityType.BILL, bill_id, context.workspace_id, values)
        actions.append("bill_dispute_resolved")
        return ServiceResult.ok(actions)

    async def _apply_payment_dispute(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        payload = approval.get("payload") or {}
        payment_id = payload.get("payment_id")
        if not payment_id:
            return ServiceResult.ok(["payment_dispute_acknowledged_manual_review"])
        payment = await self.entities.get(EntityType.PAYMENT, payment_id, context.workspace_id)
        if payment is None:
            return ServiceResult.ok(["payment_not_found_manual_review"])

        dispute_type = payload.get("dispute_type")
        if dispute_type == "payment_not_received":
            note = (
                "DISPUTE: Payment not received claim - "
                f"{input.decision_notes or 'Under review'}"
            )
            action = "payment_marked_disputed"
        elif dispute_type == "wrong_amount":
            note = (
                f"DISPUTE: Amount discrepancy - {payload.get('claimed_amount')} claimed "
                f"vs {payment['amount']} recorded"
            )
            action = "amount_discrepancy_noted"
        elif dispute_type == "duplicate_payment":
            note = "DISPUTE: Duplicate payment claim - Review for refund"
            action = "duplicate_payment_flagged"
        else:
            return ServiceResult.ok(["payment_dispute_acknowledged"])
        await self.entities.update(
            EntityType.PAYMENT,
            payment_id,
            context.workspace_id,
            {"notes": _append_note(payment.get("notes"), note)},
        )
        return ServiceResult.ok([action])

    async def _apply_tenancy_issue(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        payload = approval.get("payload") or {}
        tenant = approval.get("tenant") or {}
        issue_type = payload.get("issue_type") or "general"
        note = (
            f"ISSUE RESOLVED [{utc_now().date().isoformat()}]: {issue_type} - "
            f"{input.decision_notes or 'Resolved'}"
        )
        values: Row = {"notes": _append_note(tenant.get("notes"), note)}
        actions = ["tenancy_issue_logged"]
        if issue_type == "rent_revision" and payload.get("new_rent") is not None:
            values["monthly_rent"] = money(payload["new_rent"])
            actions.append("rent_revised")
        elif issue_type == "deposit_dispute":
            actions.append("deposit_dispute_acknowledged")
        elif issue_type == "agreement_modification" and payload.get("new_end_date"):
            values["agreement_end_date"] = _parse_date(payload["new_end_date"])
            actions.append("agreement_end_date_updated")
        else:
            actions.append("issue_resolved")
        updated = await self._update_tenant(context, approval, values)
        if not updated.success:
            return ServiceResult.fail(updated.error)
        return ServiceResult.ok(actions)

    async def _apply_room_issue(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        payload = approval.get("payload") or {}
        tenant = approval.get("tenant") or {}
        room_id = payload.get("room_id") or tenant.get("room_id")
        if not room_id:
            return ServiceResult.ok(["room_issue_acknowledged_no_room_specified"])
        issue_type = payload.get("issue_type") or "general"
        actions: list[str] = []
        room = await self.entities.get(EntityType.ROOM, room_id, context.workspace_id)
        if room is not None:
            note = (
                f"ISSUE [{utc_now().date().isoformat()}]: {issue_type} - "
                f"{input.decision_notes or 'Addressed'}"
            )
            await self.entities.update(
                EntityType.ROOM,
                room_id,
                context.workspace_id,
                {"notes": _append_note(room.get("notes"), note)},
            )
            actions.append("room_issue_logged")
        actions.append(
            {
                "maintenance": "maintenance_acknowledged",
                "amenity_request": "amenity_request_processed",
                "cleanliness": "cleanliness_issue_addressed",
            }.get(issue_type, "room_issue_resolved")
        )
        return ServiceResult.ok(actions)

    async def _apply_other(
        self, context: WorkflowContext, approval: Row, input: ApprovalDecisionInput
    ) -> ServiceResult[list[str]]:
        return ServiceResult.ok(
            ["other_request_processed", input.resolution_action or "manual_review_complete"]
        )

    # create_approval steps

    async def _validate_tenant(
        self, context: WorkflowContext, input: CreateApprovalInput, results: StepResults
    ) -> ServiceResult[Row]:
        found = await self.require(
            EntityType.TENANT, input.tenant_id, context.workspace_id, "Tenant not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        if found.data["status"] == TenantStatus.CHECKED_OUT.value:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR, "Cannot create approval for checked-out tenant"
            )
        return found

    async def _create_approval(
        self, context: WorkflowContext, input: CreateApprovalInput, results: StepResults
    ) -> ServiceResult[Row]:
        approval = await self.entities.insert(
            EntityType.APPROVAL,
            context.workspace_id,
            {
                "requester_tenant_id": input.tenant_id,
                "owner_id": input.owner_id,
                "type": input.type.value,
                "title": input.title,
                "description": input.description,
                "payload": dict(input.payload),
                "priority": input.priority.value,
                "document_ids": list(input.document_ids),
                "status": ApprovalStatus.PENDING.value,
            },
        )
        return ServiceResult.ok(approval)

    async def _delete_approval(
        self, context: WorkflowContext, input: CreateApprovalInput, approval: Row
    ) -> None:
        if approval and approval.get("id"):
            await self.entities.delete(EntityType.APPROVAL, approval["id"], context.workspace_id)

    def _create_audit(
        self, context: WorkflowContext, input: CreateApprovalInput, results: StepResults
    ) -> list[AuditEvent]:
        return [
            create_audit_event(
                EntityType.APPROVAL,
                results["create_approval"]["id"],
                AuditAction.CREATE,
                actor_of(context),
                after={
                    "type": input.type.value,
                    "title": input.title,
                    "priority": input.priority.value,
                },
            )
        ]

    def _create_notifications(
        self, context: WorkflowContext, input: CreateApprovalInput, results: StepResults
    ) -> list[NotificationPayload]:
        tenant = results["validate_tenant"]
        return [
            build_approval_request_notification(
                input.owner_id,
                approval_id=results["create_approval"]["id"],
                tenant_name=tenant["name"],
                request_type=input.type.label,
                priority=NotificationPriority.HIGH
                if input.priority == NotificationPriority.URGENT
                else NotificationPriority.NORMAL,
                workspace_id=context.workspace_id,
            )
        ]

    def _create_output(self, results: StepResults) -> CreateApprovalOutput:
        return CreateApprovalOutput(
            approval_id=results["create_approval"]["id"],
            status=ApprovalStatus.PENDING.value,
        )
