"""Payment workflows: record a payment against a bill, refund it, record in bulk.

Recording moves the bill from pending to partial to paid, credits the
tenant's advance balance for advance payments, and sends the receipt
(email, WhatsApp link, in-app) when asked.
"""

from __future__ import annotations

from typing import Any

from app.application.dtos.audit import AuditEvent
from app.application.dtos.notification import NotificationPayload
from app.application.dtos.payment import (
    BulkPaymentOutput,
    RecordPaymentInput,
    RecordPaymentOutput,
    RefundPaymentInput,
    RefundPaymentOutput,
)
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.dtos.workflow import WorkflowContext, WorkflowOptions, WorkflowResult
from app.application.services.audit_service import create_audit_event
from app.application.services.notification_service import build_payment_notification
from app.application.services.whatsapp import (
    PaymentReceiptData,
    format_inr,
    payment_receipt_message,
)
from app.application.use_cases.workflows.base import ZERO, WorkflowSet, actor_of, money
from app.domain.entities.workflow import (
    StepResults,
    WorkflowDefinition,
    WorkflowStepDefinition,
)
from app.domain.enums import BillStatus, PaymentStatus, RefundStatus
from app.shared.context import ActorContext
from app.shared.enums import AuditAction, EntityType
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import format_sequence_number

RECEIPT_PREFIX = "RCP"
RECEIPT_WIDTH = 6


def _receipt_recipient(input: RecordPaymentInput, tenant: dict[str, Any] | None) -> str | None:
    """Receipts go to tenants with a login or an email address."""
    if not input.send_receipt or tenant is None:
        return None
    if not (tenant.get("user_id") or tenant.get("email")):
        return None
    return tenant.get("user_id") or tenant["id"]


class PaymentWorkflows(WorkflowSet):
    """payment_record and payment_refund definitions plus their entry points."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.record_workflow: WorkflowDefinition[RecordPaymentInput, RecordPaymentOutput] = (
            WorkflowDefinition(
                name="payment_record",
                steps=(
                    WorkflowStepDefinition("validate", self._validate),
                    WorkflowStepDefinition(
                        "generate_receipt_number", self._generate_receipt_number
                    ),
                    WorkflowStepDefinition(
                        "create_payment", self._create_payment, rollback=self._delete_payment
                    ),
                    WorkflowStepDefinition("update_bill", self._update_bill),
                    WorkflowStepDefinition(
                        "update_advance_balance", self._update_advance_balance, optional=True
                    ),
                    WorkflowStepDefinition("clear_overdue", self._clear_overdue, optional=True),
                ),
                build_output=self._record_output,
                audit_events=self._record_audit,
                notifications=self._record_notifications,
            )
        )
        self.refund_workflow: WorkflowDefinition[RefundPaymentInput, RefundPaymentOutput] = (
            WorkflowDefinition(
                name="payment_refund",
                steps=(
                    WorkflowStepDefinition("validate_payment", self._validate_refund),
                    WorkflowStepDefinition(
                        "create_refund", self._create_refund, rollback=self._undo_refund
                    ),
                    WorkflowStepDefinition(
                        "update_bill", self._update_bill_for_refund, optional=True
                    ),
                ),
                build_output=self._refund_output,
                audit_events=self._refund_audit,
            )
        )

    # Entry points

    async def record_payment(
        self,
        input: RecordPaymentInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[RecordPaymentOutput]:
        return await self.run(self.record_workflow, input, actor, options)

    async def refund_payment(
        self,
        input: RefundPaymentInput,
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[RefundPaymentOutput]:
        return await self.run(self.refund_workflow, input, actor, options)

    async def record_bulk_payments(
        self,
        inputs: list[RecordPaymentInput],
        actor: ActorContext,
        options: WorkflowOptions | None = None,
    ) -> BulkPaymentOutput:
        """Record each payment in order; one failure does not stop the rest."""
        payment_ids: list[str] = []
        failures: list[tuple[str, str]] = []
        total = ZERO
        for item in inputs:
            result = await self.record_payment(item, actor, options)
            if result.success and result.data is not None:
                payment_ids.append(result.data.payment_id)
                total += item.amount
            else:
                message = result.error.message if result.error else "Payment failed"
                failures.append((item.bill_id, message))
        self._logger.info(
            "Bulk payments: %d recorded, %d failed", len(payment_ids), len(failures)
        )
        return BulkPaymentOutput(
            total_payments=len(payment_ids),
            total_amount=total,
            payment_ids=tuple(payment_ids),
            failures=tuple(failures),
        )

    # payment_record steps

    async def _validate(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        if input.amount <= 0:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR,
                "Payment amount must be greater than zero",
                field="amount",
            )
        found = await self.require(
            EntityType.BILL, input.bill_id, context.workspace_id, "Bill not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        bill = found.data
        if bill["tenant_id"] != input.tenant_id:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR, "Bill does not belong to the specified tenant"
            )
        if bill["status"] == BillStatus.PAID.value:
            return ServiceResult.fail(ErrorCode.BILL_ALREADY_PAID, "Bill is already fully paid")

        remaining = money(bill.get("balance_due")) or (
            money(bill.get("total_amount")) - money(bill.get("paid_amount"))
        )
        if input.amount > remaining and not input.is_advance:
            return ServiceResult.fail(
                ErrorCode.PAYMENT_EXCEEDS_DUE,
                f"Payment amount ({format_inr(input.amount)}) exceeds remaining balance "
                f"({format_inr(remaining)})",
                field="amount",
            )

        tenant = await self.entities.get(EntityType.TENANT, input.tenant_id, context.workspace_id)
        property_row = None
        room = None
        if tenant is not None:
            property_row = await self.entities.get(
                EntityType.PROPERTY, tenant["property_id"], context.workspace_id
            )
            if tenant.get("room_id"):
                room = await self.entities.get(
                    EntityType.ROOM, tenant["room_id"], context.workspace_id
                )
        return ServiceResult.ok({
            "bill": bill,
            "tenant": tenant,
            "property": property_row,
            "room": room,
            "remaining_balance": remaining,
            "receipt_recipient": _receipt_recipient(input, tenant),
        })

    async def _generate_receipt_number(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> ServiceResult[str]:
        count = await self.entities.count(EntityType.PAYMENT, context.workspace_id)
        return ServiceResult.ok(format_sequence_number(RECEIPT_PREFIX, count + 1, RECEIPT_WIDTH))

    async def _create_payment(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        bill = results["validate"]["bill"]
        payment = await self.entities.insert(
            EntityType.PAYMENT,
            context.workspace_id,
            {
                "tenant_id": input.tenant_id,
                "property_id": bill["property_id"],
                "bill_id": input.bill_id,
                "amount": input.amount,
                "payment_date": input.payment_date or utc_now().date(),
                "payment_method": input.payment_method.value,
                "reference_number": input.reference_number,
                "receipt_number": results["generate_receipt_number"],
                "notes": input.notes,
                "is_advance": input.is_advance,
                "status": PaymentStatus.COMPLETED.value,
                "recorded_by": context.actor_id,
            },
        )
        return ServiceResult.ok(payment)

    async def _delete_payment(
        self, context: WorkflowContext, input: RecordPaymentInput, payment: dict[str, Any]
    ) -> None:
        if payment and payment.get("id"):
            await self.entities.delete(EntityType.PAYMENT, payment["id"], context.workspace_id)

    async def _update_bill(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        bill = results["validate"]["bill"]
        new_paid = money(bill.get("paid_amount")) + input.amount
        new_balance = money(bill.get("total_amount")) - new_paid
        new_status = bill["status"]
        if new_balance <= 0:
            new_status = BillStatus.PAID.value
        elif new_paid > 0:
            new_status = BillStatus.PARTIAL.value
        balance_due = max(ZERO, new_balance)
        updated = await self.entities.update(
            EntityType.BILL,
            input.bill_id,
            context.workspace_id,
            {
                "paid_amount": new_paid,
                "balance_due": balance_due,
                "status": new_status,
                "last_payment_date": input.payment_date or utc_now().date(),
            },
        )
        if updated is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Bill not found")
        return ServiceResult.ok({
            "new_status": new_status,
            "new_paid_amount": new_paid,
            "new_balance": balance_due,
        })

    async def _update_advance_balance(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        if not input.is_advance:
            return ServiceResult.ok({"updated": False})
        tenant = results["validate"]["tenant"]
        if tenant is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Tenant not found")
        new_balance = money(tenant.get("advance_balance")) + input.amount
        await self.entities.update(
            EntityType.TENANT,
            input.tenant_id,
            context.workspace_id,
            {"advance_balance": new_balance},
        )
        return ServiceResult.ok({"updated": True, "new_balance": new_balance})

    async def _clear_overdue(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        bill = results["validate"]["bill"]
        if (
            bill["status"] == BillStatus.OVERDUE.value
            and results["update_bill"]["new_status"] == BillStatus.PAID.value
        ):
            self._logger.info("Late payment cleared for bill %s", input.bill_id)
        return ServiceResult.ok({"checked": True})

    # payment_record side effects

    def _record_audit(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> list[AuditEvent]:
        actor = actor_of(context)
        payment = results["create_payment"]
        bill = results["validate"]["bill"]
        bill_update = results["update_bill"]
        return [
            create_audit_event(
                EntityType.PAYMENT,
                payment["id"],
                AuditAction.CREATE,
                actor,
                after={
                    "amount": input.amount,
                    "payment_method": input.payment_method,
                    "bill_id": input.bill_id,
                    "receipt_number": payment["receipt_number"],
                },
            ),
            create_audit_event(
                EntityType.BILL,
                input.bill_id,
                AuditAction.UPDATE,
                actor,
                before={"status": bill["status"], "paid_amount": bill.get("paid_amount")},
                after={
                    "status": bill_update["new_status"],
                    "paid_amount": bill_update["new_paid_amount"],
                },
                metadata={"payment_id": payment["id"]},
            ),
        ]

    def _record_notifications(
        self, context: WorkflowContext, input: RecordPaymentInput, results: StepResults
    ) -> list[NotificationPayload]:
        recipient = results["validate"]["receipt_recipient"]
        if recipient is None:
            return []
        validated = results["validate"]
        tenant = validated["tenant"]
        bill = validated["bill"]
        property_row = validated["property"] or {}
        room = validated["room"] or {}
        payment = results["create_payment"]
        receipt = payment_receipt_message(
            PaymentReceiptData(
                tenant_name=tenant["name"],
                amount=input.amount,
                receipt_number=payment["receipt_number"],
                property_name=property_row.get("name") or "your PG",
                payment_date=payment["payment_date"],
                payment_method=input.payment_method,
                property_address=property_row.get("address"),
                room_number=room.get("room_number"),
                owner_name=property_row.get("owner_name"),
                owner_phone=property_row.get("owner_phone"),
                for_period=bill.get("bill_month"),
            )
        )
        return [
            build_payment_notification(
                recipient,
                payment_id=payment["id"],
                amount=format_inr(input.amount),
                bill_number=bill["bill_number"],
                whatsapp_message=receipt,
                contact=tenant.get("phone"),
                workspace_id=context.workspace_id,
            )
        ]

    def _record_output(self, results: StepResults) -> RecordPaymentOutput:
        bill_update = results["update_bill"]
        return RecordPaymentOutput(
            payment_id=results["create_payment"]["id"],
            receipt_number=results["generate_receipt_number"],
            bill_status=bill_update["new_status"],
            remaining_balance=bill_update["new_balance"],
            receipt_sent=results["validate"]["receipt_recipient"] is not None,
        )

    # payment_refund steps

    async def _validate_refund(
        self, context: WorkflowContext, input: RefundPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        if input.amount <= 0:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR,
                "Refund amount must be greater than zero",
                field="amount",
            )
        found = await self.require(
            EntityType.PAYMENT, input.payment_id, context.workspace_id, "Payment not found"
        )
        if not found.success:
            return ServiceResult.fail(found.error)
        payment = found.data
        if payment["status"] == PaymentStatus.REFUNDED.value:
            return ServiceResult.fail(
                ErrorCode.REFUND_ALREADY_PROCESSED, "Payment has already been fully refunded"
            )
        earlier = await self.entities.find(
            EntityType.PAYMENT_REFUND,
            context.workspace_id,
            {"payment_id": input.payment_id, "status": RefundStatus.COMPLETED.value},
        )
        refundable = money(payment["amount"]) - sum(
            (money(r["amount"]) for r in earlier), ZERO
        )
        if input.amount > refundable:
            return ServiceResult.fail(
                ErrorCode.REFUND_EXCEEDS_BALANCE,
                f"Refund amount ({format_inr(input.amount)}) exceeds refundable balance "
                f"({format_inr(refundable)})",
                field="amount",
            )
        bill = None
        if payment.get("bill_id"):
            bill = await self.entities.get(
                EntityType.BILL, payment["bill_id"], context.workspace_id
            )
        return ServiceResult.ok({"payment": payment, "bill": bill, "refundable": refundable})

    async def _create_refund(
        self, context: WorkflowContext, input: RefundPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        validated = results["validate_payment"]
        payment = validated["payment"]
        refund = await self.entities.insert(
            EntityType.PAYMENT_REFUND,
            context.workspace_id,
            {
                "payment_id": input.payment_id,
                "amount": input.amount,
                "reason": input.reason,
                "refund_method": input.refund_method.value,
                "reference_number": input.reference_number,
                "processed_by": context.actor_id,
                "status": RefundStatus.COMPLETED.value,
            },
        )
        status = (
            PaymentStatus.REFUNDED
            if input.amount >= validated["refundable"]
            else PaymentStatus.PARTIALLY_REFUNDED
        )
        await self.entities.update(
            EntityType.PAYMENT, input.payment_id, context.workspace_id, {"status": status.value}
        )
        return ServiceResult.ok({"refund_id": refund["id"], "previous_status": payment["status"]})

    async def _undo_refund(
        self, context: WorkflowContext, input: RefundPaymentInput, refund: dict[str, Any]
    ) -> None:
        await self.entities.delete(
            EntityType.PAYMENT_REFUND, refund["refund_id"], context.workspace_id
        )
        await self.entities.update(
            EntityType.PAYMENT,
            input.payment_id,
            context.workspace_id,
            {"status": refund["previous_status"]},
        )

    async def _update_bill_for_refund(
        self, context: WorkflowContext, input: RefundPaymentInput, results: StepResults
    ) -> ServiceResult[dict[str, Any]]:
        bill = results["validate_payment"]["bill"]
        if bill is None:
            return ServiceResult.ok({"updated": False})
        total = money(bill.get("total_amount"))
        new_paid = max(ZERO, money(bill.get("paid_amount")) - input.amount)
        new_balance = max(ZERO, total - new_paid)
        new_status = bill["status"]
        if new_paid <= 0:
            new_status = BillStatus.PENDING.value
        elif new_balance > 0:
            new_status = BillStatus.PARTIAL.value
        await self.entities.update(
            EntityType.BILL,
            bill["id"],
            context.workspace_id,
            {
                "paid_amount": new_paid,
                "balance_due": new_balance,
                "status": new_status,
            },
        )
        return ServiceResult.ok({"updated": True, "new_status": new_status})

    def _refund_audit(
        self, context: WorkflowContext, input: RefundPaymentInput, results: StepResults
    ) -> list[AuditEvent]:
        return [
            create_audit_event(
                EntityType.PAYMENT,
                input.payment_id,
                AuditAction.UPDATE,
                actor_of(context),
                after={
                    "refund_amount": input.amount,
                    "refund_reason": input.reason,
                    "refund_id": results["create_refund"]["refund_id"],
                },
                metadata={"action": "refund"},
            )
        ]

    def _refund_output(self, results: StepResults) -> RefundPaymentOutput:
        bill_update = results.get("update_bill") or {}
        return RefundPaymentOutput(
            refund_id=results["create_refund"]["refund_id"],
            original_payment_id=results["validate_payment"]["payment"]["id"],
            bill_updated=bool(bill_update.get("updated")),
        )
