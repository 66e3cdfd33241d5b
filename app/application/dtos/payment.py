"""DTOs for payment workflows: record, refund and bulk record."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from app.domain.enums import PaymentMethod


@dataclass(frozen=True)
class RecordPaymentInput:
    """Payment against one bill. is_advance allows paying more than the balance."""

    tenant_id: str
    bill_id: str
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: date | None = None
    reference_number: str | None = None
    notes: str | None = None
    is_advance: bool = False
    send_receipt: bool = True


@dataclass(frozen=True)
class RecordPaymentOutput:
    payment_id: str
    receipt_number: str
    bill_status: str
    remaining_balance: Decimal
    receipt_sent: bool


@dataclass(frozen=True)
class RefundPaymentInput:
    payment_id: str
    amount: Decimal
    reason: str
    refund_method: PaymentMethod
    reference_number: str | None = None


@dataclass(frozen=True)
class RefundPaymentOutput:
    refund_id: str
    original_payment_id: str
    bill_updated: bool


@dataclass(frozen=True)
class BulkPaymentOutput:
    """Totals of the successful payments in a bulk run; failures keep their message."""

    total_payments: int
    total_amount: Decimal
    payment_ids: tuple[str, ...]
    failures: tuple[tuple[str, str], ...] = field(default=())
