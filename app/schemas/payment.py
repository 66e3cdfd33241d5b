"""Payment API schemas: record, refund and bulk record."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.payment import RecordPaymentInput, RefundPaymentInput
from app.domain.enums import PaymentMethod

BULK_PAYMENT_MAX_ITEMS = 100


class PaymentRecordRequest(BaseModel):
    """Payment against one bill. Set is_advance to accept more than the balance due."""

    tenant_id: str = Field(..., min_length=1)
    bill_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod
    payment_date: date | None = None
    reference_number: str | None = Field(default=None, max_length=100)
    notes: str | None = None
    is_advance: bool = False
    send_receipt: bool = True

    def to_input(self) -> RecordPaymentInput:
        return RecordPaymentInput(**self.model_dump())


class PaymentRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    receipt_number: str
    bill_status: str
    remaining_balance: Decimal
    receipt_sent: bool


class BulkPaymentRequest(BaseModel):
    payments: list[PaymentRecordRequest] = Field(
        ..., min_length=1, max_length=BULK_PAYMENT_MAX_ITEMS
    )


class BulkPaymentFailure(BaseModel):
    bill_id: str
    message: str


class BulkPaymentResponse(BaseModel):
    total_payments: int
    total_amount: Decimal
    payment_ids: list[str]
    failures: list[BulkPaymentFailure]


class RefundRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    reason: str = Field(..., min_length=1)
    refund_method: PaymentMethod
    reference_number: str | None = Field(default=None, max_length=100)

    def to_input(self, payment_id: str) -> RefundPaymentInput:
        return RefundPaymentInput(payment_id=payment_id, **self.model_dump())


class RefundResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    refund_id: str
    original_payment_id: str
    bill_updated: bool
