"""Bill, payment and refund ORM models. Money columns are NUMERIC(12, 2)."""

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Date, ForeignKey, Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import BillStatus, PaymentMethod, PaymentStatus, RefundStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import WorkspaceModel, status_check


class Bill(WorkspaceModel, Base):
    """Monthly (or one-off) bill for a tenant. Table: bills."""

    __tablename__ = "bills"

    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[str] = mapped_column(String, nullable=False)
    bill_number: Mapped[str] = mapped_column(String(32), nullable=False)
    bill_month: Mapped[str | None] = mapped_column(String(32), nullable=True)
    billing_period_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    billing_period_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    balance_due: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    late_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=BillStatus.PENDING.value, index=True
    )
    line_items: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    last_payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        status_check("bills", BillStatus.values()),
        Index("ix_bills_workspace_tenant_status", "workspace_id", "tenant_id", "status"),
        UniqueConstraint("workspace_id", "bill_number", name="uq_bills_workspace_bill_number"),
    )


class Payment(WorkspaceModel, Base):
    """Payment against a bill. Table: payments."""

    __tablename__ = "payments"

    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[str] = mapped_column(String, nullable=False)
    bill_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("bills.id", ondelete="SET NULL"), nullable=True, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    receipt_number: Mapped[str] = mapped_column(String(32), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_advance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=PaymentStatus.COMPLETED.value
    )
    recorded_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        status_check("payments", PaymentStatus.values()),
        status_check("payments", PaymentMethod.values(), column="payment_method"),
        UniqueConstraint(
            "workspace_id", "receipt_number", name="uq_payments_workspace_receipt_number"
        ),
    )


class PaymentRefund(WorkspaceModel, Base):
    """Refund of part or all of a payment. Table: payment_refunds."""

    __tablename__ = "payment_refunds"

    payment_id: Mapped[str] = mapped_column(
        String, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    refund_method: Mapped[str] = mapped_column(String(32), nullable=False)
    reference_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    processed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=RefundStatus.COMPLETED.value
    )
