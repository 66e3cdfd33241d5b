"""Exit clearance ORM model. Settlement figures are fixed when the clearance is initiated."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import ExitClearanceStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import WorkspaceModel, status_check


class ExitClearance(WorkspaceModel, Base):
    """Tenant move-out process and deposit settlement. Table: exit_clearance."""

    __tablename__ = "exit_clearance"

    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[str] = mapped_column(String, nullable=False)
    room_id: Mapped[str | None] = mapped_column(String, nullable=True)
    bed_id: Mapped[str | None] = mapped_column(String, nullable=True)
    initiated_by: Mapped[str] = mapped_column(String, nullable=False)
    notice_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    requested_exit_date: Mapped[date] = mapped_column(Date, nullable=False)
    actual_exit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    exit_reason: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ExitClearanceStatus.INITIATED.value
    )
    items_checklist: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    deductions: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    total_dues: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    deduction_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    refund_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    additional_payment: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    settlement_mode: Mapped[str | None] = mapped_column(String(32), nullable=True)
    settlement_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    final_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        status_check("exit_clearance", ExitClearanceStatus.values()),
        Index("ix_exit_clearance_workspace_tenant", "workspace_id", "tenant_id"),
    )
