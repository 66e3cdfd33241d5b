"""Tenant (PG resident) and tenant stay ORM models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import TenantStatus, TenantStayStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import WorkspaceModel, status_check


class Tenant(WorkspaceModel, Base):
    """Resident of a property. Table: tenants. Status: active, notice_period, checked_out."""

    __tablename__ = "tenants"

    property_id: Mapped[str] = mapped_column(
        String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True, index=True
    )
    bed_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("beds.id", ondelete="SET NULL"), nullable=True
    )
    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    addresses: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    phone_numbers: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    emails: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    guardian_contacts: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TenantStatus.ACTIVE.value, index=True
    )
    check_in_date: Mapped[date] = mapped_column(Date, nullable=False)
    check_out_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    agreement_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    agreement_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notice_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expected_exit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    security_deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    advance_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    advance_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        status_check("tenants", TenantStatus.values()),
        Index("ix_tenants_workspace_status", "workspace_id", "status"),
    )


class TenantStay(WorkspaceModel, Base):
    """One continuous stay of a tenant in a room. Table: tenant_stays."""

    __tablename__ = "tenant_stays"

    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[str] = mapped_column(String, nullable=False)
    room_id: Mapped[str | None] = mapped_column(String, nullable=True)
    bed_id: Mapped[str | None] = mapped_column(String, nullable=True)
    join_date: Mapped[date] = mapped_column(Date, nullable=False)
    exit_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    exit_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=TenantStayStatus.ACTIVE.value
    )

    __table_args__ = (status_check("tenant_stays", TenantStayStatus.values()),)
