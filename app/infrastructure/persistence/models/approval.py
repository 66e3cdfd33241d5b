"""Approval and complaint ORM models (tenant requests reviewed by the owner)."""

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import ApprovalStatus, ApprovalType, ComplaintStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import WorkspaceModel, status_check
from app.shared.enums import NotificationPriority


class Approval(WorkspaceModel, Base):
    """Tenant change request awaiting an owner decision. Table: approvals."""

    __tablename__ = "approvals"

    requester_tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    owner_id: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=NotificationPriority.NORMAL.value
    )
    document_ids: Mapped[list[str] | None] = mapped_column(JSONB, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ApprovalStatus.PENDING.value, index=True
    )
    decided_by: Mapped[str | None] = mapped_column(String, nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    decision_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    change_applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applied_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        status_check("approvals", ApprovalStatus.values()),
        status_check("approvals", ApprovalType.values(), column="type"),
        Index("ix_approvals_workspace_status", "workspace_id", "status"),
    )


class Complaint(WorkspaceModel, Base):
    """Tenant complaint. Table: complaints."""

    __tablename__ = "complaints"

    tenant_id: Mapped[str] = mapped_column(
        String, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ComplaintStatus.OPEN.value
    )
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (status_check("complaints", ComplaintStatus.values()),)
