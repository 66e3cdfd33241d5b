"""DTOs for tenant approval requests and owner decisions."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from app.domain.enums import ApprovalStatus, ApprovalType
from app.shared.enums import NotificationPriority


@dataclass(frozen=True)
class CreateApprovalInput:
    tenant_id: str
    owner_id: str
    type: ApprovalType
    title: str
    payload: dict[str, Any] = field(default_factory=dict)
    description: str | None = None
    priority: NotificationPriority = NotificationPriority.NORMAL
    document_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreateApprovalOutput:
    approval_id: str
    status: str


@dataclass(frozen=True)
class ApprovalDecisionInput:
    """Owner decision. The optional fields only matter for some approval types."""

    approval_id: str
    decision: ApprovalStatus
    decision_notes: str | None = None
    # bill_dispute
    adjustment_amount: Decimal | None = None
    new_due_date: date | None = None
    waive_late_fee: bool = False
    # other
    resolution_action: str | None = None


@dataclass(frozen=True)
class ApprovalDecisionOutput:
    approval_id: str
    decision: str
    change_applied: bool
    cascading_actions: tuple[str, ...]


@dataclass(frozen=True)
class BulkDecisionItem:
    approval_id: str
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class BulkDecisionOutput:
    succeeded: int
    failed: int
    results: tuple[BulkDecisionItem, ...]
