"""Approval API schemas: tenant requests and owner decisions."""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.application.dtos.approval import ApprovalDecisionInput, CreateApprovalInput
from app.domain.enums import ApprovalStatus, ApprovalType
from app.shared.enums import NotificationPriority

BULK_DECISION_MAX_ITEMS = 100


class ApprovalCreateRequest(BaseModel):
    tenant_id: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    type: ApprovalType
    title: str = Field(..., min_length=1, max_length=300)
    payload: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None
    priority: NotificationPriority = NotificationPriority.NORMAL
    document_ids: list[str] = Field(default_factory=list)

    def to_input(self) -> CreateApprovalInput:
        return CreateApprovalInput(
            tenant_id=self.tenant_id,
            owner_id=self.owner_id,
            type=self.type,
            title=self.title,
            payload=self.payload,
            description=self.description,
            priority=self.priority,
            document_ids=tuple(self.document_ids),
        )


class ApprovalCreateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    approval_id: str
    status: str


class ApprovalDecisionRequest(BaseModel):
    """Owner decision; the bill_dispute and other fields are ignored for other types."""

    decision: ApprovalStatus
    decision_notes: str | None = None
    adjustment_amount: Decimal | None = None
    new_due_date: date | None = None
    waive_late_fee: bool = False
    resolution_action: str | None = Field(default=None, max_length=100)

    @field_validator("decision")
    @classmethod
    def decision_not_pending(cls, v: ApprovalStatus) -> ApprovalStatus:
        if v == ApprovalStatus.PENDING:
            raise ValueError("decision must be approved or rejected")
        return v

    def to_input(self, approval_id: str) -> ApprovalDecisionInput:
        return ApprovalDecisionInput(approval_id=approval_id, **self.model_dump())


class ApprovalDecisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    approval_id: str
    decision: str
    change_applied: bool
    cascading_actions: list[str]


class BulkDecisionRequest(BaseModel):
    approval_ids: list[str] = Field(..., min_length=1, max_length=BULK_DECISION_MAX_ITEMS)
    decision_notes: str | None = None


class BulkDecisionItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    approval_id: str
    success: bool
    error: str | None = None


class BulkDecisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    succeeded: int
    failed: int
    results: list[BulkDecisionItemResponse]
