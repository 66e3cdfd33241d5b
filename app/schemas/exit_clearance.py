"""Exit clearance API schemas."""

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.exit_clearance import (
    CompleteExitInput,
    Deduction,
    InitiateExitInput,
)
from app.domain.enums import SettlementType


class DeductionRequest(BaseModel):
    description: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)


class ExitInitiateRequest(BaseModel):
    tenant_id: str = Field(..., min_length=1)
    requested_exit_date: date
    exit_reason: str = Field(..., min_length=1)
    deductions: list[DeductionRequest] = Field(default_factory=list)
    items_checklist: dict[str, Any] = Field(default_factory=dict)
    notes: str | None = None

    def to_input(self) -> InitiateExitInput:
        return InitiateExitInput(
            tenant_id=self.tenant_id,
            requested_exit_date=self.requested_exit_date,
            exit_reason=self.exit_reason,
            deductions=tuple(Deduction(d.description, d.amount) for d in self.deductions),
            items_checklist=self.items_checklist,
            notes=self.notes,
        )


class SettlementResponse(BaseModel):
    """Deposit settlement; net_amount = deposit - dues - deductions."""

    model_config = ConfigDict(from_attributes=True)

    total_dues: Decimal
    deposit_amount: Decimal
    deduction_amount: Decimal
    net_amount: Decimal
    refund_amount: Decimal
    additional_payment: Decimal
    settlement_type: SettlementType


class ExitInitiateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    clearance_id: str
    tenant_id: str
    settlement: SettlementResponse
    status: str


class ExitCompleteRequest(BaseModel):
    actual_exit_date: date
    settlement_mode: str | None = Field(default=None, max_length=32)
    settlement_reference: str | None = Field(default=None, max_length=100)
    final_notes: str | None = None

    def to_input(self, clearance_id: str) -> CompleteExitInput:
        return CompleteExitInput(clearance_id=clearance_id, **self.model_dump())


class ExitCompleteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    clearance_id: str
    tenant_id: str
    room_released: bool
    tenant_status: str
