"""DTOs for tenant exit: initiate clearance, settle and complete."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from app.domain.enums import SettlementType


@dataclass(frozen=True)
class Deduction:
    """Charge held back from the security deposit (damage, cleaning...)."""

    description: str
    amount: Decimal


@dataclass(frozen=True)
class Settlement:
    """Deposit settlement: net = deposit - dues - deductions.

    A positive net is refunded to the tenant; a negative net is owed by them.
    """

    total_dues: Decimal
    deposit_amount: Decimal
    deduction_amount: Decimal
    net_amount: Decimal

    @property
    def settlement_type(self) -> SettlementType:
        if self.net_amount >= 0:
            return SettlementType.REFUND
        return SettlementType.ADDITIONAL_PAYMENT

    @property
    def refund_amount(self) -> Decimal:
        return max(self.net_amount, Decimal("0"))

    @property
    def additional_payment(self) -> Decimal:
        return max(-self.net_amount, Decimal("0"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_dues": self.total_dues,
            "deposit_amount": self.deposit_amount,
            "deduction_amount": self.deduction_amount,
            "net_amount": self.net_amount,
            "refund_amount": self.refund_amount,
            "additional_payment": self.additional_payment,
            "settlement_type": self.settlement_type.value,
        }


@dataclass(frozen=True)
class InitiateExitInput:
    tenant_id: str
    requested_exit_date: date
    exit_reason: str
    deductions: tuple[Deduction, ...] = ()
    items_checklist: dict[str, Any] = field(default_factory=dict)
    notes: str | None = None


@dataclass(frozen=True)
class InitiateExitOutput:
    clearance_id: str
    tenant_id: str
    settlement: Settlement
    status: str


@dataclass(frozen=True)
class CompleteExitInput:
    clearance_id: str
    actual_exit_date: date
    settlement_mode: str | None = None
    settlement_reference: str | None = None
    final_notes: str | None = None


@dataclass(frozen=True)
class CompleteExitOutput:
    clearance_id: str
    tenant_id: str
    room_released: bool
    tenant_status: str
