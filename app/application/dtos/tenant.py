"""DTOs for tenant onboarding and room transfer workflows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class CreateTenantInput:
    """New tenant moving into a room (and optionally a specific bed)."""

    property_id: str
    room_id: str
    name: str
    phone: str
    check_in_date: date
    monthly_rent: Decimal
    security_deposit: Decimal = Decimal("0")
    advance_amount: Decimal = Decimal("0")
    bed_id: str | None = None
    email: str | None = None
    address: str | None = None
    user_id: str | None = None
    property_name: str | None = None
    notes: str | None = None
    create_stay_record: bool = True
    generate_initial_bill: bool = False
    send_welcome_notification: bool = True


@dataclass(frozen=True)
class CreateTenantOutput:
    tenant_id: str
    tenant_stay_id: str | None
    initial_bill_id: str | None
    invitation_sent: bool = False


@dataclass(frozen=True)
class RoomTransferInput:
    tenant_id: str
    new_room_id: str
    transfer_date: date
    reason: str
    new_bed_id: str | None = None
    adjust_rent: bool = False
    new_rent: Decimal | None = None


@dataclass(frozen=True)
class RoomTransferOutput:
    tenant_id: str
    old_room_id: str | None
    new_room_id: str
    rent_adjusted: bool
