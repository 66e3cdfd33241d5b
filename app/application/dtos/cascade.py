"""Typed cascade effects: secondary entity mutations applied after a workflow succeeds.

Each variant is keyed by its entity_type and carries a fields dataclass with
only the columns that entity accepts. Fields left UNSET are not written, so
None can still be written explicitly (e.g. releasing a bed's current_tenant_id).
"""

from dataclasses import dataclass, field, fields as dc_fields
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar

from app.domain.enums import (
    ApprovalStatus,
    BedStatus,
    BillStatus,
    ComplaintStatus,
    ExitClearanceStatus,
    PaymentStatus,
    RoomStatus,
    TenantStatus,
)
from app.shared.enums import CascadeAction, EntityType


class _Unset:
    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class _CascadeFields:
    """Base for per-entity field sets."""

    def to_values(self) -> dict[str, Any]:
        """Return only the fields that were set, enum members as plain values."""
        out: dict[str, Any] = {}
        for f in dc_fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            if value is UNSET:
                continue
            out[f.name] = value.value if isinstance(value, Enum) else value
        return out


@dataclass(frozen=True)
class RoomFields(_CascadeFields):
    status: RoomStatus = UNSET
    occupied_beds: int = UNSET


@dataclass(frozen=True)
class BedFields(_CascadeFields):
    status: BedStatus = UNSET
    current_tenant_id: str | None = UNSET


@dataclass(frozen=True)
class TenantFields(_CascadeFields):
    status: TenantStatus = UNSET
    room_id: str | None = UNSET
    bed_id: str | None = UNSET
    advance_balance: Decimal = UNSET
    check_out_date: date | None = UNSET


@dataclass(frozen=True)
class BillFields(_CascadeFields):
    status: BillStatus = UNSET
    paid_amount: Decimal = UNSET
    balance_due: Decimal = UNSET


@dataclass(frozen=True)
class PaymentFields(_CascadeFields):
    status: PaymentStatus = UNSET
    notes: str | None = UNSET


@dataclass(frozen=True)
class ExitClearanceFields(_CascadeFields):
    status: ExitClearanceStatus = UNSET
    completed_at: datetime | None = UNSET


@dataclass(frozen=True)
class ApprovalFields(_CascadeFields):
    status: ApprovalStatus = UNSET
    change_applied: bool = UNSET


@dataclass(frozen=True)
class ComplaintFields(_CascadeFields):
    status: ComplaintStatus = UNSET
    resolution_notes: str | None = UNSET


@dataclass(frozen=True)
class RoomCascade:
    entity_id: str
    action: CascadeAction
    fields: RoomFields = field(default_factory=RoomFields)
    entity_type: ClassVar[EntityType] = EntityType.ROOM


@dataclass(frozen=True)
class BedCascade:
    entity_id: str
    action: CascadeAction
    fields: BedFields = field(default_factory=BedFields)
    entity_type: ClassVar[EntityType] = EntityType.BED


@dataclass(frozen=True)
class TenantCascade:
    entity_id: str
    action: CascadeAction
    fields: TenantFields = field(default_factory=TenantFields)
    entity_type: ClassVar[EntityType] = EntityType.TENANT


@dataclass(frozen=True)
class BillCascade:
    entity_id: str
    action: CascadeAction
    fields: BillFields = field(default_factory=BillFields)
    entity_type: ClassVar[EntityType] = EntityType.BILL


@dataclass(frozen=True)
class PaymentCascade:
    entity_id: str
    action: CascadeAction
    fields: PaymentFields = field(default_factory=PaymentFields)
    entity_type: ClassVar[EntityType] = EntityType.PAYMENT


@dataclass(frozen=True)
class ExitClearanceCascade:
    entity_id: str
    action: CascadeAction
    fields: ExitClearanceFields = field(default_factory=ExitClearanceFields)
    entity_type: ClassVar[EntityType] = EntityType.EXIT_CLEARANCE


@dataclass(frozen=True)
class ApprovalCascade:
    entity_id: str
    action: CascadeAction
    fields: ApprovalFields = field(default_factory=ApprovalFields)
    entity_type: ClassVar[EntityType] = EntityType.APPROVAL


@dataclass(frozen=True)
class ComplaintCascade:
    entity_id: str
    action: CascadeAction
    fields: ComplaintFields = field(default_factory=ComplaintFields)
    entity_type: ClassVar[EntityType] = EntityType.COMPLAINT


CascadeEffect = (
    RoomCascade
    | BedCascade
    | TenantCascade
    | BillCascade
    | PaymentCascade
    | ExitClearanceCascade
    | ApprovalCascade
    | ComplaintCascade
)
