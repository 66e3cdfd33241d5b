"""Tenant API schemas: onboarding and room transfer."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.application.dtos.tenant import CreateTenantInput, RoomTransferInput


class TenantCreateRequest(BaseModel):
    """Request body for onboarding a tenant into a room."""

    property_id: str = Field(..., min_length=1)
    room_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=5, max_length=32)
    check_in_date: date
    monthly_rent: Decimal = Field(..., ge=0)
    security_deposit: Decimal = Field(default=Decimal("0"), ge=0)
    advance_amount: Decimal = Field(default=Decimal("0"), ge=0)
    bed_id: str | None = None
    email: str | None = Field(default=None, max_length=320)
    address: str | None = None
    user_id: str | None = None
    property_name: str | None = None
    notes: str | None = None
    create_stay_record: bool = True
    generate_initial_bill: bool = False
    send_welcome_notification: bool = True

    def to_input(self) -> CreateTenantInput:
        return CreateTenantInput(**self.model_dump())


class TenantCreateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    tenant_stay_id: str | None
    initial_bill_id: str | None
    invitation_sent: bool


class RoomTransferRequest(BaseModel):
    """Move a tenant to another room; new_rent is required when adjust_rent is set."""

    new_room_id: str = Field(..., min_length=1)
    transfer_date: date
    reason: str = Field(..., min_length=1)
    new_bed_id: str | None = None
    adjust_rent: bool = False
    new_rent: Decimal | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def rent_required_when_adjusting(self) -> "RoomTransferRequest":
        if self.adjust_rent and self.new_rent is None:
            raise ValueError("new_rent is required when adjust_rent is true")
        return self

    def to_input(self, tenant_id: str) -> RoomTransferInput:
        return RoomTransferInput(tenant_id=tenant_id, **self.model_dump())


class RoomTransferResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: str
    old_room_id: str | None
    new_room_id: str
    rent_adjusted: bool
