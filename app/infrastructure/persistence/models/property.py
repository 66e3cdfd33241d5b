"""Property, room and bed ORM models. Rooms track bed occupancy."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.domain.enums import BedStatus, RoomStatus
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.models.mixins import WorkspaceModel, status_check


class Property(WorkspaceModel, Base):
    """A PG/hostel building. Table: properties."""

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    owner_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    owner_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)


class Room(WorkspaceModel, Base):
    """Room within a property. Table: rooms. occupied_beds never exceeds total_beds."""

    __tablename__ = "rooms"

    property_id: Mapped[str] = mapped_column(
        String, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_number: Mapped[str] = mapped_column(String(32), nullable=False)
    total_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    occupied_beds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    monthly_rent: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=RoomStatus.AVAILABLE.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        status_check("rooms", RoomStatus.values()),
        Index("ix_rooms_workspace_property", "workspace_id", "property_id"),
    )


class Bed(WorkspaceModel, Base):
    """Bed within a shared room. Table: beds."""

    __tablename__ = "beds"

    room_id: Mapped[str] = mapped_column(
        String, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    bed_number: Mapped[str] = mapped_column(String(32), nullable=False)
    current_tenant_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=BedStatus.AVAILABLE.value
    )

    __table_args__ = (status_check("beds", BedStatus.values()),)
