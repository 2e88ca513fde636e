import enum
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from services.scheduling.models.base import Base, utc_now


class LocationKind(str, enum.Enum):
    meet = "meet"
    in_person = "in-person"
    phone = "phone"


class BookingStatus(str, enum.Enum):
    confirmed = "confirmed"
    cancelled = "cancelled"
    rescheduled = "rescheduled"
    # Filterable, but nothing creates pending bookings
    pending = "pending"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class EventType(Base):
    __tablename__ = "event_types"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    buffer_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_bookings_per_day: Mapped[Optional[int]] = mapped_column(Integer)
    location_kind: Mapped[LocationKind] = mapped_column(
        Enum(
            LocationKind,
            values_callable=_enum_values,
            name="location_kind",
            native_enum=False,
        ),
        nullable=False,
        default=LocationKind.meet,
    )
    location_value: Mapped[Optional[str]] = mapped_column(String(500))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    schedule_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("schedules.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now
    )

    bookings: Mapped[List["Booking"]] = relationship(back_populates="event_type")

    __table_args__ = (UniqueConstraint("user_id", "slug", name="_user_slug_uc"),)


class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Kept as history when the event type is deleted
    event_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("event_types.id", ondelete="SET NULL")
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    booker_name: Mapped[str] = mapped_column(String(255), nullable=False)
    booker_email: Mapped[str] = mapped_column(String(255), nullable=False)
    booker_phone: Mapped[Optional[str]] = mapped_column(String(50))
    # Naive wall-clock datetimes, see AvailabilityResolver
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    location_kind: Mapped[LocationKind] = mapped_column(
        Enum(
            LocationKind,
            values_callable=_enum_values,
            name="location_kind",
            native_enum=False,
        ),
        nullable=False,
        default=LocationKind.meet,
    )
    location_value: Mapped[Optional[str]] = mapped_column(String(500))
    guests: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(
            BookingStatus,
            values_callable=_enum_values,
            name="booking_status",
            native_enum=False,
        ),
        nullable=False,
        default=BookingStatus.confirmed,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utc_now, onupdate=utc_now
    )

    event_type: Mapped[Optional["EventType"]] = relationship(back_populates="bookings")

    __table_args__ = (Index("ix_bookings_user_id_status", "user_id", "status"),)
