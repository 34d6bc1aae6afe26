"""Booking ORM models."""

from __future__ import annotations

from datetime import date, datetime, time
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Time,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import BookingStatusEnum


class Booking(BaseModelMixin, Base):
    """Photo shoot booking.

    A draft carries the requested date and start time but no photographer.
    Every other status must have photographer, date and times set. Confirmed
    and completed rows of one photographer never overlap; the migration backs
    this with an exclusion constraint.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint(
            "status = 'draft' OR (photographer_id IS NOT NULL AND date IS NOT NULL "
            "AND start_time IS NOT NULL AND end_time IS NOT NULL)",
            name="scheduled_unless_draft",
        ),
        CheckConstraint("end_time IS NULL OR start_time < end_time", name="start_before_end"),
        CheckConstraint("required_minutes > 0", name="required_minutes_positive"),
    )

    client_id: Mapped[UUID] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    service_ids: Mapped[list[str]] = mapped_column(ARRAY(String(64)), default=list, nullable=False)
    required_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    address: Mapped[str] = mapped_column(String(512), default="", nullable=False)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lng: Mapped[float] = mapped_column(Float, nullable=False)

    photographer_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("photographers.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)
    start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    end_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    status: Mapped[BookingStatusEnum] = mapped_column(
        SAEnum(
            BookingStatusEnum,
            name="booking_status_enum",
            native_enum=False,
            values_callable=lambda enum: [item.value for item in enum],
        ),
        default=BookingStatusEnum.DRAFT,
        nullable=False,
        index=True,
    )
    is_accompanied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    accompanying_broker_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(String(512), nullable=True)

    rescheduled_from_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rescheduled_from_start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    created_by_id: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)
