"""Booking schemas."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import BookingStatusEnum
from app.shared.utils import WallClockTime


class BookingDraftCreate(BaseModel):
    """Create booking draft request.

    Coordinates are checked by the matching engine, not here, so malformed
    values surface as ``invalid_coordinate`` errors.
    """

    client_id: UUID
    service_ids: list[str] = Field(min_length=1)
    address: str = Field(default="", max_length=512)
    lat: float
    lng: float
    date: dt.date
    start_time: WallClockTime
    is_accompanied: bool = False
    accompanying_broker_name: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=1024)


class BookingConfirmRequest(BaseModel):
    """Confirm a draft with an explicitly chosen photographer."""

    photographer_id: UUID


class BookingCancelRequest(BaseModel):
    """Cancel booking request."""

    reason: str | None = Field(default=None, max_length=512)


class BookingRescheduleRequest(BaseModel):
    """Move a booking to another date and start time with the same photographer."""

    date: dt.date
    start_time: WallClockTime


class BookingReassignRequest(BaseModel):
    """Hand a booking over to another photographer, keeping date and time."""

    photographer_id: UUID


class BookingRead(BaseModel):
    """Booking response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    service_ids: list[str]
    required_minutes: int
    address: str
    lat: float
    lng: float
    photographer_id: UUID | None
    date: dt.date | None
    start_time: dt.time | None
    end_time: dt.time | None
    status: BookingStatusEnum
    is_accompanied: bool
    accompanying_broker_name: str | None
    notes: str | None
    confirmed_at: dt.datetime | None
    completed_at: dt.datetime | None
    cancelled_at: dt.datetime | None
    cancellation_reason: str | None
    rescheduled_from_date: dt.date | None
    rescheduled_from_start_time: dt.time | None
    created_at: dt.datetime
    updated_at: dt.datetime
