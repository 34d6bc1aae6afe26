"""Snapshot value types consumed by the matching engine.

All times are naive wall-clock values in the business timezone. Callers build
these snapshots from persistence and pass them in; the engine never queries.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from uuid import UUID

from app.core.enums import BUSY_BOOKING_STATUSES, BookingStatusEnum, WeekdayEnum
from app.modules.matching.geo import GeoPoint


@dataclass(frozen=True, slots=True)
class TimeRange:
    """Half-open interval ``[start, end)``."""

    start: datetime
    end: datetime

    def overlaps(self, other: "TimeRange") -> bool:
        # Touching boundaries (end == other.start) do not overlap.
        return self.start < other.end and other.start < self.end

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    @classmethod
    def on_day(cls, day: date, start: time, minutes: int) -> "TimeRange":
        begin = datetime.combine(day, start)
        return cls(begin, begin + timedelta(minutes=minutes))


@dataclass(frozen=True, slots=True)
class BookedSlot:
    """A booking occupying (or formerly occupying) a photographer's calendar."""

    booking_id: UUID
    day: date
    start_time: time
    end_time: time
    status: BookingStatusEnum

    @property
    def is_busy(self) -> bool:
        return self.status in BUSY_BOOKING_STATUSES

    @property
    def range(self) -> TimeRange:
        return TimeRange(datetime.combine(self.day, self.start_time), datetime.combine(self.day, self.end_time))


@dataclass(frozen=True, slots=True)
class TimeOffBlock:
    id: UUID
    start: datetime
    end: datetime

    @property
    def range(self) -> TimeRange:
        return TimeRange(self.start, self.end)


@dataclass(frozen=True, slots=True)
class PhotographerSnapshot:
    """Capability profile plus the calendar state relevant to one evaluation."""

    id: UUID
    name: str
    services: frozenset[str]
    base: GeoPoint
    radius_km: float
    slot_minutes: int
    availability: Mapping[WeekdayEnum, tuple[time, ...]]
    is_active: bool = True
    bookings: tuple[BookedSlot, ...] = ()
    time_offs: tuple[TimeOffBlock, ...] = ()

    def template_for(self, day: date) -> tuple[time, ...]:
        return tuple(sorted(self.availability.get(WeekdayEnum.from_index(day.weekday()), ())))


@dataclass(frozen=True, slots=True)
class ClientSnapshot:
    id: UUID
    blocked_photographer_ids: frozenset[UUID] = frozenset()
    location: GeoPoint | None = None


@dataclass(frozen=True, slots=True)
class BookingRequest:
    """What a booking draft asks for: where, when, which services and for how long."""

    client_id: UUID
    service_ids: frozenset[str]
    location: GeoPoint
    day: date
    start_time: time
    required_minutes: int
    excluding_booking_id: UUID | None = None


@dataclass(frozen=True, slots=True)
class EligiblePhotographer:
    """Transient match result; never persisted."""

    photographer: PhotographerSnapshot
    distance_km: float
    daily_load: int


@dataclass(frozen=True, slots=True)
class OptimizationSuggestion:
    """Swap of photographers between two simultaneous bookings that saves travel."""

    booking_a_id: UUID
    booking_b_id: UUID
    photographer_a_id: UUID
    photographer_b_id: UUID
    saving_km: float
    start_time: time
