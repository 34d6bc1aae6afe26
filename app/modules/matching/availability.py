"""Photographer calendar: template slots minus bookings and time-off."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, time
from uuid import UUID

from app.modules.matching.domain import BookedSlot, PhotographerSnapshot, TimeOffBlock, TimeRange
from app.shared.exceptions import CrossesMidnightException, InvalidDurationException


def busy_ranges(
    bookings: Iterable[BookedSlot],
    time_offs: Iterable[TimeOffBlock],
    excluding_booking_id: UUID | None = None,
) -> list[TimeRange]:
    """Ranges that block the calendar: confirmed/completed bookings and every time-off."""
    ranges = [
        booking.range
        for booking in bookings
        if booking.is_busy and booking.booking_id != excluding_booking_id
    ]
    ranges.extend(block.range for block in time_offs)
    return ranges


def requested_range(day: date, start_time: time, duration_minutes: int) -> TimeRange:
    """Build the range a booking would occupy, rejecting malformed requests."""
    if duration_minutes <= 0:
        raise InvalidDurationException(f"Duration must be positive, got {duration_minutes} minutes")
    requested = TimeRange.on_day(day, start_time, duration_minutes)
    if requested.end.date() != day:
        raise CrossesMidnightException(
            f"Booking starting {start_time:%H:%M} for {duration_minutes} minutes does not end on {day.isoformat()}",
        )
    return requested


def template_slots(photographer: PhotographerSnapshot, day: date) -> list[TimeRange]:
    """Expand the weekly template for ``day``; slots reaching midnight are dropped."""
    slots = [TimeRange.on_day(day, start, photographer.slot_minutes) for start in photographer.template_for(day)]
    return [slot for slot in slots if slot.end.date() == day]


def free_slots(
    photographer: PhotographerSnapshot,
    day: date,
    excluding_booking_id: UUID | None = None,
) -> list[TimeRange]:
    """Template slots on ``day`` that intersect no busy booking and no time-off."""
    blocked = busy_ranges(photographer.bookings, photographer.time_offs, excluding_booking_id)
    return [
        slot
        for slot in template_slots(photographer, day)
        if not any(slot.overlaps(busy) for busy in blocked)
    ]


def has_contiguous_free_span(
    photographer: PhotographerSnapshot,
    day: date,
    required_minutes: int,
    desired_start: time,
    excluding_booking_id: UUID | None = None,
) -> bool:
    """True when adjacent free slots starting at ``desired_start`` cover ``required_minutes``.

    A 90 minute shoot on a 60 minute grid needs the slot at ``desired_start``
    and the slot immediately after it to both be free; free minutes elsewhere in
    the day do not count.
    """
    requested = requested_range(day, desired_start, required_minutes)
    starts = {slot.start: slot for slot in free_slots(photographer, day, excluding_booking_id)}

    cursor = requested.start
    while cursor < requested.end:
        slot = starts.get(cursor)
        if slot is None:
            return False
        cursor = slot.end
    return True


def daily_load(photographer: PhotographerSnapshot, day: date, excluding_booking_id: UUID | None = None) -> int:
    """Number of confirmed/completed bookings the photographer already has on ``day``."""
    return sum(
        1
        for booking in photographer.bookings
        if booking.is_busy and booking.day == day and booking.booking_id != excluding_booking_id
    )
