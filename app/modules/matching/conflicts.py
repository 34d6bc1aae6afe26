"""Commit-time double-booking guard."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta
from typing import Protocol
from uuid import UUID

from app.modules.matching.availability import busy_ranges, requested_range
from app.modules.matching.domain import BookedSlot, TimeOffBlock, TimeRange
from app.shared.exceptions import SlotConflictException

logger = logging.getLogger(__name__)


class ScheduleSource(Protocol):
    """Live calendar state for one photographer, read inside the writing transaction."""

    async def list_busy_bookings(self, photographer_id: UUID, day: date) -> Sequence[BookedSlot]:
        """Return confirmed/completed bookings of the photographer on ``day``."""

    async def list_time_offs_between(
        self,
        photographer_id: UUID,
        start: datetime,
        end: datetime,
    ) -> Sequence[TimeOffBlock]:
        """Return time-off blocks intersecting ``[start, end)`` as local naive ranges."""


def find_conflicts(
    requested: TimeRange,
    bookings: Iterable[BookedSlot],
    time_offs: Iterable[TimeOffBlock],
    excluding_booking_id: UUID | None = None,
) -> list[TimeRange]:
    """Busy ranges overlapping ``requested``; same half-open rule as the calendar."""
    return [busy for busy in busy_ranges(bookings, time_offs, excluding_booking_id) if requested.overlaps(busy)]


class ConflictGuard:
    """Final overlap check before a slot is claimed.

    Must run after the photographer's schedule lock is taken and immediately
    before the confirmed booking is written, in the same transaction.
    """

    def __init__(self, source: ScheduleSource) -> None:
        self.source = source

    async def assert_no_conflict(
        self,
        photographer_id: UUID,
        day: date,
        start_time: time,
        duration_minutes: int,
        excluding_booking_id: UUID | None = None,
    ) -> TimeRange:
        requested = requested_range(day, start_time, duration_minutes)
        day_start = datetime.combine(day, time.min)

        bookings = await self.source.list_busy_bookings(photographer_id, day)
        time_offs = await self.source.list_time_offs_between(
            photographer_id,
            day_start,
            day_start + timedelta(days=1),
        )

        conflicts = find_conflicts(requested, bookings, time_offs, excluding_booking_id)
        if conflicts:
            first = conflicts[0]
            logger.warning(
                "Slot conflict for photographer %s on %s %s: overlaps %s-%s",
                photographer_id,
                day.isoformat(),
                start_time.strftime("%H:%M"),
                first.start.strftime("%Y-%m-%d %H:%M"),
                first.end.strftime("%Y-%m-%d %H:%M"),
            )
            raise SlotConflictException(
                f"Photographer is not free on {day.isoformat()} from "
                f"{requested.start:%H:%M} to {requested.end:%H:%M}",
            )
        return requested
