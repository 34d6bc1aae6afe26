"""Build engine snapshots from persisted rows.

Bookings store local wall-clock date and times; time-offs store UTC instants
and are converted into the business timezone here.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from app.core.enums import WeekdayEnum
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.catalog.service import ServiceRequirements
from app.modules.clients.models import Client
from app.modules.matching.domain import BookedSlot, ClientSnapshot, PhotographerSnapshot, TimeOffBlock
from app.modules.matching.geo import GeoPoint
from app.modules.photographers.models import Photographer
from app.modules.photographers.repository import PhotographersRepository
from app.modules.timeoff.models import TimeOff
from app.modules.timeoff.repository import TimeOffRepository
from app.shared.utils import local_to_utc, parse_hhmm, to_local_naive


def booked_slot(booking: Booking) -> BookedSlot:
    return BookedSlot(
        booking_id=booking.id,
        day=booking.date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        status=booking.status,
    )


def time_off_block(time_off: TimeOff, tz: ZoneInfo) -> TimeOffBlock:
    return TimeOffBlock(
        id=time_off.id,
        start=to_local_naive(time_off.start_at, tz),
        end=to_local_naive(time_off.end_at, tz),
    )


def availability_template(raw: dict[str, list[str]]) -> dict[WeekdayEnum, tuple[time, ...]]:
    return {WeekdayEnum(weekday): tuple(parse_hhmm(item) for item in starts) for weekday, starts in raw.items()}


def photographer_snapshot(
    photographer: Photographer,
    bookings: Iterable[Booking] = (),
    time_offs: Iterable[TimeOff] = (),
    *,
    tz: ZoneInfo,
) -> PhotographerSnapshot:
    return PhotographerSnapshot(
        id=photographer.id,
        name=photographer.name,
        services=frozenset(photographer.services),
        base=GeoPoint(photographer.base_lat, photographer.base_lng),
        radius_km=photographer.radius_km,
        slot_minutes=photographer.slot_minutes,
        availability=availability_template(photographer.availability or {}),
        is_active=photographer.is_active,
        bookings=tuple(booked_slot(item) for item in bookings),
        time_offs=tuple(time_off_block(item, tz) for item in time_offs),
    )


def client_snapshot(client: Client) -> ClientSnapshot:
    location = None
    if client.lat is not None and client.lng is not None:
        location = GeoPoint(client.lat, client.lng)
    return ClientSnapshot(
        id=client.id,
        blocked_photographer_ids=frozenset(client.blocked_photographer_ids),
        location=location,
    )


def search_center(address: GeoPoint, requirements: ServiceRequirements, client: ClientSnapshot | None) -> GeoPoint:
    """Key pickup moves the radius check to the client's office when it is geocoded."""
    if requirements.uses_client_location and client is not None and client.location is not None:
        return client.location
    return address


def day_window_utc(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    start = datetime.combine(day, time.min)
    return local_to_utc(start, tz), local_to_utc(start + timedelta(days=1), tz)


class LiveScheduleSource:
    """Reads a photographer's calendar inside the current transaction."""

    def __init__(
        self,
        booking_repository: BookingRepository,
        timeoff_repository: TimeOffRepository,
        tz: ZoneInfo,
    ) -> None:
        self.booking_repository = booking_repository
        self.timeoff_repository = timeoff_repository
        self.tz = tz

    async def list_busy_bookings(self, photographer_id: UUID, day: date) -> list[BookedSlot]:
        bookings = await self.booking_repository.list_busy_bookings([photographer_id], day)
        return [booked_slot(item) for item in bookings]

    async def list_time_offs_between(self, photographer_id: UUID, start: datetime, end: datetime) -> list[TimeOffBlock]:
        time_offs = await self.timeoff_repository.list_between(
            [photographer_id],
            local_to_utc(start, self.tz),
            local_to_utc(end, self.tz),
        )
        return [time_off_block(item, self.tz) for item in time_offs]


class RosterLoader:
    """Loads photographer snapshots with their calendar for one day."""

    def __init__(
        self,
        photographers_repository: PhotographersRepository,
        booking_repository: BookingRepository,
        timeoff_repository: TimeOffRepository,
        tz: ZoneInfo,
    ) -> None:
        self.photographers_repository = photographers_repository
        self.booking_repository = booking_repository
        self.timeoff_repository = timeoff_repository
        self.tz = tz

    async def load(self, day: date, photographer_ids: Sequence[UUID] | None = None) -> list[PhotographerSnapshot]:
        if photographer_ids is None:
            photographers = await self.photographers_repository.list_roster()
        else:
            photographers = await self.photographers_repository.list_by_ids(list(photographer_ids))
        ids = [item.id for item in photographers]

        bookings_by_photographer: dict[UUID, list[Booking]] = defaultdict(list)
        for booking in await self.booking_repository.list_busy_bookings(ids, day):
            bookings_by_photographer[booking.photographer_id].append(booking)

        window_start, window_end = day_window_utc(day, self.tz)
        time_offs_by_photographer: dict[UUID, list[TimeOff]] = defaultdict(list)
        for time_off in await self.timeoff_repository.list_between(ids, window_start, window_end):
            time_offs_by_photographer[time_off.photographer_id].append(time_off)

        return [
            photographer_snapshot(
                item,
                bookings_by_photographer[item.id],
                time_offs_by_photographer[item.id],
                tz=self.tz,
            )
            for item in photographers
        ]
