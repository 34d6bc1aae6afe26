from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

import pytest

from app.core.enums import BUSY_BOOKING_STATUSES, BookingStatusEnum
from app.modules.booking.service import BookingService
from app.modules.catalog.service import CatalogService
from app.modules.clients.service import ClientsService
from app.modules.matching.conflicts import ConflictGuard
from app.modules.matching.service import MatchingService
from app.modules.matching.snapshots import LiveScheduleSource, RosterLoader
from app.modules.photographers.service import PhotographersService
from app.modules.timeoff.service import TimeOffService

TZ = ZoneInfo("America/Sao_Paulo")
MONDAY = date(2030, 1, 7)


@dataclass
class FakeService:
    code: str
    duration_minutes: int
    is_fee_only: bool = False
    uses_client_location: bool = False
    is_active: bool = True


@dataclass
class FakePhotographer:
    id: UUID
    name: str
    services: list[str]
    base_lat: float
    base_lng: float
    radius_km: float
    slot_minutes: int
    availability: dict[str, list[str]]
    is_active: bool = True
    email: str = ""
    phone: str | None = None
    base_address: str = ""


@dataclass
class FakeClient:
    id: UUID
    name: str
    lat: float | None = None
    lng: float | None = None
    blocked_photographer_ids: list[UUID] = field(default_factory=list)
    email: str | None = None
    phone: str | None = None
    address: str = ""


@dataclass
class FakeBooking:
    id: UUID
    client_id: UUID
    service_ids: list[str]
    required_minutes: int
    lat: float
    lng: float
    date: date | None
    start_time: time | None
    address: str = ""
    photographer_id: UUID | None = None
    end_time: time | None = None
    status: BookingStatusEnum = BookingStatusEnum.DRAFT
    is_accompanied: bool = False
    accompanying_broker_name: str | None = None
    notes: str | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    rescheduled_from_date: date | None = None
    rescheduled_from_start_time: time | None = None
    created_by_id: UUID | None = None


@dataclass
class FakeTimeOff:
    id: UUID
    photographer_id: UUID
    start_at: datetime
    end_at: datetime
    block_id: UUID
    notes: str | None = None
    created_by_id: UUID | None = None


class FakeCatalogRepository:
    def __init__(self, services: dict[str, FakeService]) -> None:
        self._services = services

    async def list_by_codes(self, codes: Iterable[str]) -> list[FakeService]:
        return [self._services[code] for code in codes if code in self._services]


class FakePhotographersRepository:
    def __init__(self, photographers: dict[UUID, FakePhotographer]) -> None:
        self._photographers = photographers
        self._locks: dict[UUID, asyncio.Lock] = {}
        self.lock_calls: list[UUID] = []

    async def get_by_id(self, photographer_id: UUID) -> FakePhotographer | None:
        await asyncio.sleep(0)
        return self._photographers.get(photographer_id)

    async def get_by_email(self, email: str) -> FakePhotographer | None:
        return next((item for item in self._photographers.values() if item.email == email), None)

    async def create_photographer(self, **fields) -> FakePhotographer:
        photographer = FakePhotographer(id=uuid4(), **fields)
        self._photographers[photographer.id] = photographer
        return photographer

    async def update_photographer(self, photographer: FakePhotographer, **changes) -> FakePhotographer:
        for key, value in changes.items():
            setattr(photographer, key, value)
        return photographer

    async def list_roster(self) -> list[FakePhotographer]:
        await asyncio.sleep(0)
        return list(self._photographers.values())

    async def list_by_ids(self, photographer_ids: list[UUID]) -> list[FakePhotographer]:
        return [self._photographers[item] for item in photographer_ids if item in self._photographers]

    @asynccontextmanager
    async def schedule_lock(self, photographer_id: UUID) -> AsyncIterator[FakePhotographer | None]:
        lock = self._locks.setdefault(photographer_id, asyncio.Lock())
        async with lock:
            self.lock_calls.append(photographer_id)
            await asyncio.sleep(0)
            yield self._photographers.get(photographer_id)


class FakeClientsRepository:
    def __init__(self, clients: dict[UUID, FakeClient]) -> None:
        self._clients = clients

    async def get_by_id(self, client_id: UUID) -> FakeClient | None:
        return self._clients.get(client_id)

    async def create_client(self, **fields) -> FakeClient:
        client = FakeClient(id=uuid4(), **fields)
        self._clients[client.id] = client
        return client

    async def update_client(self, client: FakeClient, **changes) -> FakeClient:
        for key, value in changes.items():
            setattr(client, key, value)
        return client

    async def set_blocked_photographers(self, client: FakeClient, photographer_ids: list[UUID]) -> FakeClient:
        client.blocked_photographer_ids = list(photographer_ids)
        return client


class FakeBookingRepository:
    def __init__(self, bookings: dict[UUID, FakeBooking]) -> None:
        self._bookings = bookings
        self.deleted: list[UUID] = []

    async def create_booking(self, **fields) -> FakeBooking:
        booking = FakeBooking(id=uuid4(), status=BookingStatusEnum.DRAFT, **fields)
        self._bookings[booking.id] = booking
        return booking

    async def get_booking_by_id(self, booking_id: UUID) -> FakeBooking | None:
        await asyncio.sleep(0)
        return self._bookings.get(booking_id)

    async def delete_booking(self, booking: FakeBooking) -> None:
        self._bookings.pop(booking.id, None)
        self.deleted.append(booking.id)

    async def list_bookings(
        self,
        limit: int,
        offset: int,
        client_id: UUID | None = None,
        photographer_id: UUID | None = None,
        day: date | None = None,
        status: BookingStatusEnum | None = None,
    ) -> tuple[list[FakeBooking], int]:
        items = [
            item
            for item in self._bookings.values()
            if (client_id is None or item.client_id == client_id)
            and (photographer_id is None or item.photographer_id == photographer_id)
            and (day is None or item.date == day)
            and (status is None or item.status == status)
        ]
        return items[offset : offset + limit], len(items)

    async def list_busy_bookings(self, photographer_ids: Sequence[UUID], day: date) -> list[FakeBooking]:
        await asyncio.sleep(0)
        return [
            item
            for item in self._bookings.values()
            if item.photographer_id in photographer_ids and item.date == day and item.status in BUSY_BOOKING_STATUSES
        ]

    async def list_confirmed_for_day(self, day: date) -> list[FakeBooking]:
        return [
            item
            for item in self._bookings.values()
            if item.date == day and item.status == BookingStatusEnum.CONFIRMED
        ]

    async def save(self, booking: FakeBooking) -> FakeBooking:
        await asyncio.sleep(0)
        self._bookings[booking.id] = booking
        return booking


class FakeTimeOffRepository:
    def __init__(self, time_offs: list[FakeTimeOff]) -> None:
        self._time_offs = time_offs

    async def create_many(self, rows: Sequence[dict]) -> list[FakeTimeOff]:
        items = [FakeTimeOff(id=uuid4(), **row) for row in rows]
        self._time_offs.extend(items)
        return items

    async def list_between(
        self,
        photographer_ids: Sequence[UUID],
        start_at: datetime,
        end_at: datetime,
    ) -> list[FakeTimeOff]:
        return [
            item
            for item in self._time_offs
            if item.photographer_id in photographer_ids and item.start_at < end_at and item.end_at > start_at
        ]

    async def list_by_block(self, block_id: UUID) -> list[FakeTimeOff]:
        return [item for item in self._time_offs if item.block_id == block_id]

    async def list_for_photographer(
        self,
        photographer_id: UUID,
        from_at: datetime | None,
        limit: int,
        offset: int,
    ) -> tuple[list[FakeTimeOff], int]:
        items = [
            item
            for item in self._time_offs
            if item.photographer_id == photographer_id and (from_at is None or item.end_at > from_at)
        ]
        return items[offset : offset + limit], len(items)

    async def delete_block(self, block_id: UUID) -> int:
        before = len(self._time_offs)
        self._time_offs[:] = [item for item in self._time_offs if item.block_id != block_id]
        return before - len(self._time_offs)


class FakeAuditRepository:
    def __init__(self) -> None:
        self.logs: list[dict] = []
        self.events: list[dict] = []

    async def create_audit_log(self, **fields) -> None:
        self.logs.append(fields)

    async def create_outbox_event(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        payload: dict,
    ) -> None:
        self.events.append(
            {
                "aggregate_type": aggregate_type,
                "aggregate_id": aggregate_id,
                "event_type": event_type,
                "payload": payload,
            },
        )


class SchedulingWorld:
    """In-memory catalog, roster, clients, bookings and time-off wired into real services."""

    def __init__(self) -> None:
        self.services: dict[str, FakeService] = {}
        self.photographers: dict[UUID, FakePhotographer] = {}
        self.clients: dict[UUID, FakeClient] = {}
        self.bookings: dict[UUID, FakeBooking] = {}
        self.time_offs: list[FakeTimeOff] = []

        self.catalog_repository = FakeCatalogRepository(self.services)
        self.photographers_repository = FakePhotographersRepository(self.photographers)
        self.clients_repository = FakeClientsRepository(self.clients)
        self.booking_repository = FakeBookingRepository(self.bookings)
        self.timeoff_repository = FakeTimeOffRepository(self.time_offs)
        self.audit_repository = FakeAuditRepository()

    def add_service(self, code: str, minutes: int, **flags) -> FakeService:
        service = FakeService(code=code, duration_minutes=minutes, **flags)
        self.services[code] = service
        return service

    def add_photographer(
        self,
        *,
        name: str = "Photographer",
        services: Iterable[str] = ("foto",),
        base: tuple[float, float] = (0.0, 0.0),
        radius_km: float = 20,
        slot_minutes: int = 60,
        availability: dict[str, list[str]] | None = None,
        is_active: bool = True,
    ) -> FakePhotographer:
        photographer = FakePhotographer(
            id=uuid4(),
            name=name,
            services=list(services),
            base_lat=base[0],
            base_lng=base[1],
            radius_km=radius_km,
            slot_minutes=slot_minutes,
            availability=availability if availability is not None else {"monday": ["09:00", "10:00", "11:00"]},
            is_active=is_active,
        )
        self.photographers[photographer.id] = photographer
        return photographer

    def add_client(self, *, location: tuple[float, float] | None = None, blocked: Iterable[UUID] = ()) -> FakeClient:
        client = FakeClient(
            id=uuid4(),
            name="Imobiliaria",
            lat=location[0] if location else None,
            lng=location[1] if location else None,
            blocked_photographer_ids=list(blocked),
        )
        self.clients[client.id] = client
        return client

    def add_booking(
        self,
        client: FakeClient,
        *,
        day: date = MONDAY,
        start: time = time(9),
        minutes: int = 60,
        location: tuple[float, float] = (0.1, 0.1),
        services: Iterable[str] = ("foto",),
        photographer: FakePhotographer | None = None,
        status: BookingStatusEnum = BookingStatusEnum.DRAFT,
    ) -> FakeBooking:
        end = None
        if photographer is not None:
            end = (datetime.combine(day, start) + timedelta(minutes=minutes)).time()
        booking = FakeBooking(
            id=uuid4(),
            client_id=client.id,
            service_ids=list(services),
            required_minutes=minutes,
            lat=location[0],
            lng=location[1],
            date=day,
            start_time=start,
            end_time=end,
            photographer_id=photographer.id if photographer else None,
            status=status,
        )
        self.bookings[booking.id] = booking
        return booking

    def add_time_off(self, photographer: FakePhotographer, start: datetime, end: datetime) -> FakeTimeOff:
        time_off = FakeTimeOff(
            id=uuid4(),
            photographer_id=photographer.id,
            start_at=start.replace(tzinfo=TZ),
            end_at=end.replace(tzinfo=TZ),
            block_id=uuid4(),
        )
        self.time_offs.append(time_off)
        return time_off

    def matching_service(self, **options) -> MatchingService:
        return MatchingService(
            catalog_service=CatalogService(self.catalog_repository),
            clients_repository=self.clients_repository,
            booking_repository=self.booking_repository,
            roster_loader=RosterLoader(
                self.photographers_repository,
                self.booking_repository,
                self.timeoff_repository,
                TZ,
            ),
            tz=TZ,
            **options,
        )

    def booking_service(self) -> BookingService:
        return BookingService(
            booking_repository=self.booking_repository,
            photographers_repository=self.photographers_repository,
            clients_repository=self.clients_repository,
            catalog_service=CatalogService(self.catalog_repository),
            matching_service=self.matching_service(),
            conflict_guard=ConflictGuard(LiveScheduleSource(self.booking_repository, self.timeoff_repository, TZ)),
            audit_repository=self.audit_repository,
            tz=TZ,
        )

    def timeoff_service(self) -> TimeOffService:
        return TimeOffService(
            self.timeoff_repository,
            self.photographers_repository,
            LiveScheduleSource(self.booking_repository, self.timeoff_repository, TZ),
            TZ,
        )

    def photographers_service(self) -> PhotographersService:
        return PhotographersService(self.photographers_repository, self.catalog_repository)

    def clients_service(self) -> ClientsService:
        return ClientsService(self.clients_repository, self.photographers_repository)


@pytest.fixture()
def world() -> SchedulingWorld:
    scheduling_world = SchedulingWorld()
    scheduling_world.add_service("foto", 60)
    scheduling_world.add_service("video", 30)
    scheduling_world.add_service("travel_fee", 0, is_fee_only=True)
    scheduling_world.add_service("key_pickup", 0, is_fee_only=True, uses_client_location=True)
    return scheduling_world
