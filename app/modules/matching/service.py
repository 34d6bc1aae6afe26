"""Matching business logic layer.

Loads snapshots, hands them to the pure engine and shapes the results for the
API. Role checks happen here; the engine never sees an actor.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import BookingStatusEnum, Capability
from app.core.metrics import record_eligibility
from app.core.permissions import Actor, ensure_client_scope, require_capability
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.catalog.repository import CatalogRepository
from app.modules.catalog.service import CatalogService, ServiceRequirements
from app.modules.clients.models import Client
from app.modules.clients.repository import ClientsRepository
from app.modules.matching.domain import (
    BookingRequest,
    ClientSnapshot,
    EligiblePhotographer,
    OptimizationSuggestion,
    PhotographerSnapshot,
)
from app.modules.matching.eligibility import find_eligible
from app.modules.matching.geo import GeoPoint, validate_point
from app.modules.matching.ranking import rank
from app.modules.matching.routes import AssignedBooking, find_route_optimizations
from app.modules.matching.schemas import (
    AvailableStartTime,
    AvailableStartTimesRead,
    AvailableTimesRequest,
    FlashRequest,
    FlashSuggestionRead,
    MatchRequest,
    SuggestedPhotographer,
    SuggestionsRead,
)
from app.modules.matching.snapshots import RosterLoader, client_snapshot, search_center
from app.modules.photographers.repository import PhotographersRepository
from app.modules.timeoff.repository import TimeOffRepository
from app.shared.exceptions import ConflictException, NoEligiblePhotographerException, NotFoundException
from app.shared.utils import to_local_naive, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchContext:
    """Client, resolved services and search center shared by every slot evaluated."""

    client: ClientSnapshot
    requirements: ServiceRequirements
    center: GeoPoint
    required_minutes: int

    def request(self, day: date, start_time: time, excluding_booking_id: UUID | None = None) -> BookingRequest:
        return BookingRequest(
            client_id=self.client.id,
            service_ids=self.requirements.essential_codes,
            location=self.center,
            day=day,
            start_time=start_time,
            required_minutes=self.required_minutes,
            excluding_booking_id=excluding_booking_id,
        )


def _suggested(item: EligiblePhotographer) -> SuggestedPhotographer:
    return SuggestedPhotographer(
        photographer_id=item.photographer.id,
        name=item.photographer.name,
        distance_km=round(item.distance_km, 3),
        daily_load=item.daily_load,
    )


def candidate_starts(
    roster: Sequence[PhotographerSnapshot],
    day: date,
    required_minutes: int,
    earliest: time | None = None,
) -> list[time]:
    """Template starts of active photographers on ``day`` that leave room for the shoot before midnight."""
    starts: set[time] = set()
    for photographer in roster:
        if not photographer.is_active:
            continue
        for start in photographer.template_for(day):
            if earliest is not None and start < earliest:
                continue
            if (datetime.combine(day, start) + timedelta(minutes=required_minutes)).date() != day:
                continue
            starts.add(start)
    return sorted(starts)


class MatchingService:
    """Suggestions, open start times, flash bookings and route swaps."""

    def __init__(
        self,
        catalog_service: CatalogService,
        clients_repository: ClientsRepository,
        booking_repository: BookingRepository,
        roster_loader: RosterLoader,
        tz: ZoneInfo,
        max_suggestions: int = 20,
        flash_lead_minutes: int = 60,
        min_saving_km: float = 5.0,
    ) -> None:
        self.catalog_service = catalog_service
        self.clients_repository = clients_repository
        self.booking_repository = booking_repository
        self.roster_loader = roster_loader
        self.tz = tz
        self.max_suggestions = max_suggestions
        self.flash_lead_minutes = flash_lead_minutes
        self.min_saving_km = min_saving_km

    async def _get_client(self, client_id: UUID) -> Client:
        client = await self.clients_repository.get_by_id(client_id)
        if client is None:
            raise NotFoundException("Client not found")
        return client

    async def _get_booking(self, booking_id: UUID) -> Booking:
        booking = await self.booking_repository.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        return booking

    async def _context(
        self,
        client: Client,
        service_ids: Collection[str],
        address: GeoPoint,
        required_minutes: int | None = None,
    ) -> MatchContext:
        requirements = await self.catalog_service.resolve_requirements(service_ids)
        snapshot = client_snapshot(client)
        return MatchContext(
            client=snapshot,
            requirements=requirements,
            center=search_center(validate_point(address), requirements, snapshot),
            required_minutes=required_minutes or requirements.required_minutes,
        )

    def _rank(
        self,
        context: MatchContext,
        roster: Sequence[PhotographerSnapshot],
        day: date,
        start_time: time,
        *,
        excluding_booking_id: UUID | None = None,
        exclude_photographer_ids: Collection[UUID] = (),
        record: bool = True,
    ) -> list[EligiblePhotographer]:
        eligible = find_eligible(
            context.request(day, start_time, excluding_booking_id),
            roster,
            context.client,
            exclude_photographer_ids=exclude_photographer_ids,
        )
        if record:
            record_eligibility(len(eligible))
        return rank(eligible)

    def _suggestions(self, context: MatchContext, ranked: list[EligiblePhotographer]) -> SuggestionsRead:
        return SuggestionsRead(
            has_coverage=bool(ranked),
            required_minutes=context.required_minutes,
            search_lat=context.center.lat,
            search_lng=context.center.lng,
            items=[_suggested(item) for item in ranked[: self.max_suggestions]],
        )

    async def _rank_booking(
        self,
        booking: Booking,
        *,
        day: date | None = None,
        start_time: time | None = None,
        exclude_photographer_ids: Collection[UUID] = (),
    ) -> tuple[MatchContext, list[EligiblePhotographer]]:
        client = await self._get_client(booking.client_id)
        context = await self._context(
            client,
            booking.service_ids,
            GeoPoint(booking.lat, booking.lng),
            required_minutes=booking.required_minutes,
        )
        target_day = day or booking.date
        roster = await self.roster_loader.load(target_day)
        ranked = self._rank(
            context,
            roster,
            target_day,
            start_time or booking.start_time,
            excluding_booking_id=booking.id,
            exclude_photographer_ids=exclude_photographer_ids,
        )
        return context, ranked

    async def candidates_for_booking(
        self,
        booking: Booking,
        *,
        day: date | None = None,
        start_time: time | None = None,
        exclude_photographer_ids: Collection[UUID] = (),
    ) -> list[EligiblePhotographer]:
        """Ranked photographers for ``booking``, optionally at another date/time.

        The booking's own calendar entry is ignored so that moving it never
        collides with itself.
        """
        _, ranked = await self._rank_booking(
            booking,
            day=day,
            start_time=start_time,
            exclude_photographer_ids=exclude_photographer_ids,
        )
        return ranked

    async def suggest(self, payload: MatchRequest, actor: Actor) -> SuggestionsRead:
        """Ranked photographers for an ad-hoc request."""
        require_capability(actor, Capability.SCHEDULE_BOOKINGS)
        ensure_client_scope(actor, payload.client_id)
        client = await self._get_client(payload.client_id)
        context = await self._context(client, payload.service_ids, GeoPoint(payload.lat, payload.lng))
        roster = await self.roster_loader.load(payload.date)
        return self._suggestions(context, self._rank(context, roster, payload.date, payload.start_time))

    async def suggest_for_booking(self, booking_id: UUID, actor: Actor) -> SuggestionsRead:
        require_capability(actor, Capability.SCHEDULE_BOOKINGS)
        booking = await self._get_booking(booking_id)
        ensure_client_scope(actor, booking.client_id)
        if booking.status != BookingStatusEnum.DRAFT:
            raise ConflictException("Suggestions are only available for draft bookings")
        context, ranked = await self._rank_booking(booking)
        return self._suggestions(context, ranked)

    async def swap_candidates(self, booking_id: UUID, actor: Actor) -> SuggestionsRead:
        """Photographers who could take over a confirmed booking, current one excluded."""
        require_capability(actor, Capability.SCHEDULE_ANY_CLIENT)
        booking = await self._get_booking(booking_id)
        if booking.status != BookingStatusEnum.CONFIRMED:
            raise ConflictException("Only confirmed bookings can be swapped")
        context, ranked = await self._rank_booking(booking, exclude_photographer_ids=[booking.photographer_id])
        return self._suggestions(context, ranked)

    async def available_start_times(self, payload: AvailableTimesRequest, actor: Actor) -> AvailableStartTimesRead:
        """Start times on a date at which at least one photographer can take the shoot."""
        require_capability(actor, Capability.SCHEDULE_BOOKINGS)
        ensure_client_scope(actor, payload.client_id)
        client = await self._get_client(payload.client_id)
        context = await self._context(client, payload.service_ids, GeoPoint(payload.lat, payload.lng))
        roster = await self.roster_loader.load(payload.date)
        now_local = to_local_naive(utc_now(), self.tz)

        items = []
        for start in candidate_starts(roster, payload.date, context.required_minutes):
            if datetime.combine(payload.date, start) <= now_local:
                continue
            ranked = self._rank(context, roster, payload.date, start, record=False)
            if ranked:
                items.append(AvailableStartTime(start_time=start, photographer_count=len(ranked)))
        return AvailableStartTimesRead(date=payload.date, required_minutes=context.required_minutes, items=items)

    async def nearest_available(self, payload: FlashRequest, actor: Actor) -> FlashSuggestionRead:
        """Earliest slot today, at least the configured lead time from now, and its best photographer."""
        require_capability(actor, Capability.SCHEDULE_BOOKINGS)
        ensure_client_scope(actor, payload.client_id)
        client = await self._get_client(payload.client_id)
        context = await self._context(client, payload.service_ids, GeoPoint(payload.lat, payload.lng))

        now_local = to_local_naive(utc_now(), self.tz)
        earliest = now_local + timedelta(minutes=self.flash_lead_minutes)
        today = now_local.date()
        if earliest.date() == today:
            roster = await self.roster_loader.load(today)
            for start in candidate_starts(roster, today, context.required_minutes, earliest.time()):
                ranked = self._rank(context, roster, today, start, record=False)
                if ranked:
                    record_eligibility(len(ranked))
                    logger.info("Flash booking for client %s: %s at %s", client.id, ranked[0].photographer.id, start)
                    return FlashSuggestionRead(date=today, start_time=start, photographer=_suggested(ranked[0]))

        record_eligibility(0)
        raise NoEligiblePhotographerException("No photographer is available for the rest of today")

    async def route_optimizations(self, day: date, actor: Actor) -> list[OptimizationSuggestion]:
        """Photographer swaps between confirmed bookings on ``day`` that cut travel."""
        require_capability(actor, Capability.OPTIMIZE_ROUTES)
        bookings = await self.booking_repository.list_confirmed_for_day(day)
        if len(bookings) < 2:
            return []

        fee_only = await self.catalog_service.fee_only_codes({code for item in bookings for code in item.service_ids})
        photographer_ids = sorted({item.photographer_id for item in bookings}, key=str)
        roster = await self.roster_loader.load(day, photographer_ids=photographer_ids)

        assigned = [
            AssignedBooking(
                booking_id=item.id,
                photographer_id=item.photographer_id,
                start_time=item.start_time,
                location=GeoPoint(item.lat, item.lng),
                service_ids=frozenset(item.service_ids) - fee_only,
            )
            for item in bookings
        ]
        suggestions = find_route_optimizations(assigned, {item.id: item for item in roster}, self.min_saving_km)
        logger.info("Route optimization for %s: %d suggestion(s)", day.isoformat(), len(suggestions))
        return suggestions


def build_matching_service(session: AsyncSession) -> MatchingService:
    settings = get_settings()
    booking_repository = BookingRepository(session)
    return MatchingService(
        catalog_service=CatalogService(CatalogRepository(session)),
        clients_repository=ClientsRepository(session),
        booking_repository=booking_repository,
        roster_loader=RosterLoader(
            PhotographersRepository(session),
            booking_repository,
            TimeOffRepository(session),
            settings.timezone,
        ),
        tz=settings.timezone,
        max_suggestions=settings.max_suggestions,
        flash_lead_minutes=settings.flash_booking_lead_minutes,
        min_saving_km=settings.route_optimization_min_saving_km,
    )


async def get_matching_service(session: AsyncSession = Depends(get_db_session)) -> MatchingService:
    """Dependency provider for matching service."""
    return build_matching_service(session)
