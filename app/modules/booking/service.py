"""Booking business logic layer."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from uuid import UUID
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import BookingStatusEnum, Capability, RoleEnum
from app.core.metrics import record_slot_conflict
from app.core.permissions import (
    Actor,
    ensure_booking_visible,
    ensure_client_scope,
    ensure_photographer_scope,
    require_capability,
)
from app.modules.audit.repository import AuditRepository
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.booking.schemas import (
    BookingCancelRequest,
    BookingConfirmRequest,
    BookingDraftCreate,
    BookingReassignRequest,
    BookingRescheduleRequest,
)
from app.modules.catalog.repository import CatalogRepository
from app.modules.catalog.service import CatalogService
from app.modules.clients.repository import ClientsRepository
from app.modules.matching.availability import requested_range
from app.modules.matching.conflicts import ConflictGuard
from app.modules.matching.geo import GeoPoint, validate_point
from app.modules.matching.service import MatchingService, build_matching_service
from app.modules.matching.snapshots import LiveScheduleSource
from app.modules.photographers.repository import PhotographersRepository
from app.modules.timeoff.repository import TimeOffRepository
from app.shared.exceptions import (
    BusinessRuleException,
    ConflictException,
    NoEligiblePhotographerException,
    NotFoundException,
    SlotConflictException,
)
from app.shared.utils import to_local_naive, utc_now

logger = logging.getLogger(__name__)


class BookingService:
    """Booking lifecycle: draft, confirm/auto-assign, reschedule, reassign, cancel, complete.

    Every write that claims a slot follows the same order inside the request
    transaction: lock the photographer row, run the conflict guard against live
    data, write. Eligibility is computed before the lock from snapshots.
    """

    def __init__(
        self,
        booking_repository: BookingRepository,
        photographers_repository: PhotographersRepository,
        clients_repository: ClientsRepository,
        catalog_service: CatalogService,
        matching_service: MatchingService,
        conflict_guard: ConflictGuard,
        audit_repository: AuditRepository,
        tz: ZoneInfo,
    ) -> None:
        self.booking_repository = booking_repository
        self.photographers_repository = photographers_repository
        self.clients_repository = clients_repository
        self.catalog_service = catalog_service
        self.matching_service = matching_service
        self.conflict_guard = conflict_guard
        self.audit_repository = audit_repository
        self.tz = tz

    async def _get_booking(self, booking_id: UUID) -> Booking:
        booking = await self.booking_repository.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        return booking

    def _ensure_can_schedule(self, booking: Booking, actor: Actor) -> None:
        require_capability(actor, Capability.SCHEDULE_BOOKINGS)
        ensure_client_scope(actor, booking.client_id)

    def _ensure_not_past(self, day: date, start_time: time) -> None:
        if datetime.combine(day, start_time) <= to_local_naive(utc_now(), self.tz):
            raise BusinessRuleException("Cannot book a time in the past")

    async def _record(self, booking: Booking, event_type: str, actor: Actor, **extra) -> None:
        """Audit log plus outbox event, in the transaction of the change."""
        payload = {
            "booking_id": str(booking.id),
            "client_id": str(booking.client_id),
            "photographer_id": str(booking.photographer_id) if booking.photographer_id else None,
            "date": booking.date.isoformat() if booking.date else None,
            "start_time": booking.start_time.strftime("%H:%M") if booking.start_time else None,
            **extra,
        }
        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            actor_role=actor.role,
            action=event_type,
            entity_type="booking",
            entity_id=str(booking.id),
            payload=payload,
        )
        await self.audit_repository.create_outbox_event(
            aggregate_type="booking",
            aggregate_id=str(booking.id),
            event_type=event_type,
            payload=payload,
        )

    async def _claim_slot(
        self,
        booking: Booking,
        photographer_id: UUID,
        day: date,
        start_time: time,
        operation: str,
    ) -> Booking:
        """Lock the photographer, re-check live calendar state and write the confirmed slot."""
        async with self.photographers_repository.schedule_lock(photographer_id) as photographer:
            if photographer is None:
                raise NotFoundException("Photographer not found")
            try:
                claimed = await self.conflict_guard.assert_no_conflict(
                    photographer_id,
                    day,
                    start_time,
                    booking.required_minutes,
                    excluding_booking_id=booking.id,
                )
            except SlotConflictException:
                record_slot_conflict(operation)
                raise

            booking.photographer_id = photographer_id
            booking.date = day
            booking.start_time = claimed.start.time()
            booking.end_time = claimed.end.time()
            booking.status = BookingStatusEnum.CONFIRMED
            await self.booking_repository.save(booking)
        return booking

    async def create_draft(self, payload: BookingDraftCreate, actor: Actor) -> Booking:
        """Create an unassigned draft; nothing is reserved yet."""
        require_capability(actor, Capability.SCHEDULE_BOOKINGS)
        ensure_client_scope(actor, payload.client_id)
        if await self.clients_repository.get_by_id(payload.client_id) is None:
            raise NotFoundException("Client not found")

        validate_point(GeoPoint(payload.lat, payload.lng))
        requirements = await self.catalog_service.resolve_requirements(payload.service_ids)
        requested_range(payload.date, payload.start_time, requirements.required_minutes)
        self._ensure_not_past(payload.date, payload.start_time)

        fields = payload.model_dump()
        fields["service_ids"] = sorted(set(payload.service_ids))
        booking = await self.booking_repository.create_booking(
            **fields,
            required_minutes=requirements.required_minutes,
            created_by_id=actor.id,
        )
        logger.info("Draft booking %s created for client %s", booking.id, booking.client_id)
        return booking

    async def delete_draft(self, booking_id: UUID, actor: Actor) -> None:
        """Drafts hold no slot, so deleting one has no side effects."""
        booking = await self._get_booking(booking_id)
        self._ensure_can_schedule(booking, actor)
        if booking.status != BookingStatusEnum.DRAFT:
            raise ConflictException("Only draft bookings can be deleted; cancel it instead")
        await self.booking_repository.delete_booking(booking)

    async def confirm_booking(self, booking_id: UUID, payload: BookingConfirmRequest, actor: Actor) -> Booking:
        """Confirm a draft with a photographer picked from the suggestions."""
        booking = await self._get_booking(booking_id)
        self._ensure_can_schedule(booking, actor)
        if booking.status != BookingStatusEnum.DRAFT:
            raise ConflictException("Only draft bookings can be confirmed")
        self._ensure_not_past(booking.date, booking.start_time)

        candidates = await self.matching_service.candidates_for_booking(booking)
        if payload.photographer_id not in {item.photographer.id for item in candidates}:
            raise BusinessRuleException("Photographer is not eligible for this booking")

        return await self._confirm(booking, payload.photographer_id, actor, "confirm")

    async def auto_assign(self, booking_id: UUID, actor: Actor) -> Booking:
        """Confirm a draft with the top-ranked eligible photographer.

        A conflict on the chosen photographer is raised to the caller, who
        may retry; no other candidate is tried silently.
        """
        booking = await self._get_booking(booking_id)
        self._ensure_can_schedule(booking, actor)
        if booking.status != BookingStatusEnum.DRAFT:
            raise ConflictException("Only draft bookings can be assigned")
        self._ensure_not_past(booking.date, booking.start_time)

        candidates = await self.matching_service.candidates_for_booking(booking)
        if not candidates:
            raise NoEligiblePhotographerException(
                f"No photographer covers this booking on {booking.date.isoformat()} at {booking.start_time:%H:%M}",
            )

        best = candidates[0]
        logger.info(
            "Auto-assigning booking %s to %s (%.2f km, load %d)",
            booking.id,
            best.photographer.id,
            best.distance_km,
            best.daily_load,
        )
        return await self._confirm(booking, best.photographer.id, actor, "auto_assign")

    async def _confirm(self, booking: Booking, photographer_id: UUID, actor: Actor, operation: str) -> Booking:
        await self._claim_slot(booking, photographer_id, booking.date, booking.start_time, operation)
        booking.confirmed_at = utc_now()
        await self.booking_repository.save(booking)
        await self._record(booking, "booking.confirmed", actor)
        return booking

    async def reschedule_booking(
        self,
        booking_id: UUID,
        payload: BookingRescheduleRequest,
        actor: Actor,
    ) -> Booking:
        """Move a confirmed booking, keeping its photographer."""
        booking = await self._get_booking(booking_id)
        self._ensure_can_schedule(booking, actor)
        if booking.status != BookingStatusEnum.CONFIRMED:
            raise ConflictException("Only confirmed bookings can be rescheduled")
        self._ensure_not_past(payload.date, payload.start_time)

        candidates = await self.matching_service.candidates_for_booking(
            booking,
            day=payload.date,
            start_time=payload.start_time,
        )
        if booking.photographer_id not in {item.photographer.id for item in candidates}:
            raise BusinessRuleException("Photographer is not available at the requested date and time")

        previous_date, previous_start = booking.date, booking.start_time
        await self._claim_slot(booking, booking.photographer_id, payload.date, payload.start_time, "reschedule")
        booking.rescheduled_from_date = previous_date
        booking.rescheduled_from_start_time = previous_start
        await self.booking_repository.save(booking)
        await self._record(
            booking,
            "booking.rescheduled",
            actor,
            previous_date=previous_date.isoformat(),
            previous_start_time=previous_start.strftime("%H:%M"),
        )
        return booking

    async def reassign_booking(self, booking_id: UUID, payload: BookingReassignRequest, actor: Actor) -> Booking:
        """Hand a confirmed booking to another eligible photographer."""
        require_capability(actor, Capability.SCHEDULE_ANY_CLIENT)
        booking = await self._get_booking(booking_id)
        if booking.status != BookingStatusEnum.CONFIRMED:
            raise ConflictException("Only confirmed bookings can be reassigned")
        if booking.photographer_id == payload.photographer_id:
            raise BusinessRuleException("Booking is already assigned to this photographer")

        candidates = await self.matching_service.candidates_for_booking(
            booking,
            exclude_photographer_ids=[booking.photographer_id],
        )
        if payload.photographer_id not in {item.photographer.id for item in candidates}:
            raise BusinessRuleException("Photographer is not eligible for this booking")

        previous_photographer_id = booking.photographer_id
        await self._claim_slot(booking, payload.photographer_id, booking.date, booking.start_time, "reassign")
        await self._record(
            booking,
            "booking.reassigned",
            actor,
            previous_photographer_id=str(previous_photographer_id),
        )
        return booking

    async def cancel_booking(self, booking_id: UUID, payload: BookingCancelRequest, actor: Actor) -> Booking:
        """Cancel a confirmed booking; the slot is free again once this commits."""
        booking = await self._get_booking(booking_id)
        self._ensure_can_schedule(booking, actor)
        if booking.status != BookingStatusEnum.CONFIRMED:
            raise ConflictException(f"Booking in status '{booking.status}' cannot be cancelled")

        booking.status = BookingStatusEnum.CANCELLED
        booking.cancelled_at = utc_now()
        booking.cancellation_reason = payload.reason
        await self.booking_repository.save(booking)
        await self._record(booking, "booking.cancelled", actor, reason=payload.reason)
        logger.info("Booking %s cancelled by %s", booking.id, actor.id)
        return booking

    async def complete_booking(self, booking_id: UUID, actor: Actor) -> Booking:
        """Mark shoot as done; completed bookings keep occupying the calendar."""
        require_capability(actor, Capability.COMPLETE_BOOKINGS)
        booking = await self._get_booking(booking_id)
        ensure_photographer_scope(actor, booking.photographer_id)
        if booking.status != BookingStatusEnum.CONFIRMED:
            raise ConflictException("Only confirmed bookings can be completed")

        booking.status = BookingStatusEnum.COMPLETED
        booking.completed_at = utc_now()
        await self.booking_repository.save(booking)
        await self._record(booking, "booking.completed", actor)
        return booking

    async def get_booking(self, booking_id: UUID, actor: Actor) -> Booking:
        booking = await self._get_booking(booking_id)
        ensure_booking_visible(actor, booking.client_id, booking.photographer_id)
        return booking

    async def list_bookings(
        self,
        actor: Actor,
        limit: int,
        offset: int,
        day: date | None = None,
        status: BookingStatusEnum | None = None,
    ) -> tuple[list[Booking], int]:
        """List bookings visible to actor according to role."""
        filters: dict = {"day": day, "status": status}
        sees_all = actor.can(Capability.VIEW_ALL_BOOKINGS) or actor.can(Capability.SCHEDULE_ANY_CLIENT)
        if not sees_all and actor.role == RoleEnum.PHOTOGRAPHER:
            if actor.photographer_id is None:
                return [], 0
            filters["photographer_id"] = actor.photographer_id
        elif not sees_all:
            if actor.client_id is None:
                return [], 0
            filters["client_id"] = actor.client_id
        return await self.booking_repository.list_bookings(limit, offset, **filters)


async def get_booking_service(session: AsyncSession = Depends(get_db_session)) -> BookingService:
    """Dependency provider for booking service."""
    settings = get_settings()
    booking_repository = BookingRepository(session)
    return BookingService(
        booking_repository=booking_repository,
        photographers_repository=PhotographersRepository(session),
        clients_repository=ClientsRepository(session),
        catalog_service=CatalogService(CatalogRepository(session)),
        matching_service=build_matching_service(session),
        conflict_guard=ConflictGuard(
            LiveScheduleSource(booking_repository, TimeOffRepository(session), settings.timezone),
        ),
        audit_repository=AuditRepository(session),
        tz=settings.timezone,
    )
