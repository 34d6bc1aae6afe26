"""Booking repository layer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import BUSY_BOOKING_STATUSES, BookingStatusEnum
from app.modules.booking.models import Booking


class BookingRepository:
    """DB operations for booking domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_booking(self, **fields) -> Booking:
        booking = Booking(status=BookingStatusEnum.DRAFT, **fields)
        self.session.add(booking)
        await self.session.flush()
        return booking

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        stmt = select(Booking).where(Booking.id == booking_id)
        return await self.session.scalar(stmt)

    async def delete_booking(self, booking: Booking) -> None:
        await self.session.delete(booking)
        await self.session.flush()

    async def list_bookings(
        self,
        limit: int,
        offset: int,
        client_id: UUID | None = None,
        photographer_id: UUID | None = None,
        day: date | None = None,
        status: BookingStatusEnum | None = None,
    ) -> tuple[list[Booking], int]:
        base_stmt: Select[tuple[Booking]] = select(Booking)
        if client_id is not None:
            base_stmt = base_stmt.where(Booking.client_id == client_id)
        if photographer_id is not None:
            base_stmt = base_stmt.where(Booking.photographer_id == photographer_id)
        if day is not None:
            base_stmt = base_stmt.where(Booking.date == day)
        if status is not None:
            base_stmt = base_stmt.where(Booking.status == status)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = (
            base_stmt.order_by(Booking.date.desc().nulls_last(), Booking.start_time.asc(), Booking.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def list_busy_bookings(self, photographer_ids: Sequence[UUID], day: date) -> list[Booking]:
        """Confirmed/completed bookings of the given photographers on ``day``."""
        if not photographer_ids:
            return []
        stmt = (
            select(Booking)
            .where(
                Booking.photographer_id.in_(list(photographer_ids)),
                Booking.date == day,
                Booking.status.in_(list(BUSY_BOOKING_STATUSES)),
            )
            .order_by(Booking.start_time.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_confirmed_for_day(self, day: date) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.date == day, Booking.status == BookingStatusEnum.CONFIRMED)
            .order_by(Booking.start_time.asc(), Booking.id.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def save(self, booking: Booking) -> Booking:
        await self.session.flush()
        return booking
