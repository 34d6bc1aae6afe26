"""Time-off business logic layer."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from uuid import UUID, uuid4
from zoneinfo import ZoneInfo

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import Capability
from app.core.permissions import Actor, ensure_photographer_scope, require_capability
from app.modules.booking.repository import BookingRepository
from app.modules.matching.conflicts import ScheduleSource, find_conflicts
from app.modules.matching.domain import TimeRange
from app.modules.matching.snapshots import LiveScheduleSource
from app.modules.photographers.models import Photographer
from app.modules.photographers.repository import PhotographersRepository
from app.modules.timeoff.models import TimeOff
from app.modules.timeoff.repository import TimeOffRepository
from app.modules.timeoff.schemas import TimeOffCreate, TimeOffSlotsCreate
from app.shared.exceptions import BusinessRuleException, NotFoundException, SlotConflictException
from app.shared.utils import local_to_utc, parse_hhmm, to_local_naive, utc_now

logger = logging.getLogger(__name__)


class TimeOffService:
    """Time-off domain service.

    Blocks are written under the photographer's schedule lock and refused when
    they overlap a confirmed or completed booking.
    """

    def __init__(
        self,
        repository: TimeOffRepository,
        photographers_repository: PhotographersRepository,
        schedule_source: ScheduleSource,
        tz: ZoneInfo,
    ) -> None:
        self.repository = repository
        self.photographers_repository = photographers_repository
        self.schedule_source = schedule_source
        self.tz = tz

    async def _authorize(self, actor: Actor, photographer_id: UUID) -> Photographer:
        require_capability(actor, Capability.MANAGE_TIME_OFF)
        ensure_photographer_scope(actor, photographer_id)
        photographer = await self.photographers_repository.get_by_id(photographer_id)
        if photographer is None:
            raise NotFoundException("Photographer not found")
        return photographer

    async def create_time_off(self, payload: TimeOffCreate, actor: Actor) -> list[TimeOff]:
        """Block an absolute range under a fresh block id."""
        photographer = await self._authorize(actor, payload.photographer_id)
        block_id = uuid4()
        items = await self._write_block(
            photographer.id,
            [
                {
                    "photographer_id": photographer.id,
                    "start_at": local_to_utc(payload.start_at, self.tz),
                    "end_at": local_to_utc(payload.end_at, self.tz),
                    "block_id": block_id,
                    "notes": payload.notes,
                    "created_by_id": actor.id,
                },
            ],
        )
        logger.info("Time-off block %s created for photographer %s by %s", block_id, photographer.id, actor.id)
        return items

    async def block_slots(self, payload: TimeOffSlotsCreate, actor: Actor) -> list[TimeOff]:
        """Block several template slots of one day; each slot is one row sharing the block id."""
        photographer = await self._authorize(actor, payload.photographer_id)
        block_id = uuid4()
        rows = []
        for item in payload.slots:
            start = datetime.combine(payload.date, parse_hhmm(item))
            end = start + timedelta(minutes=photographer.slot_minutes)
            if end.date() != payload.date:
                raise BusinessRuleException(f"Slot {item} runs past midnight")
            rows.append(
                {
                    "photographer_id": photographer.id,
                    "start_at": local_to_utc(start, self.tz),
                    "end_at": local_to_utc(end, self.tz),
                    "block_id": block_id,
                    "notes": payload.notes,
                    "created_by_id": actor.id,
                },
            )
        items = await self._write_block(photographer.id, rows)
        logger.info(
            "Time-off block %s (%d slot(s) on %s) created for photographer %s",
            block_id,
            len(items),
            payload.date.isoformat(),
            photographer.id,
        )
        return items

    async def _write_block(self, photographer_id: UUID, rows: list[dict]) -> list[TimeOff]:
        async with self.photographers_repository.schedule_lock(photographer_id):
            for row in rows:
                await self._assert_no_booking_overlap(photographer_id, row["start_at"], row["end_at"])
            return await self.repository.create_many(rows)

    async def _assert_no_booking_overlap(self, photographer_id: UUID, start_at: datetime, end_at: datetime) -> None:
        """Reject a block covering any confirmed or completed booking, day by day in local time."""
        blocked = TimeRange(to_local_naive(start_at, self.tz), to_local_naive(end_at, self.tz))
        day = blocked.start.date()
        last_day = (blocked.end - timedelta(microseconds=1)).date()
        while day <= last_day:
            bookings = await self.schedule_source.list_busy_bookings(photographer_id, day)
            conflicts = find_conflicts(blocked, bookings, ())
            if conflicts:
                first = conflicts[0]
                logger.warning(
                    "Time-off for photographer %s rejected: overlaps booking %s-%s",
                    photographer_id,
                    first.start.strftime("%Y-%m-%d %H:%M"),
                    first.end.strftime("%H:%M"),
                )
                raise SlotConflictException(
                    f"Photographer has a booking on {first.start:%Y-%m-%d} from "
                    f"{first.start:%H:%M} to {first.end:%H:%M}; reassign or cancel it first",
                )
            day += timedelta(days=1)

    async def delete_block(self, block_id: UUID, actor: Actor) -> int:
        """Delete every row of a block; editing a block means delete then recreate."""
        items = await self.repository.list_by_block(block_id)
        if not items:
            raise NotFoundException("Time-off block not found")
        await self._authorize(actor, items[0].photographer_id)
        deleted = await self.repository.delete_block(block_id)
        logger.info("Time-off block %s deleted by %s", block_id, actor.id)
        return deleted

    async def list_time_offs(
        self,
        photographer_id: UUID,
        actor: Actor,
        include_past: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[TimeOff], int]:
        await self._authorize(actor, photographer_id)
        from_at = None if include_past else utc_now()
        return await self.repository.list_for_photographer(photographer_id, from_at, limit, offset)


async def get_timeoff_service(session: AsyncSession = Depends(get_db_session)) -> TimeOffService:
    """Dependency provider for time-off service."""
    tz = get_settings().timezone
    timeoff_repository = TimeOffRepository(session)
    return TimeOffService(
        timeoff_repository,
        PhotographersRepository(session),
        LiveScheduleSource(BookingRepository(session), timeoff_repository, tz),
        tz,
    )
