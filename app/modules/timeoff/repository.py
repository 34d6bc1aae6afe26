"""Time-off repository layer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.timeoff.models import TimeOff


class TimeOffRepository:
    """DB operations for time-off blocks."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_many(self, rows: Sequence[dict]) -> list[TimeOff]:
        items = [TimeOff(**row) for row in rows]
        self.session.add_all(items)
        await self.session.flush()
        return items

    async def list_between(
        self,
        photographer_ids: Sequence[UUID],
        start_at: datetime,
        end_at: datetime,
    ) -> list[TimeOff]:
        """Time-offs intersecting ``[start_at, end_at)`` for the given photographers."""
        if not photographer_ids:
            return []
        stmt = (
            select(TimeOff)
            .where(
                TimeOff.photographer_id.in_(list(photographer_ids)),
                TimeOff.start_at < end_at,
                TimeOff.end_at > start_at,
            )
            .order_by(TimeOff.start_at.asc())
        )
        return list((await self.session.scalars(stmt)).all())

    async def list_by_block(self, block_id: UUID) -> list[TimeOff]:
        stmt = select(TimeOff).where(TimeOff.block_id == block_id).order_by(TimeOff.start_at.asc())
        return list((await self.session.scalars(stmt)).all())

    async def list_for_photographer(
        self,
        photographer_id: UUID,
        from_at: datetime | None,
        limit: int,
        offset: int,
    ) -> tuple[list[TimeOff], int]:
        base_stmt: Select[tuple[TimeOff]] = select(TimeOff).where(TimeOff.photographer_id == photographer_id)
        if from_at is not None:
            base_stmt = base_stmt.where(TimeOff.end_at > from_at)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(TimeOff.start_at.asc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def delete_block(self, block_id: UUID) -> int:
        result = await self.session.execute(delete(TimeOff).where(TimeOff.block_id == block_id))
        await self.session.flush()
        return int(result.rowcount or 0)
