"""Photographers repository layer."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.photographers.models import Photographer


class PhotographersRepository:
    """DB operations for photographers domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_photographer(self, **fields) -> Photographer:
        photographer = Photographer(**fields)
        self.session.add(photographer)
        await self.session.flush()
        return photographer

    async def get_by_id(self, photographer_id: UUID) -> Photographer | None:
        stmt = select(Photographer).where(Photographer.id == photographer_id)
        return await self.session.scalar(stmt)

    async def get_by_email(self, email: str) -> Photographer | None:
        stmt = select(Photographer).where(Photographer.email == email)
        return await self.session.scalar(stmt)

    async def list_photographers(
        self,
        active_only: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[Photographer], int]:
        base_stmt: Select[tuple[Photographer]] = select(Photographer)
        if active_only:
            base_stmt = base_stmt.where(Photographer.is_active.is_(True))

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(Photographer.name.asc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def list_roster(self) -> list[Photographer]:
        """Full roster in a stable order; the eligibility filter applies the active flag itself."""
        stmt = select(Photographer).order_by(Photographer.created_at.asc(), Photographer.id.asc())
        return list((await self.session.scalars(stmt)).all())

    async def list_by_ids(self, photographer_ids: list[UUID]) -> list[Photographer]:
        if not photographer_ids:
            return []
        stmt = select(Photographer).where(Photographer.id.in_(photographer_ids))
        return list((await self.session.scalars(stmt)).all())

    @asynccontextmanager
    async def schedule_lock(self, photographer_id: UUID) -> AsyncIterator[Photographer | None]:
        """Row-lock the photographer so slot claims for it serialize.

        The lock lives until the surrounding transaction commits or rolls back;
        everything written inside the block is flushed before it exits.
        """
        stmt = select(Photographer).where(Photographer.id == photographer_id).with_for_update()
        photographer = await self.session.scalar(stmt)
        yield photographer
        await self.session.flush()

    async def update_photographer(self, photographer: Photographer, **changes) -> Photographer:
        for key, value in changes.items():
            if value is not None:
                setattr(photographer, key, value)
        await self.session.flush()
        return photographer
