"""Catalog repository layer."""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.catalog.models import ServiceOffering


class CatalogRepository:
    """DB operations for the service catalog."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_service(self, **fields) -> ServiceOffering:
        service = ServiceOffering(**fields)
        self.session.add(service)
        await self.session.flush()
        return service

    async def get_by_code(self, code: str) -> ServiceOffering | None:
        stmt = select(ServiceOffering).where(ServiceOffering.code == code)
        return await self.session.scalar(stmt)

    async def list_by_codes(self, codes: Collection[str]) -> list[ServiceOffering]:
        if not codes:
            return []
        stmt = select(ServiceOffering).where(ServiceOffering.code.in_(list(codes)))
        return list((await self.session.scalars(stmt)).all())

    async def list_services(self, active_only: bool, limit: int, offset: int) -> tuple[list[ServiceOffering], int]:
        base_stmt: Select[tuple[ServiceOffering]] = select(ServiceOffering)
        if active_only:
            base_stmt = base_stmt.where(ServiceOffering.is_active.is_(True))

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(ServiceOffering.name.asc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def update_service(self, service: ServiceOffering, **changes) -> ServiceOffering:
        for key, value in changes.items():
            if value is not None:
                setattr(service, key, value)
        await self.session.flush()
        return service
