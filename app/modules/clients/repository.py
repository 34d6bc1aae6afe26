"""Clients repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.clients.models import Client


class ClientsRepository:
    """DB operations for clients domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_client(self, **fields) -> Client:
        client = Client(**fields)
        self.session.add(client)
        await self.session.flush()
        return client

    async def get_by_id(self, client_id: UUID) -> Client | None:
        stmt = select(Client).where(Client.id == client_id)
        return await self.session.scalar(stmt)

    async def list_clients(self, limit: int, offset: int) -> tuple[list[Client], int]:
        base_stmt: Select[tuple[Client]] = select(Client)
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(Client.name.asc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return list(items), total

    async def update_client(self, client: Client, **changes) -> Client:
        for key, value in changes.items():
            if value is not None:
                setattr(client, key, value)
        await self.session.flush()
        return client

    async def set_blocked_photographers(self, client: Client, photographer_ids: list[UUID]) -> Client:
        # Reassign rather than mutate so the ARRAY column is flagged dirty.
        client.blocked_photographer_ids = list(photographer_ids)
        await self.session.flush()
        return client
