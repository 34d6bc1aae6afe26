"""Clients business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import Capability
from app.core.permissions import Actor, ensure_client_scope, require_capability
from app.modules.clients.models import Client
from app.modules.clients.repository import ClientsRepository
from app.modules.clients.schemas import ClientCreate, ClientUpdate
from app.modules.photographers.repository import PhotographersRepository
from app.shared.exceptions import NotFoundException

logger = logging.getLogger(__name__)


class ClientsService:
    """Clients domain service."""

    def __init__(self, repository: ClientsRepository, photographers_repository: PhotographersRepository) -> None:
        self.repository = repository
        self.photographers_repository = photographers_repository

    async def create_client(self, payload: ClientCreate, actor: Actor) -> Client:
        """Create client (admin only)."""
        require_capability(actor, Capability.MANAGE_CLIENTS)
        return await self.repository.create_client(**payload.model_dump())

    async def update_client(self, client_id: UUID, payload: ClientUpdate, actor: Actor) -> Client:
        require_capability(actor, Capability.MANAGE_CLIENTS)
        client = await self._get_client(client_id)
        return await self.repository.update_client(client, **payload.model_dump(exclude_none=True))

    async def get_client(self, client_id: UUID, actor: Actor) -> Client:
        if not actor.can(Capability.MANAGE_CLIENTS):
            ensure_client_scope(actor, client_id)
        return await self._get_client(client_id)

    async def list_clients(self, actor: Actor, limit: int, offset: int) -> tuple[list[Client], int]:
        require_capability(actor, Capability.MANAGE_CLIENTS)
        return await self.repository.list_clients(limit=limit, offset=offset)

    async def block_photographer(self, client_id: UUID, photographer_id: UUID, actor: Actor) -> Client:
        """Exclude photographer from every future match for this client."""
        require_capability(actor, Capability.MANAGE_CLIENTS)
        client = await self._get_client(client_id)
        if await self.photographers_repository.get_by_id(photographer_id) is None:
            raise NotFoundException("Photographer not found")
        if photographer_id in client.blocked_photographer_ids:
            return client

        logger.info("Client %s blocked photographer %s", client.id, photographer_id)
        return await self.repository.set_blocked_photographers(
            client,
            [*client.blocked_photographer_ids, photographer_id],
        )

    async def unblock_photographer(self, client_id: UUID, photographer_id: UUID, actor: Actor) -> Client:
        require_capability(actor, Capability.MANAGE_CLIENTS)
        client = await self._get_client(client_id)
        remaining = [item for item in client.blocked_photographer_ids if item != photographer_id]
        return await self.repository.set_blocked_photographers(client, remaining)

    async def _get_client(self, client_id: UUID) -> Client:
        client = await self.repository.get_by_id(client_id)
        if client is None:
            raise NotFoundException("Client not found")
        return client


async def get_clients_service(session: AsyncSession = Depends(get_db_session)) -> ClientsService:
    """Dependency provider for clients service."""
    return ClientsService(ClientsRepository(session), PhotographersRepository(session))
