"""Photographers business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import Capability
from app.core.permissions import Actor, require_capability
from app.modules.catalog.repository import CatalogRepository
from app.modules.photographers.models import Photographer
from app.modules.photographers.repository import PhotographersRepository
from app.modules.photographers.schemas import PhotographerCreate, PhotographerUpdate
from app.shared.exceptions import BusinessRuleException, ConflictException, NotFoundException

logger = logging.getLogger(__name__)


class PhotographersService:
    """Photographers domain service."""

    def __init__(self, repository: PhotographersRepository, catalog_repository: CatalogRepository) -> None:
        self.repository = repository
        self.catalog_repository = catalog_repository

    async def _ensure_known_services(self, codes: list[str]) -> list[str]:
        unique_codes = sorted(set(codes))
        known = {service.code for service in await self.catalog_repository.list_by_codes(unique_codes)}
        unknown = [code for code in unique_codes if code not in known]
        if unknown:
            raise BusinessRuleException(f"Unknown services: {', '.join(unknown)}")
        return unique_codes

    async def create_photographer(self, payload: PhotographerCreate, actor: Actor) -> Photographer:
        """Create photographer profile (admin only)."""
        require_capability(actor, Capability.MANAGE_PHOTOGRAPHERS)
        if await self.repository.get_by_email(payload.email) is not None:
            raise ConflictException("Photographer with this email already exists")

        fields = payload.model_dump()
        fields["services"] = await self._ensure_known_services(payload.services)
        photographer = await self.repository.create_photographer(**fields)
        logger.info("Photographer %s created by %s", photographer.id, actor.id)
        return photographer

    async def update_photographer(
        self,
        photographer_id: UUID,
        payload: PhotographerUpdate,
        actor: Actor,
    ) -> Photographer:
        """Update photographer profile (admin only)."""
        require_capability(actor, Capability.MANAGE_PHOTOGRAPHERS)
        photographer = await self.get_photographer(photographer_id)

        changes = payload.model_dump(exclude_none=True)
        if "services" in changes:
            changes["services"] = await self._ensure_known_services(changes["services"])
        return await self.repository.update_photographer(photographer, **changes)

    async def deactivate_photographer(self, photographer_id: UUID, actor: Actor) -> Photographer:
        """Soft delete; confirmed bookings stay assigned."""
        require_capability(actor, Capability.MANAGE_PHOTOGRAPHERS)
        photographer = await self.get_photographer(photographer_id)
        if not photographer.is_active:
            return photographer
        logger.info("Photographer %s deactivated by %s", photographer.id, actor.id)
        return await self.repository.update_photographer(photographer, is_active=False)

    async def get_photographer(self, photographer_id: UUID) -> Photographer:
        photographer = await self.repository.get_by_id(photographer_id)
        if photographer is None:
            raise NotFoundException("Photographer not found")
        return photographer

    async def list_photographers(
        self,
        active_only: bool,
        limit: int,
        offset: int,
    ) -> tuple[list[Photographer], int]:
        """List photographers."""
        return await self.repository.list_photographers(active_only=active_only, limit=limit, offset=offset)


async def get_photographers_service(session: AsyncSession = Depends(get_db_session)) -> PhotographersService:
    """Dependency provider for photographers service."""
    return PhotographersService(PhotographersRepository(session), CatalogRepository(session))
