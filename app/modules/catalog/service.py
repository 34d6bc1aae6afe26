"""Catalog business logic layer."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import Capability
from app.core.permissions import Actor, require_capability
from app.modules.catalog.models import ServiceOffering
from app.modules.catalog.repository import CatalogRepository
from app.modules.catalog.schemas import ServiceOfferingCreate, ServiceOfferingUpdate
from app.shared.exceptions import BusinessRuleException, ConflictException, NotFoundException


@dataclass(frozen=True, slots=True)
class ServiceRequirements:
    """What a set of requested services demands from a photographer."""

    required_minutes: int
    essential_codes: frozenset[str]
    uses_client_location: bool


class CatalogService:
    """Catalog domain service."""

    def __init__(self, repository: CatalogRepository) -> None:
        self.repository = repository

    async def create_service(self, payload: ServiceOfferingCreate, actor: Actor) -> ServiceOffering:
        """Create catalog entry (admin only)."""
        require_capability(actor, Capability.MANAGE_CATALOG)
        if await self.repository.get_by_code(payload.code) is not None:
            raise ConflictException(f"Service '{payload.code}' already exists")
        return await self.repository.create_service(**payload.model_dump())

    async def update_service(self, code: str, payload: ServiceOfferingUpdate, actor: Actor) -> ServiceOffering:
        require_capability(actor, Capability.MANAGE_CATALOG)
        service = await self.repository.get_by_code(code)
        if service is None:
            raise NotFoundException("Service not found")
        return await self.repository.update_service(service, **payload.model_dump(exclude_none=True))

    async def list_services(self, active_only: bool, limit: int, offset: int) -> tuple[list[ServiceOffering], int]:
        return await self.repository.list_services(active_only=active_only, limit=limit, offset=offset)

    async def resolve_requirements(self, codes: Collection[str]) -> ServiceRequirements:
        """Sum durations and split off fee-only items for a requested service set.

        Unknown or inactive codes are rejected instead of silently contributing
        zero minutes.
        """
        requested = set(codes)
        if not requested:
            raise BusinessRuleException("At least one service is required")

        services = {service.code: service for service in await self.repository.list_by_codes(requested)}
        unknown = sorted(code for code in requested if code not in services or not services[code].is_active)
        if unknown:
            raise BusinessRuleException(f"Unknown or inactive services: {', '.join(unknown)}")

        return ServiceRequirements(
            required_minutes=sum(service.duration_minutes for service in services.values()),
            essential_codes=frozenset(code for code, service in services.items() if not service.is_fee_only),
            uses_client_location=any(service.uses_client_location for service in services.values()),
        )

    async def fee_only_codes(self, codes: Collection[str]) -> frozenset[str]:
        """Codes among ``codes`` that are fees rather than work a photographer performs."""
        services = await self.repository.list_by_codes(set(codes))
        return frozenset(service.code for service in services if service.is_fee_only)


async def get_catalog_service(session: AsyncSession = Depends(get_db_session)) -> CatalogService:
    """Dependency provider for catalog service."""
    return CatalogService(CatalogRepository(session))
