"""Catalog API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from app.core.security import get_current_actor
from app.modules.catalog.schemas import ServiceOfferingCreate, ServiceOfferingRead, ServiceOfferingUpdate
from app.modules.catalog.service import CatalogService, get_catalog_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.post("/services", response_model=ServiceOfferingRead, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceOfferingCreate,
    service: CatalogService = Depends(get_catalog_service),
    current_actor=Depends(get_current_actor),
) -> ServiceOfferingRead:
    """Create catalog service."""
    offering = await service.create_service(payload, current_actor)
    return ServiceOfferingRead.model_validate(offering)


@router.patch("/services/{code}", response_model=ServiceOfferingRead)
async def update_service(
    code: str,
    payload: ServiceOfferingUpdate,
    service: CatalogService = Depends(get_catalog_service),
    current_actor=Depends(get_current_actor),
) -> ServiceOfferingRead:
    """Update catalog service."""
    offering = await service.update_service(code, payload, current_actor)
    return ServiceOfferingRead.model_validate(offering)


@router.get("/services", response_model=Page[ServiceOfferingRead])
async def list_services(
    active_only: bool = Query(default=True),
    pagination=Depends(get_pagination_params),
    service: CatalogService = Depends(get_catalog_service),
) -> Page[ServiceOfferingRead]:
    """List catalog services."""
    items, total = await service.list_services(active_only, pagination.limit, pagination.offset)
    serialized = [ServiceOfferingRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
