"""Photographers API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.security import get_current_actor
from app.modules.photographers.schemas import PhotographerCreate, PhotographerRead, PhotographerUpdate
from app.modules.photographers.service import PhotographersService, get_photographers_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/photographers", tags=["photographers"])


@router.post("", response_model=PhotographerRead, status_code=status.HTTP_201_CREATED)
async def create_photographer(
    payload: PhotographerCreate,
    service: PhotographersService = Depends(get_photographers_service),
    current_actor=Depends(get_current_actor),
) -> PhotographerRead:
    """Create photographer profile."""
    photographer = await service.create_photographer(payload, current_actor)
    return PhotographerRead.model_validate(photographer)


@router.patch("/{photographer_id}", response_model=PhotographerRead)
async def update_photographer(
    photographer_id: UUID,
    payload: PhotographerUpdate,
    service: PhotographersService = Depends(get_photographers_service),
    current_actor=Depends(get_current_actor),
) -> PhotographerRead:
    """Update photographer profile."""
    photographer = await service.update_photographer(photographer_id, payload, current_actor)
    return PhotographerRead.model_validate(photographer)


@router.post("/{photographer_id}/deactivate", response_model=PhotographerRead)
async def deactivate_photographer(
    photographer_id: UUID,
    service: PhotographersService = Depends(get_photographers_service),
    current_actor=Depends(get_current_actor),
) -> PhotographerRead:
    """Deactivate photographer (soft delete)."""
    photographer = await service.deactivate_photographer(photographer_id, current_actor)
    return PhotographerRead.model_validate(photographer)


@router.get("/{photographer_id}", response_model=PhotographerRead)
async def get_photographer(
    photographer_id: UUID,
    service: PhotographersService = Depends(get_photographers_service),
    current_actor=Depends(get_current_actor),
) -> PhotographerRead:
    """Get photographer profile."""
    photographer = await service.get_photographer(photographer_id)
    return PhotographerRead.model_validate(photographer)


@router.get("", response_model=Page[PhotographerRead])
async def list_photographers(
    active_only: bool = Query(default=False),
    pagination=Depends(get_pagination_params),
    service: PhotographersService = Depends(get_photographers_service),
    current_actor=Depends(get_current_actor),
) -> Page[PhotographerRead]:
    """List photographers."""
    items, total = await service.list_photographers(active_only, pagination.limit, pagination.offset)
    serialized = [PhotographerRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
