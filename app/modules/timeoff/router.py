"""Time-off API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.security import get_current_actor
from app.modules.timeoff.schemas import TimeOffCreate, TimeOffRead, TimeOffSlotsCreate
from app.modules.timeoff.service import TimeOffService, get_timeoff_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/time-off", tags=["time-off"])


@router.post("", response_model=list[TimeOffRead], status_code=status.HTTP_201_CREATED)
async def create_time_off(
    payload: TimeOffCreate,
    service: TimeOffService = Depends(get_timeoff_service),
    current_actor=Depends(get_current_actor),
) -> list[TimeOffRead]:
    """Block an absolute range."""
    items = await service.create_time_off(payload, current_actor)
    return [TimeOffRead.model_validate(item) for item in items]


@router.post("/slots", response_model=list[TimeOffRead], status_code=status.HTTP_201_CREATED)
async def block_slots(
    payload: TimeOffSlotsCreate,
    service: TimeOffService = Depends(get_timeoff_service),
    current_actor=Depends(get_current_actor),
) -> list[TimeOffRead]:
    """Block template slots of a single day."""
    items = await service.block_slots(payload, current_actor)
    return [TimeOffRead.model_validate(item) for item in items]


@router.delete("/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block(
    block_id: UUID,
    service: TimeOffService = Depends(get_timeoff_service),
    current_actor=Depends(get_current_actor),
) -> None:
    await service.delete_block(block_id, current_actor)


@router.get("", response_model=Page[TimeOffRead])
async def list_time_offs(
    photographer_id: UUID,
    include_past: bool = Query(default=False),
    pagination=Depends(get_pagination_params),
    service: TimeOffService = Depends(get_timeoff_service),
    current_actor=Depends(get_current_actor),
) -> Page[TimeOffRead]:
    """List time-off of a photographer."""
    items, total = await service.list_time_offs(
        photographer_id,
        current_actor,
        include_past,
        pagination.limit,
        pagination.offset,
    )
    serialized = [TimeOffRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
