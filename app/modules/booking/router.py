"""Booking API router."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.core.enums import BookingStatusEnum
from app.core.security import get_current_actor
from app.modules.booking.schemas import (
    BookingCancelRequest,
    BookingConfirmRequest,
    BookingDraftCreate,
    BookingRead,
    BookingReassignRequest,
    BookingRescheduleRequest,
)
from app.modules.booking.service import BookingService, get_booking_service
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/booking", tags=["booking"])


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
async def create_draft(
    payload: BookingDraftCreate,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    """Create booking draft."""
    booking = await service.create_draft(payload, current_actor)
    return BookingRead.model_validate(booking)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_draft(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> None:
    """Delete booking draft."""
    await service.delete_draft(booking_id, current_actor)


@router.post("/{booking_id}/confirm", response_model=BookingRead)
async def confirm_booking(
    booking_id: UUID,
    payload: BookingConfirmRequest,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    """Confirm draft with the chosen photographer."""
    booking = await service.confirm_booking(booking_id, payload, current_actor)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/auto-assign", response_model=BookingRead)
async def auto_assign_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    """Confirm draft with the best-ranked photographer."""
    booking = await service.auto_assign(booking_id, current_actor)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/reschedule", response_model=BookingRead)
async def reschedule_booking(
    booking_id: UUID,
    payload: BookingRescheduleRequest,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    booking = await service.reschedule_booking(booking_id, payload, current_actor)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/reassign", response_model=BookingRead)
async def reassign_booking(
    booking_id: UUID,
    payload: BookingReassignRequest,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    booking = await service.reassign_booking(booking_id, payload, current_actor)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/cancel", response_model=BookingRead)
async def cancel_booking(
    booking_id: UUID,
    payload: BookingCancelRequest,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    """Cancel confirmed booking and free the slot."""
    booking = await service.cancel_booking(booking_id, payload, current_actor)
    return BookingRead.model_validate(booking)


@router.post("/{booking_id}/complete", response_model=BookingRead)
async def complete_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    booking = await service.complete_booking(booking_id, current_actor)
    return BookingRead.model_validate(booking)


@router.get("/{booking_id}", response_model=BookingRead)
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> BookingRead:
    booking = await service.get_booking(booking_id, current_actor)
    return BookingRead.model_validate(booking)


@router.get("", response_model=Page[BookingRead])
async def list_bookings(
    day: date | None = Query(default=None),
    booking_status: BookingStatusEnum | None = Query(default=None, alias="status"),
    pagination=Depends(get_pagination_params),
    service: BookingService = Depends(get_booking_service),
    current_actor=Depends(get_current_actor),
) -> Page[BookingRead]:
    """List bookings visible to current actor."""
    items, total = await service.list_bookings(
        current_actor,
        pagination.limit,
        pagination.offset,
        day=day,
        status=booking_status,
    )
    serialized = [BookingRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
