"""Matching API router."""

from __future__ import annotations

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.security import get_current_actor
from app.modules.matching.schemas import (
    AvailableStartTimesRead,
    AvailableTimesRequest,
    FlashRequest,
    FlashSuggestionRead,
    MatchRequest,
    RouteOptimizationRead,
    SuggestionsRead,
)
from app.modules.matching.service import MatchingService, get_matching_service

router = APIRouter(prefix="/matching", tags=["matching"])


@router.post("/suggestions", response_model=SuggestionsRead)
async def suggest_photographers(
    payload: MatchRequest,
    service: MatchingService = Depends(get_matching_service),
    current_actor=Depends(get_current_actor),
) -> SuggestionsRead:
    """Ranked eligible photographers for an ad-hoc request."""
    return await service.suggest(payload, current_actor)


@router.get("/bookings/{booking_id}/suggestions", response_model=SuggestionsRead)
async def suggest_for_booking(
    booking_id: UUID,
    service: MatchingService = Depends(get_matching_service),
    current_actor=Depends(get_current_actor),
) -> SuggestionsRead:
    """Ranked eligible photographers for a draft booking."""
    return await service.suggest_for_booking(booking_id, current_actor)


@router.get("/bookings/{booking_id}/swap-candidates", response_model=SuggestionsRead)
async def swap_candidates(
    booking_id: UUID,
    service: MatchingService = Depends(get_matching_service),
    current_actor=Depends(get_current_actor),
) -> SuggestionsRead:
    return await service.swap_candidates(booking_id, current_actor)


@router.post("/available-times", response_model=AvailableStartTimesRead)
async def available_start_times(
    payload: AvailableTimesRequest,
    service: MatchingService = Depends(get_matching_service),
    current_actor=Depends(get_current_actor),
) -> AvailableStartTimesRead:
    """Start times on a date with at least one eligible photographer."""
    return await service.available_start_times(payload, current_actor)


@router.post("/flash", response_model=FlashSuggestionRead)
async def nearest_available(
    payload: FlashRequest,
    service: MatchingService = Depends(get_matching_service),
    current_actor=Depends(get_current_actor),
) -> FlashSuggestionRead:
    """Earliest photographer available today."""
    return await service.nearest_available(payload, current_actor)


@router.get("/route-optimizations", response_model=list[RouteOptimizationRead])
async def route_optimizations(
    day: date,
    service: MatchingService = Depends(get_matching_service),
    current_actor=Depends(get_current_actor),
) -> list[RouteOptimizationRead]:
    """Photographer swaps that shorten travel on a date."""
    suggestions = await service.route_optimizations(day, current_actor)
    return [RouteOptimizationRead.model_validate(item) for item in suggestions]
