"""Matching schemas."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.shared.utils import WallClockTime


class MatchRequest(BaseModel):
    """Ad-hoc eligibility query, same fields as a booking draft."""

    client_id: UUID
    service_ids: list[str] = Field(min_length=1)
    lat: float
    lng: float
    date: dt.date
    start_time: WallClockTime


class AvailableTimesRequest(BaseModel):
    client_id: UUID
    service_ids: list[str] = Field(min_length=1)
    lat: float
    lng: float
    date: dt.date


class FlashRequest(BaseModel):
    """Same-day booking: earliest photographer available from now on."""

    client_id: UUID
    service_ids: list[str] = Field(min_length=1)
    lat: float
    lng: float


class SuggestedPhotographer(BaseModel):
    photographer_id: UUID
    name: str
    distance_km: float
    daily_load: int


class SuggestionsRead(BaseModel):
    """Ranked candidates; ``has_coverage`` is False when nobody can take the shoot."""

    has_coverage: bool
    required_minutes: int
    search_lat: float
    search_lng: float
    items: list[SuggestedPhotographer]


class AvailableStartTime(BaseModel):
    start_time: dt.time
    photographer_count: int


class AvailableStartTimesRead(BaseModel):
    date: dt.date
    required_minutes: int
    items: list[AvailableStartTime]


class FlashSuggestionRead(BaseModel):
    date: dt.date
    start_time: dt.time
    photographer: SuggestedPhotographer


class RouteOptimizationRead(BaseModel):
    """Photographer swap between two simultaneous bookings."""

    model_config = ConfigDict(from_attributes=True)

    booking_a_id: UUID
    booking_b_id: UUID
    photographer_a_id: UUID
    photographer_b_id: UUID
    saving_km: float
    start_time: dt.time
