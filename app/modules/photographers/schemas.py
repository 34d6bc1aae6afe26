"""Photographers schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

from app.core.enums import WeekdayEnum
from app.shared.utils import format_hhmm, parse_hhmm


def normalize_availability(value: dict[WeekdayEnum, list[str]] | None) -> dict[WeekdayEnum, list[str]] | None:
    """Validate HH:MM entries, drop duplicates and sort each weekday."""
    if value is None:
        return None
    normalized: dict[WeekdayEnum, list[str]] = {}
    for weekday, starts in value.items():
        parsed = sorted({parse_hhmm(item) for item in starts})
        if parsed:
            normalized[WeekdayEnum(weekday)] = [format_hhmm(item) for item in parsed]
    return normalized


AvailabilityTemplate = Annotated[dict[WeekdayEnum, list[str]], AfterValidator(normalize_availability)]


class PhotographerCreate(BaseModel):
    """Create photographer request."""

    name: str = Field(min_length=2, max_length=128)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=32)
    services: list[str] = Field(default_factory=list)
    base_address: str = Field(default="", max_length=512)
    base_lat: float = Field(ge=-90, le=90)
    base_lng: float = Field(ge=-180, le=180)
    radius_km: float = Field(gt=0, le=500)
    slot_minutes: int = Field(default=60, gt=0, le=24 * 60)
    availability: AvailabilityTemplate = Field(default_factory=dict)


class PhotographerUpdate(BaseModel):
    """Update photographer request; deactivation is a soft delete."""

    name: str | None = Field(default=None, min_length=2, max_length=128)
    phone: str | None = Field(default=None, max_length=32)
    services: list[str] | None = None
    base_address: str | None = Field(default=None, max_length=512)
    base_lat: float | None = Field(default=None, ge=-90, le=90)
    base_lng: float | None = Field(default=None, ge=-180, le=180)
    radius_km: float | None = Field(default=None, gt=0, le=500)
    slot_minutes: int | None = Field(default=None, gt=0, le=24 * 60)
    availability: AvailabilityTemplate | None = None
    is_active: bool | None = None


class PhotographerRead(BaseModel):
    """Photographer response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    phone: str | None
    services: list[str]
    base_address: str
    base_lat: float
    base_lng: float
    radius_km: float
    slot_minutes: int
    availability: dict[str, list[str]]
    is_active: bool
    created_at: datetime
    updated_at: datetime
