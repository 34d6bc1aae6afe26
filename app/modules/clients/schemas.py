"""Clients schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class ClientCreate(BaseModel):
    """Create client request."""

    name: str = Field(min_length=2, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=32)
    address: str = Field(default="", max_length=512)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def validate_location_pair(self) -> "ClientCreate":
        """Latitude and longitude come together or not at all."""
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        return self


class ClientUpdate(BaseModel):
    """Update client request."""

    name: str | None = Field(default=None, min_length=2, max_length=255)
    phone: str | None = Field(default=None, max_length=32)
    address: str | None = Field(default=None, max_length=512)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def validate_location_pair(self) -> "ClientUpdate":
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be updated together")
        return self


class ClientRead(BaseModel):
    """Client response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str | None
    phone: str | None
    address: str
    lat: float | None
    lng: float | None
    blocked_photographer_ids: list[UUID]
    created_at: datetime
    updated_at: datetime
