"""Catalog schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ServiceOfferingCreate(BaseModel):
    """Create catalog service request."""

    code: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9_]+$")
    name: str = Field(min_length=1, max_length=128)
    duration_minutes: int = Field(ge=0, le=24 * 60)
    is_fee_only: bool = False
    uses_client_location: bool = False


class ServiceOfferingUpdate(BaseModel):
    """Update catalog service request."""

    name: str | None = Field(default=None, min_length=1, max_length=128)
    duration_minutes: int | None = Field(default=None, ge=0, le=24 * 60)
    is_fee_only: bool | None = None
    uses_client_location: bool | None = None
    is_active: bool | None = None


class ServiceOfferingRead(BaseModel):
    """Catalog service response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    name: str
    duration_minutes: int
    is_fee_only: bool
    uses_client_location: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime
