"""Time-off schemas."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.shared.utils import parse_hhmm


class TimeOffCreate(BaseModel):
    """Block an absolute range, possibly spanning several days.

    Naive datetimes are read as business-timezone wall-clock time.
    """

    photographer_id: UUID
    start_at: dt.datetime
    end_at: dt.datetime
    notes: str | None = Field(default=None, max_length=512)

    @model_validator(mode="after")
    def validate_range(self) -> "TimeOffCreate":
        """Time-off must have a positive duration."""
        if self.start_at.tzinfo is None and self.end_at.tzinfo is not None:
            raise ValueError("start_at and end_at must both be naive or both timezone-aware")
        if self.start_at.tzinfo is not None and self.end_at.tzinfo is None:
            raise ValueError("start_at and end_at must both be naive or both timezone-aware")
        if self.end_at <= self.start_at:
            raise ValueError("end_at must be after start_at")
        return self


class TimeOffSlotsCreate(BaseModel):
    """Block selected template slots of one day under a single block id."""

    photographer_id: UUID
    date: dt.date
    slots: list[str] = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=512)

    @field_validator("slots")
    @classmethod
    def validate_slots(cls, value: list[str]) -> list[str]:
        return sorted({parse_hhmm(item).strftime("%H:%M") for item in value})


class TimeOffRead(BaseModel):
    """Time-off response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    photographer_id: UUID
    start_at: dt.datetime
    end_at: dt.datetime
    block_id: UUID
    notes: str | None
    created_at: dt.datetime
