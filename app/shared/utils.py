"""Shared utility functions."""

from __future__ import annotations

from datetime import datetime, time, timezone
from typing import Annotated
from zoneinfo import ZoneInfo

from pydantic import AfterValidator


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize datetime to UTC timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local_naive(dt: datetime, tz: ZoneInfo) -> datetime:
    """Convert an instant to naive wall-clock time in the business timezone."""
    return ensure_utc(dt).astimezone(tz).replace(tzinfo=None)


def local_to_utc(value: datetime, tz: ZoneInfo) -> datetime:
    """Interpret naive wall-clock time in the business timezone as a UTC instant."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc)
    return value.replace(tzinfo=tz).astimezone(timezone.utc)


def parse_hhmm(value: str) -> time:
    """Parse ``HH:MM`` template entries."""
    hours, _, minutes = value.strip().partition(":")
    if not hours.isdigit() or not minutes.isdigit() or len(minutes) != 2:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return time(int(hours), int(minutes))


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def ensure_wall_clock(value: time) -> time:
    """Booking times are business-timezone wall-clock times and carry no UTC offset."""
    if value.tzinfo is not None:
        raise ValueError("time must be local wall-clock time without a UTC offset")
    return value


WallClockTime = Annotated[time, AfterValidator(ensure_wall_clock)]
