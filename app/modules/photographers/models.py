"""Photographers ORM models."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Float, Integer, String
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin


class Photographer(BaseModelMixin, Base):
    """Photographer capability profile.

    Deactivated instead of deleted: historical bookings keep referencing it.
    """

    __tablename__ = "photographers"
    __table_args__ = (
        CheckConstraint("radius_km > 0", name="radius_positive"),
        CheckConstraint("slot_minutes > 0", name="slot_minutes_positive"),
        CheckConstraint("base_lat BETWEEN -90 AND 90", name="base_lat_range"),
        CheckConstraint("base_lng BETWEEN -180 AND 180", name="base_lng_range"),
    )

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    services: Mapped[list[str]] = mapped_column(ARRAY(String(64)), default=list, nullable=False)
    base_address: Mapped[str] = mapped_column(String(512), default="", nullable=False)
    base_lat: Mapped[float] = mapped_column(Float, nullable=False)
    base_lng: Mapped[float] = mapped_column(Float, nullable=False)
    radius_km: Mapped[float] = mapped_column(Float, nullable=False)
    slot_minutes: Mapped[int] = mapped_column(Integer, default=60, nullable=False)
    # {"monday": ["09:00", "10:00"], ...}
    availability: Mapped[dict[str, list[str]]] = mapped_column(JSONB, default=dict, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
