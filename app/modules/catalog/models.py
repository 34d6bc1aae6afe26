"""Service catalog ORM models."""

from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin


class ServiceOffering(BaseModelMixin, Base):
    """Bookable service (photo, video, drone...) or a fee line item."""

    __tablename__ = "service_offerings"
    __table_args__ = (CheckConstraint("duration_minutes >= 0", name="duration_non_negative"),)

    code: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # Fee-only items (travel fee, express fee) need no photographer capability.
    is_fee_only: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Key pickup: radius is measured from the client's office instead of the property.
    uses_client_location: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
