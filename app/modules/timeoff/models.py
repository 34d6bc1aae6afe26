"""Time-off ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin


class TimeOff(BaseModelMixin, Base):
    """Absolute unavailability range of a photographer.

    Rows are never edited in place: an edit deletes the block and recreates it.
    """

    __tablename__ = "time_offs"
    __table_args__ = (CheckConstraint("start_at < end_at", name="start_before_end"),)

    photographer_id: Mapped[UUID] = mapped_column(
        ForeignKey("photographers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    block_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_by_id: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)
