from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ministry.db.base import Base
from ministry.models.people import Member


class PermanentMinistryEvent(Base):
    __tablename__ = "permanent_ministry_events"
    __coordinate_columns__ = {
        "region_id": "region_id",
        "university_id": "university_id",
        "small_group_id": "small_group_id",
        "alumni_group_id": "alumni_group_id",
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False)

    region_id: Mapped[int | None] = mapped_column(ForeignKey("regions.id"), nullable=True, index=True)
    university_id: Mapped[int | None] = mapped_column(ForeignKey("universities.id"), nullable=True, index=True)
    small_group_id: Mapped[int | None] = mapped_column(ForeignKey("small_groups.id"), nullable=True, index=True)
    alumni_group_id: Mapped[int | None] = mapped_column(ForeignKey("alumni_small_groups.id"), nullable=True, index=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class Attendance(Base):
    """Attendance has no coordinate of its own; it is scoped through its member."""

    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("member_id", "event_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    member_id: Mapped[int] = mapped_column(ForeignKey("members.id"), nullable=False, index=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("permanent_ministry_events.id"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    member: Mapped[Member] = relationship()
    event: Mapped[PermanentMinistryEvent] = relationship()
