from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ministry.db.base import Base


class Member(Base):
    __tablename__ = "members"
    __coordinate_columns__ = {
        "region_id": "region_id",
        "university_id": "university_id",
        "small_group_id": "small_group_id",
        "alumni_group_id": "alumni_group_id",
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    second_name: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    birthdate: Mapped[date | None] = mapped_column(Date, nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    type: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)

    # Organisational coordinate (row-level security keys).
    region_id: Mapped[int | None] = mapped_column(ForeignKey("regions.id"), nullable=True, index=True)
    university_id: Mapped[int | None] = mapped_column(ForeignKey("universities.id"), nullable=True, index=True)
    small_group_id: Mapped[int | None] = mapped_column(ForeignKey("small_groups.id"), nullable=True, index=True)
    alumni_group_id: Mapped[int | None] = mapped_column(ForeignKey("alumni_small_groups.id"), nullable=True, index=True)

    graduation_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    faculty: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    roles: Mapped[list["UserRole"]] = relationship(back_populates="user", order_by="UserRole.assigned_at.desc()")


class UserRole(Base):
    """
    Scope assignment history. Only the most recently assigned row is active.
    """

    __tablename__ = "user_roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    scope: Mapped[str] = mapped_column(String(20), nullable=False)

    region_id: Mapped[int | None] = mapped_column(ForeignKey("regions.id"), nullable=True)
    university_id: Mapped[int | None] = mapped_column(ForeignKey("universities.id"), nullable=True)
    small_group_id: Mapped[int | None] = mapped_column(ForeignKey("small_groups.id"), nullable=True)
    alumni_group_id: Mapped[int | None] = mapped_column(ForeignKey("alumni_small_groups.id"), nullable=True)

    assigned_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    user: Mapped[User] = relationship(back_populates="roles")
