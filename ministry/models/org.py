from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ministry.db.base import Base

# Each organisation table exposes only part of the coordinate; `__coordinate_columns__`
# maps coordinate field -> column on this table for the RLS listener.


class Region(Base):
    __tablename__ = "regions"
    __coordinate_columns__ = {"region_id": "id"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    universities: Mapped[list["University"]] = relationship(back_populates="region")


class University(Base):
    __tablename__ = "universities"
    __coordinate_columns__ = {"region_id": "region_id", "university_id": "id"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), nullable=False, index=True)

    region: Mapped[Region] = relationship(back_populates="universities")
    small_groups: Mapped[list["SmallGroup"]] = relationship(back_populates="university")


class SmallGroup(Base):
    __tablename__ = "small_groups"
    __coordinate_columns__ = {"region_id": "region_id", "university_id": "university_id", "small_group_id": "id"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    university_id: Mapped[int] = mapped_column(ForeignKey("universities.id"), nullable=False, index=True)
    # Denormalized so region-scoped listing needs no join.
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), nullable=False, index=True)

    university: Mapped[University] = relationship(back_populates="small_groups")


class AlumniSmallGroup(Base):
    __tablename__ = "alumni_small_groups"
    __coordinate_columns__ = {"region_id": "region_id", "alumni_group_id": "id"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    region_id: Mapped[int] = mapped_column(ForeignKey("regions.id"), nullable=False, index=True)
