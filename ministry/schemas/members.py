from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, Field, field_validator

from ministry.schemas.common import CoordinateFields, lower_or_none

MemberType = Literal["student", "graduate", "staff", "volunteer", "alumni"]
MemberStatus = Literal["active", "pre_graduate", "graduate", "alumni", "inactive"]


class MemberIn(CoordinateFields):
    first_name: str = Field(min_length=1, max_length=255)
    second_name: str = Field(min_length=1, max_length=255)
    gender: Literal["male", "female"] | None = None
    birthdate: date | None = None
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
    type: MemberType
    status: MemberStatus = "active"
    graduation_date: date | None = None
    faculty: str | None = Field(default=None, max_length=255)

    @field_validator("gender", "type", "status", mode="before")
    @classmethod
    def _normalize_case(cls, value: object) -> object:
        return lower_or_none(value)

    @field_validator("status", mode="after")
    @classmethod
    def _default_status(cls, value: str | None) -> str:
        return value or "active"

    @field_validator("email", "phone", "faculty", mode="before")
    @classmethod
    def _empty_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class MemberOut(CoordinateFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    second_name: str
    gender: str | None
    birthdate: date | None
    email: str | None
    phone: str | None
    type: str
    status: str
    graduation_date: date | None
    faculty: str | None
    created_at: datetime
    updated_at: datetime
