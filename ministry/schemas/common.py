from __future__ import annotations

from pydantic import BaseModel, Field

from ministry.authz import OrganizationalCoordinate


class CoordinateFields(BaseModel):
    """Organisational placement of a resource. Empty ids are stored as NULL."""

    region_id: int | None = Field(default=None, gt=0)
    university_id: int | None = Field(default=None, gt=0)
    small_group_id: int | None = Field(default=None, gt=0)
    alumni_group_id: int | None = Field(default=None, gt=0)

    def coordinate(self) -> OrganizationalCoordinate:
        return OrganizationalCoordinate(
            region_id=self.region_id,
            university_id=self.university_id,
            small_group_id=self.small_group_id,
            alumni_group_id=self.alumni_group_id,
        )


def lower_or_none(value: object) -> object:
    # Front ends send "Student", "student" or "".
    if isinstance(value, str):
        value = value.strip().lower()
        return value or None
    return value
