from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

AttendanceStatus = Literal["present", "absent", "excused"]


class AttendanceIn(BaseModel):
    member_id: int = Field(gt=0)
    event_id: int = Field(gt=0)
    status: AttendanceStatus
    notes: str | None = Field(default=None, max_length=1000)


class AttendanceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    member_id: int
    event_id: int
    status: str
    notes: str | None
    recorded_at: datetime


class AttendanceResult(BaseModel):
    """One entry of a bulk create: either `data` or `error` is set."""

    success: bool
    data: AttendanceOut | None = None
    error: Any = None
    input: dict[str, Any] | None = None


class AttendanceBulkOut(BaseModel):
    results: list[AttendanceResult]
