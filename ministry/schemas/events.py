from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from ministry.schemas.common import CoordinateFields

EventType = Literal["bible_study", "discipleship", "evangelism", "cell_meeting", "alumni_meeting", "other"]


class EventIn(CoordinateFields):
    name: str = Field(min_length=1, max_length=255)
    type: EventType
    is_active: bool = True


class EventOut(CoordinateFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: str
    is_active: bool
    created_at: datetime
