from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PaymentMethod = Literal["mobile_money", "bank_transfer", "card", "worldremit"]
ContributionStatus = Literal["pending", "completed", "failed", "refunded", "processing", "cancelled"]


class ContributionIn(BaseModel):
    member_id: int | None = Field(default=None, gt=0)
    amount: float = Field(gt=0)
    method: PaymentMethod
    status: ContributionStatus = "pending"
    transaction_id: str | None = Field(default=None, max_length=100)


class ContributionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    member_id: int | None
    amount: float
    method: str
    status: str
    transaction_id: str | None
    created_at: datetime
