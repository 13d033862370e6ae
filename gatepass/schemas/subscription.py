from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from ..core.statuses import DURATION_CHOICES, choice_pattern


class SubscriptionCreate(BaseModel):
    plan: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    duration: str = Field(..., pattern=choice_pattern(DURATION_CHOICES))
    auto_renew: bool = False


class SubscriptionOut(BaseModel):
    id: int
    user_id: str
    plan: str
    price: Decimal
    duration: str
    start_date: date
    end_date: date
    auto_renew: bool
    status: str
    created_at: str
    expiring_soon: bool = False

    model_config = {"from_attributes": True}
