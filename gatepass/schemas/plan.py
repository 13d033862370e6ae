from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel


class PlanOut(BaseModel):
    key: str
    name: str
    tickets: int
    months: int
    monthly_price: Decimal
    total_price: Decimal
    savings: Decimal
    most_popular: bool = False
    best_value: bool = False


class FeaturedPlans(BaseModel):
    most_popular: PlanOut
    best_value: PlanOut


class PlanSubscribeRequest(BaseModel):
    tickets: int
    months: int
