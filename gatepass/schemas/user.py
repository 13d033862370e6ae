from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class UserOut(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    approved: bool
    is_admin: bool
    is_approved: bool
    created_at: str

    model_config = {"from_attributes": True}


class UserWithSummary(UserOut):
    tickets_purchased: int = 0
    total_paid: Decimal = Decimal("0.00")
    total_pending: Decimal = Decimal("0.00")
    days_overdue: int = 0
