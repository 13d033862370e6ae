from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..core.statuses import TICKET_STATUS_CHOICES, choice_pattern


class TicketCreate(BaseModel):
    event: str = Field(..., min_length=1)
    description: Optional[str] = None
    event_date: Optional[date] = None
    venue: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    available_quantity: int = Field(..., ge=1)


class TicketStatusUpdate(BaseModel):
    status: str = Field(..., pattern=choice_pattern(TICKET_STATUS_CHOICES))


class TicketOut(BaseModel):
    id: int
    event: str
    description: Optional[str] = None
    event_date: Optional[date] = None
    venue: Optional[str] = None
    price: Decimal
    available_quantity: int
    sold_quantity: int
    status: str
    created_by: Optional[str] = None
    created_at: str

    model_config = {"from_attributes": True}
