from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from ..core.statuses import PAYMENT_METHOD_CHOICES, choice_pattern


class InstallmentOption(BaseModel):
    installments: int
    amount: Decimal
    with_interest: bool


class QuoteRequest(BaseModel):
    quantity: int
    payment_method: Optional[str] = Field(default=None, pattern=choice_pattern(PAYMENT_METHOD_CHOICES))
    installments: int = 1


class CheckoutRequest(QuoteRequest):
    payment_method: str = Field(..., pattern=choice_pattern(PAYMENT_METHOD_CHOICES))
    ticket_id: Optional[int] = None


class QuoteOut(BaseModel):
    quantity: int
    unit_price: Decimal
    total: Decimal
    payment_method: Optional[str] = None
    installments: int
    installment_amount: Decimal
    amount_charged: Decimal
    options: list[InstallmentOption]


class PendingChargeOut(BaseModel):
    id: int
    amount: Decimal
    due_date: date
    status: str

    model_config = {"from_attributes": True}


class PurchaseOut(BaseModel):
    id: int
    ticket_id: Optional[int] = None
    quantity: int
    unit_price: Decimal
    total: Decimal
    payment_method: str
    installments: int
    amount_paid: Decimal
    created_at: str
    charges: list[PendingChargeOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}
