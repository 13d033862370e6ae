"""Purchases made at checkout and the installments still owed on them."""

from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..core.statuses import CHARGE_STATUS_OPEN
from ..db.session import Base


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(16), nullable=False)
    installments = Column(Integer, nullable=False, default=1)
    amount_paid = Column(Numeric(10, 2), nullable=False)
    created_at = Column(Text, nullable=False)

    charges = relationship("PendingCharge", back_populates="purchase", order_by="PendingCharge.due_date")


class PendingCharge(Base):
    __tablename__ = "pending_charges"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default=CHARGE_STATUS_OPEN)
    created_at = Column(Text, nullable=False)

    purchase = relationship("Purchase", back_populates="charges")


__all__ = ["PendingCharge", "Purchase"]
