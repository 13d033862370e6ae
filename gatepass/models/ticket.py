from __future__ import annotations

from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, Text

from ..core.statuses import TICKET_STATUS_ACTIVE
from ..db.session import Base


class Ticket(Base):
    """An event listing with its own price and stock counters."""

    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    event = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(Date, nullable=True)
    venue = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    available_quantity = Column(Integer, nullable=False, default=0)
    sold_quantity = Column(Integer, nullable=False, default=0)
    status = Column(String(16), nullable=False, default=TICKET_STATUS_ACTIVE)
    created_by = Column(String(64), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(Text, nullable=False)


__all__ = ["Ticket"]
