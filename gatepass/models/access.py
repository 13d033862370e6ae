from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from ..core.statuses import ACCESS_STATUS_PENDING
from ..db.session import Base


class Access(Base):
    """Entry right of one user to one event."""

    __tablename__ = "accesses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=False, index=True)
    accessed_at = Column(Text, nullable=False)
    status = Column(String(16), nullable=False, default=ACCESS_STATUS_PENDING)

    ticket = relationship("Ticket", lazy="joined")

    @property
    def event(self) -> str | None:
        return self.ticket.event if self.ticket else None

    @property
    def venue(self) -> str | None:
        return self.ticket.venue if self.ticket else None


__all__ = ["Access"]
