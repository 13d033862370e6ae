from __future__ import annotations

from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, Numeric, String, Text

from ..core.statuses import SUBSCRIPTION_STATUS_ACTIVE
from ..db.session import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    plan = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(String(16), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    auto_renew = Column(Boolean, nullable=False, default=False)
    status = Column(String(16), nullable=False, default=SUBSCRIPTION_STATUS_ACTIVE)
    created_at = Column(Text, nullable=False)


__all__ = ["Subscription"]
