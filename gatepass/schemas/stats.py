from __future__ import annotations

from pydantic import BaseModel


class AdminStats(BaseModel):
    total_users: int
    total_tickets: int
    total_subscriptions: int
    total_accesses: int
    total_pending_charges: int
