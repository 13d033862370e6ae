from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..core.statuses import ACCESS_STATUS_CHOICES, choice_pattern


class AccessStatusUpdate(BaseModel):
    status: str = Field(..., pattern=choice_pattern(ACCESS_STATUS_CHOICES))


class AccessOut(BaseModel):
    id: int
    user_id: str
    ticket_id: int
    accessed_at: str
    status: str
    event: Optional[str] = None
    venue: Optional[str] = None

    model_config = {"from_attributes": True}
