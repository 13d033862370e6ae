from __future__ import annotations

from sqlalchemy import Boolean, Column, String, Text

from ..core.config import settings
from ..db.session import Base


def is_admin_email(email: str | None) -> bool:
    """Admin rights belong to exactly one configured address."""

    if not email:
        return False
    return email.strip().lower() == settings.ADMIN_EMAIL.strip().lower()


class User(Base):
    """Local mirror of an identity held by the authentication backend."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    full_name = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    approved = Column(Boolean, nullable=False, default=False)
    created_at = Column(Text, nullable=False)

    @property
    def is_admin(self) -> bool:
        return is_admin_email(self.email)

    @property
    def is_approved(self) -> bool:
        return bool(self.approved) or self.is_admin

    @property
    def display_name(self) -> str:
        return self.full_name or self.email


__all__ = ["User", "is_admin_email"]
