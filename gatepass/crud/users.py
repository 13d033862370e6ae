from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..core.clock import utcnow_iso
from ..models.user import User, is_admin_email

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    normalized = (email or "").strip().lower()
    if not normalized:
        return None
    return db.execute(select(User).where(func.lower(User.email) == normalized)).scalars().first()


def upsert_user(db: Session, payload: dict) -> User:
    """Create or refresh the local copy of an authenticated identity.

    New users start unapproved unless they are the admin or the payload says
    otherwise. An existing row keeps its approval flag.
    """

    user_id = str(payload.get("id") or "").strip()
    if not user_id:
        raise ValueError("id is required")
    email = (payload.get("email") or "").strip().lower()
    if not email:
        raise ValueError("email is required")

    user = get_user(db, user_id) or get_user_by_email(db, email)
    if user is None:
        user = User(
            id=user_id,
            email=email,
            full_name=(payload.get("full_name") or None),
            phone=(payload.get("phone") or None),
            approved=bool(payload.get("approved")) or is_admin_email(email),
            created_at=utcnow_iso(),
        )
        db.add(user)
        logger.info("user.created", extra={"extra_data": {"user_id": user_id}})
    else:
        user.email = email
        for field in ("full_name", "phone"):
            value = payload.get(field)
            if value:
                setattr(user, field, value)
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session, limit: int = 500, offset: int = 0) -> list[User]:
    stmt = select(User).order_by(User.created_at.desc()).limit(limit).offset(offset)
    return list(db.execute(stmt).scalars().all())


def search_users(db: Session, term: str | None = None, limit: int = 500) -> list[User]:
    """Match email and name case-insensitively, phone by plain substring."""

    cleaned = (term or "").strip()
    if not cleaned:
        return list_users(db, limit=limit)
    lowered = f"%{cleaned.lower()}%"
    stmt = (
        select(User)
        .where(
            or_(
                func.lower(User.email).like(lowered),
                func.lower(func.coalesce(User.full_name, "")).like(lowered),
                func.coalesce(User.phone, "").like(f"%{cleaned}%"),
            )
        )
        .order_by(User.created_at.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def set_user_approval(db: Session, user: User, approved: bool) -> User:
    user.approved = bool(approved)
    db.commit()
    db.refresh(user)
    logger.info(
        "user.approval_changed",
        extra={"extra_data": {"user_id": user.id, "approved": user.approved}},
    )
    return user
