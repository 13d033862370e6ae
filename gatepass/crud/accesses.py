from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.clock import utcnow_iso
from ..core.statuses import ACCESS_STATUS_CHOICES, ACCESS_STATUS_PENDING, ACCESS_STATUS_USED, normalize_choice
from ..models.access import Access


def list_accesses_for_user(db: Session, user_id: str, limit: int = 200) -> list[Access]:
    stmt = (
        select(Access)
        .where(Access.user_id == user_id)
        .order_by(desc(Access.accessed_at), desc(Access.id))
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().unique().all())


def get_access(db: Session, access_id: int) -> Access | None:
    return db.get(Access, access_id)


def create_access(
    db: Session,
    user_id: str,
    ticket_id: int,
    status: str = ACCESS_STATUS_PENDING,
    *,
    commit: bool = True,
) -> Access:
    access = Access(
        user_id=user_id,
        ticket_id=ticket_id,
        accessed_at=utcnow_iso(),
        status=normalize_choice(status, ACCESS_STATUS_CHOICES, "status"),
    )
    db.add(access)
    if commit:
        db.commit()
        db.refresh(access)
    return access


def set_access_status(db: Session, access: Access, status: str) -> Access:
    access.status = normalize_choice(status, ACCESS_STATUS_CHOICES, "status")
    if access.status == ACCESS_STATUS_USED:
        access.accessed_at = utcnow_iso()
    db.commit()
    db.refresh(access)
    return access
