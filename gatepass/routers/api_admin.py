from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..crud.subscriptions import expire_subscriptions
from ..crud.tickets import list_tickets
from ..crud.users import get_user, set_user_approval
from ..db.session import get_db
from ..deps.auth import require_admin
from ..schemas.stats import AdminStats
from ..schemas.ticket import TicketOut
from ..schemas.user import UserOut, UserWithSummary
from ..services.stats import collect_admin_stats, list_users_with_summary

router = APIRouter(prefix="/api/v1", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/admin/stats", response_model=AdminStats)
def api_admin_stats(db: Session = Depends(get_db)):
    return AdminStats(**collect_admin_stats(db))


@router.get("/admin/tickets", response_model=list[TicketOut])
def api_all_tickets(limit: int = Query(default=200, ge=1, le=500), db: Session = Depends(get_db)):
    return [TicketOut.model_validate(t) for t in list_tickets(db, limit=limit)]


@router.post("/admin/subscriptions/expire")
def api_expire_subscriptions(db: Session = Depends(get_db)):
    return {"expired": expire_subscriptions(db)}


@router.get("/users", response_model=list[UserWithSummary])
def api_list_users(q: str | None = Query(default=None), db: Session = Depends(get_db)):
    rows = list_users_with_summary(db, q)
    return [
        UserWithSummary(
            **UserOut.model_validate(row["user"]).model_dump(),
            tickets_purchased=row["tickets_purchased"],
            total_paid=row["total_paid"],
            total_pending=row["total_pending"],
            days_overdue=row["days_overdue"],
        )
        for row in rows
    ]


def _toggle_approval(user_id: str, approved: bool, db: Session) -> UserOut:
    user = get_user(db, user_id)
    if not user:
        raise HTTPException(404, "Not found")
    return UserOut.model_validate(set_user_approval(db, user, approved))


@router.post("/users/{user_id}/approve", response_model=UserOut)
def api_approve_user(user_id: str, db: Session = Depends(get_db)):
    return _toggle_approval(user_id, True, db)


@router.post("/users/{user_id}/revoke", response_model=UserOut)
def api_revoke_user(user_id: str, db: Session = Depends(get_db)):
    return _toggle_approval(user_id, False, db)
