from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..core.clock import local_today
from ..core.statuses import CHARGE_STATUS_OPEN
from ..crud.users import search_users
from ..models.access import Access
from ..models.charge import PendingCharge, Purchase
from ..models.subscription import Subscription
from ..models.ticket import Ticket
from ..models.user import User
from .pricing import quantize_currency


def _count(db: Session, model, *criteria) -> int:
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return db.scalar(stmt) or 0


def collect_admin_stats(db: Session) -> Dict[str, int]:
    """Headline counters for the admin overview."""

    return {
        "total_users": _count(db, User),
        "total_tickets": _count(db, Ticket),
        "total_subscriptions": _count(db, Subscription),
        "total_accesses": _count(db, Access),
        "total_pending_charges": _count(db, PendingCharge, PendingCharge.status == CHARGE_STATUS_OPEN),
    }


def user_financial_summary(db: Session, user: User, today: date | None = None) -> Dict[str, Any]:
    """Tickets bought, money paid and owed, and how late the oldest open charge is."""

    current = today or local_today()
    tickets_purchased = db.scalar(
        select(func.coalesce(func.sum(Purchase.quantity), 0)).where(Purchase.user_id == user.id)
    ) or 0
    paid_values = db.execute(select(Purchase.amount_paid).where(Purchase.user_id == user.id)).scalars().all()
    open_charges = db.execute(
        select(PendingCharge).where(
            PendingCharge.user_id == user.id,
            PendingCharge.status == CHARGE_STATUS_OPEN,
        )
    ).scalars().all()

    total_paid = sum((Decimal(value or 0) for value in paid_values), Decimal("0"))
    total_pending = sum((Decimal(charge.amount or 0) for charge in open_charges), Decimal("0"))
    overdue = [charge.due_date for charge in open_charges if charge.due_date and charge.due_date < current]
    days_overdue = (current - min(overdue)).days if overdue else 0

    return {
        "tickets_purchased": int(tickets_purchased),
        "total_paid": quantize_currency(total_paid),
        "total_pending": quantize_currency(total_pending),
        "days_overdue": days_overdue,
    }


def list_users_with_summary(db: Session, term: str | None = None, today: date | None = None) -> list[Dict[str, Any]]:
    rows: list[Dict[str, Any]] = []
    for user in search_users(db, term):
        rows.append({"user": user, **user_financial_summary(db, user, today=today)})
    return rows
