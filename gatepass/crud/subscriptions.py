from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.clock import local_today, utcnow_iso
from ..core.statuses import (
    DURATION_CHOICES,
    SUBSCRIPTION_STATUS_ACTIVE,
    SUBSCRIPTION_STATUS_CHOICES,
    SUBSCRIPTION_STATUS_EXPIRED,
    normalize_choice,
)
from ..models.subscription import Subscription
from ..models.user import User
from ..services.plans import DURATION_BY_MONTHS, Plan
from ..services.pricing import quantize_currency, to_decimal
from ..services.subscriptions import calculate_end_date

logger = logging.getLogger(__name__)


def _coerce_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().casefold() in {"true", "1", "yes", "y", "on"}
    return False


def list_subscriptions_for_user(db: Session, user_id: str, limit: int = 200) -> list[Subscription]:
    stmt = (
        select(Subscription)
        .where(Subscription.user_id == user_id)
        .order_by(desc(Subscription.created_at), desc(Subscription.id))
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def get_subscription(db: Session, subscription_id: int) -> Subscription | None:
    return db.get(Subscription, subscription_id)


def create_subscription(db: Session, user_id: str, payload: dict, today: date | None = None) -> Subscription:
    plan = (payload.get("plan") or "").strip()
    if not plan:
        raise ValueError("plan is required")
    if payload.get("price") in (None, ""):
        raise ValueError("price is required")
    price = to_decimal(payload.get("price"))
    if price < 0:
        raise ValueError("price cannot be negative")
    duration = normalize_choice(payload.get("duration"), DURATION_CHOICES, "duration")

    start = today or local_today()
    subscription = Subscription(
        user_id=user_id,
        plan=plan,
        price=quantize_currency(price),
        duration=duration,
        start_date=start,
        end_date=calculate_end_date(duration, start),
        auto_renew=_coerce_bool(payload.get("auto_renew")),
        status=SUBSCRIPTION_STATUS_ACTIVE,
        created_at=utcnow_iso(),
    )
    db.add(subscription)
    db.commit()
    db.refresh(subscription)
    logger.info(
        "subscription.created",
        extra={"extra_data": {"subscription_id": subscription.id, "user_id": user_id, "duration": duration}},
    )
    return subscription


def subscribe_to_plan(db: Session, user: User, plan: Plan, today: date | None = None) -> Subscription:
    """Turn a catalogue plan into an auto-renewing subscription billed monthly."""

    return create_subscription(
        db,
        user.id,
        {
            "plan": plan.name,
            "price": plan.monthly_price,
            "duration": DURATION_BY_MONTHS[plan.months],
            "auto_renew": True,
        },
        today=today,
    )


def set_subscription_status(db: Session, subscription: Subscription, status: str) -> Subscription:
    subscription.status = normalize_choice(status, SUBSCRIPTION_STATUS_CHOICES, "status")
    db.commit()
    db.refresh(subscription)
    return subscription


def expire_subscriptions(db: Session, today: date | None = None) -> int:
    """Mark active subscriptions whose end date has passed as expired."""

    cutoff = today or local_today()
    stale = db.execute(
        select(Subscription).where(
            Subscription.status == SUBSCRIPTION_STATUS_ACTIVE,
            Subscription.end_date < cutoff,
        )
    ).scalars().all()
    for subscription in stale:
        subscription.status = SUBSCRIPTION_STATUS_EXPIRED
    if stale:
        db.commit()
        logger.info("subscription.expired", extra={"extra_data": {"count": len(stale)}})
    return len(stale)
