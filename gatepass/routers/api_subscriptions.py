from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..core.clock import local_today
from ..core.statuses import SUBSCRIPTION_STATUS_CANCELLED
from ..crud.subscriptions import (
    create_subscription,
    get_subscription,
    list_subscriptions_for_user,
    set_subscription_status,
)
from ..db.session import get_db
from ..deps.auth import require_approved_user
from ..models.subscription import Subscription
from ..models.user import User
from ..schemas.subscription import SubscriptionCreate, SubscriptionOut
from ..services.subscriptions import is_expiring_soon

router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


def _serialize(subscription: Subscription) -> SubscriptionOut:
    payload = SubscriptionOut.model_validate(subscription)
    payload.expiring_soon = is_expiring_soon(subscription.end_date, local_today())
    return payload


def _owned_subscription(db: Session, subscription_id: int, user: User) -> Subscription:
    subscription = get_subscription(db, subscription_id)
    if not subscription or (subscription.user_id != user.id and not user.is_admin):
        raise HTTPException(404, "Not found")
    return subscription


@router.get("", response_model=list[SubscriptionOut])
def api_list_subscriptions(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    return [_serialize(s) for s in list_subscriptions_for_user(db, user.id)]


@router.post("", response_model=SubscriptionOut, status_code=201)
def api_create_subscription(
    payload: SubscriptionCreate,
    user: User = Depends(require_approved_user),
    db: Session = Depends(get_db),
):
    try:
        subscription = create_subscription(db, user.id, payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _serialize(subscription)


@router.get("/{subscription_id}", response_model=SubscriptionOut)
def api_get_subscription(
    subscription_id: int,
    user: User = Depends(require_approved_user),
    db: Session = Depends(get_db),
):
    return _serialize(_owned_subscription(db, subscription_id, user))


@router.post("/{subscription_id}/cancel", response_model=SubscriptionOut)
def api_cancel_subscription(
    subscription_id: int,
    user: User = Depends(require_approved_user),
    db: Session = Depends(get_db),
):
    subscription = _owned_subscription(db, subscription_id, user)
    updated = set_subscription_status(db, subscription, SUBSCRIPTION_STATUS_CANCELLED)
    return _serialize(updated)
