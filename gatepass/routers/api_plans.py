from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.subscriptions import subscribe_to_plan
from ..db.session import get_db
from ..deps.auth import require_approved_user
from ..models.user import User
from ..schemas.plan import FeaturedPlans, PlanOut, PlanSubscribeRequest
from ..schemas.subscription import SubscriptionOut
from ..services.plans import PLANS, Plan, best_value_plan, find_plan, most_popular_plan

router = APIRouter(prefix="/api/v1/plans", tags=["plans"])


def plan_to_schema(plan: Plan) -> PlanOut:
    popular = most_popular_plan()
    best = best_value_plan()
    return PlanOut(
        key=plan.key,
        name=plan.name,
        tickets=plan.tickets,
        months=plan.months,
        monthly_price=plan.monthly_price,
        total_price=plan.total_price,
        savings=plan.savings,
        most_popular=popular is not None and plan.key == popular.key,
        best_value=plan.key == best.key,
    )


@router.get("", response_model=list[PlanOut])
def api_list_plans(months: int | None = None):
    plans = [plan for plan in PLANS if months is None or plan.months == months]
    return [plan_to_schema(plan) for plan in plans]


@router.get("/featured", response_model=FeaturedPlans)
def api_featured_plans():
    popular = most_popular_plan()
    if popular is None:
        raise HTTPException(404, "Not found")
    return FeaturedPlans(most_popular=plan_to_schema(popular), best_value=plan_to_schema(best_value_plan()))


@router.post("/subscribe", response_model=SubscriptionOut, status_code=201)
def api_subscribe(
    payload: PlanSubscribeRequest,
    user: User = Depends(require_approved_user),
    db: Session = Depends(get_db),
):
    plan = find_plan(payload.tickets, payload.months)
    if plan is None:
        raise HTTPException(404, "Plan not found")
    subscription = subscribe_to_plan(db, user, plan)
    return SubscriptionOut.model_validate(subscription)
