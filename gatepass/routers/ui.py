"""Landing page, dashboard and the form posts behind each dashboard tab."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..core.clock import local_today
from ..core.flash import flash, pop_flashes
from ..core.jinja import get_templates
from ..core.statuses import (
    ACCESS_STATUS_CHOICES,
    DURATION_CHOICES,
    SUBSCRIPTION_STATUS_CANCELLED,
    TICKET_STATUS_CHOICES,
)
from ..crud.accesses import get_access, list_accesses_for_user, set_access_status
from ..crud.charges import get_charge, list_pending_charges, mark_charge_paid, record_purchase
from ..crud.subscriptions import (
    create_subscription,
    get_subscription,
    list_subscriptions_for_user,
    set_subscription_status,
    subscribe_to_plan,
)
from ..crud.tickets import (
    create_ticket,
    get_ticket,
    list_on_sale,
    list_tickets_for_owner,
    set_ticket_status,
    ticket_revenue,
)
from ..crud.users import get_user, set_user_approval
from ..db.session import get_db
from ..deps.auth import get_optional_user
from ..models.user import User
from ..services.plans import (
    PLAN_DURATIONS,
    best_value_plan,
    find_plan,
    most_popular_plan,
    plans_by_duration,
)
from ..services.pricing import (
    MAX_QUANTITY,
    MIN_QUANTITY,
    TICKET_PRICE,
    adjust_quantity,
    build_quote,
    clamp_quantity,
    format_currency,
    total_price,
)
from ..services.stats import collect_admin_stats, list_users_with_summary
from ..services.subscriptions import is_expiring_soon

templates = get_templates()

router = APIRouter()

CLIENT_TABS = ("buy", "plans")
ADMIN_TABS = ("tickets", "accesses", "subscriptions", "users", "admin")


def _login_redirect() -> RedirectResponse:
    return RedirectResponse(url="/auth", status_code=303)


def _dashboard_redirect(tab: str, **params: object) -> RedirectResponse:
    query = "&".join([f"tab={tab}"] + [f"{key}={value}" for key, value in params.items()])
    return RedirectResponse(url=f"/dashboard?{query}", status_code=303)


def _can_use_dashboard(user: User | None) -> bool:
    return user is not None and user.is_approved


def _render(request: Request, name: str, user: User | None, context: dict, status_code: int = 200):
    payload = {"user": user, "messages": pop_flashes(request), **context}
    return templates.TemplateResponse(request, name, payload, status_code=status_code)


def _unit_price_for(db: Session, ticket_id: int | None):
    if not ticket_id:
        return None, TICKET_PRICE
    ticket = get_ticket(db, ticket_id)
    if ticket is None:
        raise ValueError("Selected event no longer exists")
    return ticket, Decimal(ticket.price)


@router.get("/", response_class=HTMLResponse)
def index_page(request: Request, user: User | None = Depends(get_optional_user)):
    if _can_use_dashboard(user):
        return RedirectResponse(url="/dashboard", status_code=303)
    context = {
        "most_popular": most_popular_plan(),
        "best_value": best_value_plan(),
        "ticket_price": TICKET_PRICE,
    }
    return _render(request, "index.html", user, context)


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    tab: str | None = None,
    quantity: str | None = None,
    step: int = 0,
    selected: str | None = None,
    q: str | None = None,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _can_use_dashboard(user):
        return _login_redirect()

    if not user.is_admin:
        active_tab = tab if tab in CLIENT_TABS else CLIENT_TABS[0]
        qty = clamp_quantity(quantity if quantity is not None else MIN_QUANTITY)
        if step:
            qty = adjust_quantity(qty, 1 if step > 0 else -1)
        selected_plan = None
        if selected and "-" in selected:
            tickets, _, months = selected.partition("-")
            if tickets.isdigit() and months.isdigit():
                selected_plan = find_plan(int(tickets), int(months))
        context = {
            "tab": active_tab,
            "quantity": qty,
            "min_quantity": MIN_QUANTITY,
            "max_quantity": MAX_QUANTITY,
            "ticket_price": TICKET_PRICE,
            "total": total_price(qty),
            "events": list_on_sale(db),
            "plan_groups": [(months, plans_by_duration(months)) for months in PLAN_DURATIONS],
            "most_popular": most_popular_plan(),
            "best_value": best_value_plan(),
            "selected_plan": selected_plan,
            "charges": list_pending_charges(db, user.id),
        }
        return _render(request, "dashboard_client.html", user, context)

    active_tab = tab if tab in ADMIN_TABS else ADMIN_TABS[0]
    today = local_today()
    context = {
        "tab": active_tab,
        "ticket_statuses": TICKET_STATUS_CHOICES,
        "access_statuses": ACCESS_STATUS_CHOICES,
        "durations": DURATION_CHOICES,
        "search": q or "",
        "today": today,
        "is_expiring_soon": is_expiring_soon,
        "ticket_revenue": ticket_revenue,
    }
    if active_tab == "tickets":
        context["tickets"] = list_tickets_for_owner(db, user.id)
    elif active_tab == "accesses":
        context["accesses"] = list_accesses_for_user(db, user.id)
    elif active_tab == "subscriptions":
        context["subscriptions"] = list_subscriptions_for_user(db, user.id)
    elif active_tab == "users":
        context["rows"] = list_users_with_summary(db, q, today=today)
    else:
        context["stats"] = collect_admin_stats(db)
    return _render(request, "dashboard_admin.html", user, context)


# ---------- Client: buying tickets ----------


@router.post("/checkout/review", response_class=HTMLResponse)
def checkout_review(
    request: Request,
    quantity: str = Form("1"),
    ticket_id: int | None = Form(None),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _can_use_dashboard(user):
        return _login_redirect()
    try:
        qty = int(quantity)
        ticket, unit_price = _unit_price_for(db, ticket_id)
        quote = build_quote(qty, unit_price=unit_price)
    except ValueError as exc:
        flash(request, "Invalid quantity", str(exc), "destructive")
        return _dashboard_redirect("buy")
    return _render(request, "checkout.html", user, {"quote": quote, "ticket": ticket})


@router.post("/checkout", response_class=HTMLResponse)
def checkout_submit(
    request: Request,
    quantity: str = Form("1"),
    ticket_id: int | None = Form(None),
    payment_method: str = Form(""),
    installments: int = Form(1),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _can_use_dashboard(user):
        return _login_redirect()
    try:
        qty = int(quantity)
        ticket, unit_price = _unit_price_for(db, ticket_id)
        if not payment_method:
            flash(request, "Select a payment method", "", "destructive")
            quote = build_quote(qty, unit_price=unit_price)
            return _render(request, "checkout.html", user, {"quote": quote, "ticket": ticket})
        quote = build_quote(qty, payment_method, installments, unit_price=unit_price)
        record_purchase(db, user, quote, ticket=ticket)
    except ValueError as exc:
        db.rollback()
        flash(request, "Purchase failed", str(exc), "destructive")
        return _dashboard_redirect("buy")

    flash(
        request,
        "Purchase processed!",
        f"{quote['quantity']} ticket(s) - Total: {format_currency(quote['amount_charged'])}",
    )
    return _dashboard_redirect("buy")


@router.post("/charges/{charge_id}/pay")
def pay_charge(
    request: Request,
    charge_id: int,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _can_use_dashboard(user):
        return _login_redirect()
    charge = get_charge(db, charge_id)
    if charge is None or (charge.user_id != user.id and not user.is_admin):
        flash(request, "Charge not found", "", "destructive")
        return _dashboard_redirect("buy")
    try:
        mark_charge_paid(db, charge)
    except ValueError as exc:
        flash(request, "Payment failed", str(exc), "destructive")
        return _dashboard_redirect("buy")
    flash(request, "Installment paid", format_currency(charge.amount))
    return _dashboard_redirect("buy")


# ---------- Client: subscription plans ----------


@router.post("/plans/subscribe")
def plan_subscribe(
    request: Request,
    tickets: int = Form(...),
    months: int = Form(...),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _can_use_dashboard(user):
        return _login_redirect()
    plan = find_plan(tickets, months)
    if plan is None:
        flash(request, "Plan not found", "", "destructive")
        return _dashboard_redirect("plans")
    subscribe_to_plan(db, user, plan)
    flash(
        request,
        "Plan selected!",
        f"{plan.tickets} tickets for {plan.months} months - {format_currency(plan.total_price)}",
    )
    return _dashboard_redirect("plans", selected=plan.key)


# ---------- Admin tabs ----------


def _admin_only(user: User | None) -> bool:
    return _can_use_dashboard(user) and user.is_admin


@router.post("/tickets")
def ticket_create(
    request: Request,
    event: str = Form(""),
    description: str = Form(""),
    event_date: str = Form(""),
    venue: str = Form(""),
    price: str = Form(""),
    available_quantity: str = Form(""),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _admin_only(user):
        return _login_redirect()
    payload = {
        "event": event,
        "description": description,
        "event_date": event_date,
        "venue": venue,
        "price": price,
        "available_quantity": available_quantity,
    }
    try:
        create_ticket(db, payload, owner_id=user.id)
    except ValueError as exc:
        flash(request, "Could not create ticket", str(exc), "destructive")
    else:
        flash(request, "Ticket created!", "Your event is now on sale.")
    return _dashboard_redirect("tickets")


@router.post("/tickets/{ticket_id}/status")
def ticket_status(
    request: Request,
    ticket_id: int,
    status: str = Form(...),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _admin_only(user):
        return _login_redirect()
    ticket = get_ticket(db, ticket_id)
    if ticket is None:
        flash(request, "Ticket not found", "", "destructive")
        return _dashboard_redirect("tickets")
    try:
        set_ticket_status(db, ticket, status)
    except ValueError as exc:
        flash(request, "Could not update ticket", str(exc), "destructive")
    return _dashboard_redirect("tickets")


@router.post("/subscriptions")
def subscription_create(
    request: Request,
    plan: str = Form(""),
    price: str = Form(""),
    duration: str = Form(""),
    auto_renew: str = Form(""),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _admin_only(user):
        return _login_redirect()
    payload = {"plan": plan, "price": price, "duration": duration, "auto_renew": auto_renew}
    try:
        create_subscription(db, user.id, payload)
    except ValueError as exc:
        flash(request, "Could not create subscription", str(exc), "destructive")
    else:
        flash(request, "Subscription created!", "Your new subscription is active.")
    return _dashboard_redirect("subscriptions")


@router.post("/subscriptions/{subscription_id}/cancel")
def subscription_cancel(
    request: Request,
    subscription_id: int,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _admin_only(user):
        return _login_redirect()
    subscription = get_subscription(db, subscription_id)
    if subscription is None or subscription.user_id != user.id:
        flash(request, "Subscription not found", "", "destructive")
    else:
        set_subscription_status(db, subscription, SUBSCRIPTION_STATUS_CANCELLED)
        flash(request, "Subscription cancelled", subscription.plan)
    return _dashboard_redirect("subscriptions")


@router.post("/accesses/{access_id}/status")
def access_status(
    request: Request,
    access_id: int,
    status: str = Form(...),
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _admin_only(user):
        return _login_redirect()
    access = get_access(db, access_id)
    if access is None:
        flash(request, "Access not found", "", "destructive")
        return _dashboard_redirect("accesses")
    try:
        set_access_status(db, access, status)
    except ValueError as exc:
        flash(request, "Could not update access", str(exc), "destructive")
    return _dashboard_redirect("accesses")


@router.post("/users/{user_id}/{action}")
def user_approval(
    request: Request,
    user_id: str,
    action: str,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not _admin_only(user):
        return _login_redirect()
    target = get_user(db, user_id)
    if target is None or action not in ("approve", "revoke"):
        flash(request, "User not found", "", "destructive")
        return _dashboard_redirect("users")
    approved = action == "approve"
    set_user_approval(db, target, approved)
    if approved:
        flash(request, "User approved", f"{target.display_name} can now sign in.")
    else:
        flash(request, "Approval removed", f"{target.display_name} can no longer sign in.")
    return _dashboard_redirect("users")
