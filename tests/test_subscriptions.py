from datetime import date, timedelta
from decimal import Decimal

import pytest

from gatepass.crud.subscriptions import (
    create_subscription,
    expire_subscriptions,
    list_subscriptions_for_user,
    set_subscription_status,
    subscribe_to_plan,
)
from gatepass.services.plans import find_plan
from gatepass.services.subscriptions import (
    add_months,
    calculate_end_date,
    days_until,
    is_expiring_soon,
)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


@pytest.mark.parametrize(
    "duration, expected",
    [
        ("monthly", date(2024, 4, 15)),
        ("quarterly", date(2024, 6, 15)),
        ("semiannual", date(2024, 9, 15)),
        ("annual", date(2025, 3, 15)),
        ("fortnightly", date(2024, 4, 15)),
    ],
)
def test_calculate_end_date(duration, expected):
    assert calculate_end_date(duration, date(2024, 3, 15)) == expected


def test_expiring_soon_window_is_seven_days():
    today = date(2024, 5, 1)

    assert days_until(today + timedelta(days=3), today) == 3
    assert is_expiring_soon(today + timedelta(days=7), today) is True
    assert is_expiring_soon(today + timedelta(days=1), today) is True
    assert is_expiring_soon(today + timedelta(days=8), today) is False
    assert is_expiring_soon(today, today) is False
    assert is_expiring_soon(today - timedelta(days=1), today) is False
    assert is_expiring_soon(None, today) is False


def test_create_subscription_sets_dates_and_status(db_session, admin_user):
    sub = create_subscription(
        db_session,
        admin_user.id,
        {"plan": "Premium", "price": "99,90", "duration": "Quarterly", "auto_renew": "on"},
        today=date(2024, 1, 10),
    )

    assert sub.price == Decimal("99.90")
    assert sub.duration == "quarterly"
    assert sub.start_date == date(2024, 1, 10)
    assert sub.end_date == date(2024, 4, 10)
    assert sub.auto_renew is True
    assert sub.status == "active"


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"plan": "", "price": "10", "duration": "monthly"}, "plan is required"),
        ({"plan": "Basic", "price": "", "duration": "monthly"}, "price is required"),
        ({"plan": "Basic", "price": "-1", "duration": "monthly"}, "negative"),
        ({"plan": "Basic", "price": "10", "duration": "weekly"}, "duration"),
    ],
)
def test_create_subscription_validates_payload(db_session, admin_user, payload, message):
    with pytest.raises(ValueError, match=message):
        create_subscription(db_session, admin_user.id, payload)


@pytest.mark.parametrize("price", ["NaN", "sNaN", "Infinity", "-Infinity"])
def test_create_subscription_rejects_non_finite_price(db_session, admin_user, price):
    payload = {"plan": "Basic", "price": price, "duration": "monthly"}
    with pytest.raises(ValueError, match="invalid amount"):
        create_subscription(db_session, admin_user.id, payload)


def test_subscribe_to_plan_bills_monthly_price(db_session, client_user):
    plan = find_plan(20, 6)

    sub = subscribe_to_plan(db_session, client_user, plan, today=date(2024, 2, 1))

    assert sub.plan == "20 tickets / 6 months"
    assert sub.price == Decimal("540.00")
    assert sub.duration == "semiannual"
    assert sub.end_date == date(2024, 8, 1)
    assert sub.auto_renew is True


def test_expire_subscriptions_only_touches_past_active_rows(db_session, admin_user):
    old = create_subscription(
        db_session, admin_user.id, {"plan": "Old", "price": "10", "duration": "monthly"}, today=date(2024, 1, 1)
    )
    current = create_subscription(
        db_session, admin_user.id, {"plan": "Current", "price": "10", "duration": "annual"}, today=date(2024, 1, 1)
    )
    cancelled = create_subscription(
        db_session, admin_user.id, {"plan": "Cancelled", "price": "10", "duration": "monthly"}, today=date(2024, 1, 1)
    )
    set_subscription_status(db_session, cancelled, "cancelled")

    assert expire_subscriptions(db_session, today=date(2024, 3, 1)) == 1

    statuses = {sub.plan: sub.status for sub in list_subscriptions_for_user(db_session, admin_user.id)}
    assert statuses == {"Old": "expired", "Current": "active", "Cancelled": "cancelled"}
    assert old.status == "expired"
    assert current.status == "active"


def test_set_subscription_status_rejects_unknown(db_session, admin_user):
    sub = create_subscription(db_session, admin_user.id, {"plan": "Basic", "price": "10", "duration": "monthly"})
    with pytest.raises(ValueError):
        set_subscription_status(db_session, sub, "paused")
