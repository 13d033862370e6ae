from datetime import date
from decimal import Decimal

from gatepass.crud.charges import record_purchase
from gatepass.crud.subscriptions import subscribe_to_plan
from gatepass.crud.tickets import create_ticket
from gatepass.services.plans import most_popular_plan
from gatepass.services.pricing import build_quote
from gatepass.services.stats import (
    collect_admin_stats,
    list_users_with_summary,
    user_financial_summary,
)


def test_collect_admin_stats_counts_everything(db_session, admin_user, client_user):
    ticket = create_ticket(db_session, {"event": "Show", "price": "90", "available_quantity": "10"}, admin_user.id)
    subscribe_to_plan(db_session, client_user, most_popular_plan())
    record_purchase(
        db_session, client_user, build_quote(2, "credit", 3, unit_price=Decimal(ticket.price)), ticket=ticket
    )

    assert collect_admin_stats(db_session) == {
        "total_users": 2,
        "total_tickets": 1,
        "total_subscriptions": 1,
        "total_accesses": 1,
        "total_pending_charges": 2,
    }


def test_empty_summary(db_session, client_user):
    assert user_financial_summary(db_session, client_user, today=date(2024, 1, 1)) == {
        "tickets_purchased": 0,
        "total_paid": Decimal("0.00"),
        "total_pending": Decimal("0.00"),
        "days_overdue": 0,
    }


def test_summary_counts_days_since_oldest_open_charge(db_session, client_user):
    record_purchase(db_session, client_user, build_quote(1, "credit", 3), today=date(2024, 1, 10))
    record_purchase(db_session, client_user, build_quote(2, "pix"), today=date(2024, 1, 10))

    summary = user_financial_summary(db_session, client_user, today=date(2024, 3, 15))

    assert summary["tickets_purchased"] == 3
    assert summary["total_paid"] == Decimal("211.80")
    assert summary["total_pending"] == Decimal("63.60")
    # Oldest open installment was due on 2024-02-10.
    assert summary["days_overdue"] == 34

    on_time = user_financial_summary(db_session, client_user, today=date(2024, 2, 1))
    assert on_time["days_overdue"] == 0


def test_list_users_with_summary_filters_by_term(db_session, admin_user, client_user):
    rows = list_users_with_summary(db_session, "joão", today=date(2024, 1, 1))

    assert [row["user"].id for row in rows] == [client_user.id]
    assert rows[0]["tickets_purchased"] == 0
    assert len(list_users_with_summary(db_session, None)) == 2
