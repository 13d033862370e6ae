from datetime import date
from decimal import Decimal

import pytest

from gatepass.crud.accesses import list_accesses_for_user
from gatepass.crud.charges import (
    get_charge,
    list_pending_charges,
    list_purchases_for_user,
    mark_charge_paid,
    record_purchase,
)
from gatepass.crud.tickets import create_ticket
from gatepass.services.pricing import build_quote


def test_credit_purchase_leaves_monthly_installments_open(db_session, client_user):
    quote = build_quote(1, "credit", 3)

    purchase = record_purchase(db_session, client_user, quote, today=date(2024, 1, 31))

    assert purchase.amount_paid == Decimal("31.80")
    assert purchase.installments == 3
    charges = list_pending_charges(db_session, client_user.id)
    assert [c.due_date for c in charges] == [date(2024, 2, 29), date(2024, 3, 31)]
    assert [c.amount for c in charges] == [Decimal("31.80"), Decimal("31.80")]
    assert all(c.status == "open" for c in charges)


def test_first_installment_absorbs_rounding(db_session, client_user):
    quote = build_quote(1, "credit", 3, unit_price=Decimal("100.00"))

    purchase = record_purchase(db_session, client_user, quote, today=date(2024, 1, 1))

    open_amounts = [c.amount for c in purchase.charges]
    assert open_amounts == [Decimal("35.33"), Decimal("35.33")]
    assert purchase.amount_paid == Decimal("35.34")
    assert purchase.amount_paid + sum(open_amounts) == quote["amount_charged"]


def test_pix_purchase_is_settled_immediately(db_session, client_user):
    purchase = record_purchase(db_session, client_user, build_quote(2, "pix"))

    assert purchase.amount_paid == Decimal("180.00")
    assert purchase.charges == []
    assert list_purchases_for_user(db_session, client_user.id) == [purchase]


def test_purchase_of_listing_reserves_stock_and_grants_access(db_session, admin_user, client_user):
    ticket = create_ticket(
        db_session,
        {"event": "Lollapalooza", "price": "250", "available_quantity": "4"},
        owner_id=admin_user.id,
    )
    quote = build_quote(4, "pix", unit_price=Decimal(ticket.price))

    purchase = record_purchase(db_session, client_user, quote, ticket=ticket)

    assert purchase.ticket_id == ticket.id
    assert purchase.total == Decimal("1000.00")
    assert ticket.status == "sold-out"
    accesses = list_accesses_for_user(db_session, client_user.id)
    assert [(a.ticket_id, a.status) for a in accesses] == [(ticket.id, "pending")]


def test_purchase_without_method_is_rejected(db_session, client_user):
    with pytest.raises(ValueError, match="payment_method"):
        record_purchase(db_session, client_user, build_quote(1))


def test_mark_charge_paid_updates_purchase(db_session, client_user):
    purchase = record_purchase(db_session, client_user, build_quote(1, "credit", 2), today=date(2024, 1, 1))
    charge = get_charge(db_session, purchase.charges[0].id)

    mark_charge_paid(db_session, charge)

    assert charge.status == "paid"
    assert purchase.amount_paid == Decimal("95.40")
    assert list_pending_charges(db_session, client_user.id) == []
    assert len(list_pending_charges(db_session, client_user.id, open_only=False)) == 1
    with pytest.raises(ValueError, match="already paid"):
        mark_charge_paid(db_session, charge)
