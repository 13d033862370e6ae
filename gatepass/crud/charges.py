"""Checkout bookkeeping: purchases, the installments they leave open, and payment."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.clock import local_today, utcnow_iso
from ..core.statuses import CHARGE_STATUS_OPEN, CHARGE_STATUS_PAID
from ..models.charge import PendingCharge, Purchase
from ..models.ticket import Ticket
from ..models.user import User
from ..services.pricing import quantize_currency
from ..services.subscriptions import add_months
from .accesses import create_access
from .tickets import reserve_tickets

logger = logging.getLogger(__name__)


def record_purchase(
    db: Session,
    user: User,
    quote: dict,
    ticket: Ticket | None = None,
    today: date | None = None,
) -> Purchase:
    """Persist a priced checkout.

    With a ticket, its stock is reserved and the buyer gets a pending access.
    Credit purchases split in n installments pay the first now and leave n-1
    monthly charges open.
    """

    if not quote.get("payment_method"):
        raise ValueError("payment_method is required")
    installments = int(quote.get("installments") or 1)
    per_installment = Decimal(quote["installment_amount"])
    charged = Decimal(quote["amount_charged"])
    # The first installment absorbs rounding so the parts add up to the charge.
    remaining = [per_installment] * (installments - 1)
    first_payment = quantize_currency(charged - sum(remaining, Decimal("0")))

    if ticket is not None:
        reserve_tickets(db, ticket, int(quote["quantity"]), commit=False)

    purchase = Purchase(
        user_id=user.id,
        ticket_id=ticket.id if ticket is not None else None,
        quantity=int(quote["quantity"]),
        unit_price=Decimal(quote["unit_price"]),
        total=Decimal(quote["total"]),
        payment_method=quote["payment_method"],
        installments=installments,
        amount_paid=first_payment,
        created_at=utcnow_iso(),
    )
    db.add(purchase)
    db.flush()

    start = today or local_today()
    for index, amount in enumerate(remaining, start=1):
        db.add(
            PendingCharge(
                user_id=user.id,
                purchase_id=purchase.id,
                amount=amount,
                due_date=add_months(start, index),
                status=CHARGE_STATUS_OPEN,
                created_at=utcnow_iso(),
            )
        )

    if ticket is not None:
        create_access(db, user.id, ticket.id, commit=False)

    db.commit()
    db.refresh(purchase)
    logger.info(
        "purchase.recorded",
        extra={
            "extra_data": {
                "purchase_id": purchase.id,
                "user_id": user.id,
                "quantity": purchase.quantity,
                "method": purchase.payment_method,
                "installments": installments,
            }
        },
    )
    return purchase


def list_purchases_for_user(db: Session, user_id: str) -> list[Purchase]:
    stmt = select(Purchase).where(Purchase.user_id == user_id).order_by(desc(Purchase.created_at), desc(Purchase.id))
    return list(db.execute(stmt).scalars().all())


def list_pending_charges(db: Session, user_id: str | None = None, *, open_only: bool = True) -> list[PendingCharge]:
    stmt = select(PendingCharge)
    if user_id:
        stmt = stmt.where(PendingCharge.user_id == user_id)
    if open_only:
        stmt = stmt.where(PendingCharge.status == CHARGE_STATUS_OPEN)
    stmt = stmt.order_by(PendingCharge.due_date, PendingCharge.id)
    return list(db.execute(stmt).scalars().all())


def get_charge(db: Session, charge_id: int) -> PendingCharge | None:
    return db.get(PendingCharge, charge_id)


def mark_charge_paid(db: Session, charge: PendingCharge) -> PendingCharge:
    if charge.status == CHARGE_STATUS_PAID:
        raise ValueError("charge is already paid")
    charge.status = CHARGE_STATUS_PAID
    if charge.purchase is not None:
        charge.purchase.amount_paid = quantize_currency(
            Decimal(charge.purchase.amount_paid or 0) + Decimal(charge.amount)
        )
    db.commit()
    db.refresh(charge)
    logger.info("charge.paid", extra={"extra_data": {"charge_id": charge.id, "user_id": charge.user_id}})
    return charge
