from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.charges import (
    get_charge,
    list_pending_charges,
    list_purchases_for_user,
    mark_charge_paid,
    record_purchase,
)
from ..crud.tickets import get_ticket
from ..db.session import get_db
from ..deps.auth import require_approved_user
from ..models.ticket import Ticket
from ..models.user import User
from ..schemas.checkout import CheckoutRequest, PendingChargeOut, PurchaseOut, QuoteOut, QuoteRequest
from ..services.pricing import TICKET_PRICE, build_quote

router = APIRouter(prefix="/api/v1/checkout", tags=["checkout"])


def resolve_listing(db: Session, ticket_id: int | None) -> tuple[Ticket | None, Decimal]:
    """Return the event listing being bought (if any) and the unit price to charge."""

    if ticket_id is None:
        return None, TICKET_PRICE
    ticket = get_ticket(db, ticket_id)
    if ticket is None:
        raise HTTPException(404, "Ticket not found")
    return ticket, Decimal(ticket.price)


@router.post("/quote", response_model=QuoteOut, dependencies=[Depends(require_approved_user)])
def api_quote(payload: QuoteRequest):
    try:
        quote = build_quote(payload.quantity, payload.payment_method, payload.installments)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return QuoteOut(**quote)


@router.post("", response_model=PurchaseOut, status_code=201)
def api_checkout(payload: CheckoutRequest, user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    ticket, unit_price = resolve_listing(db, payload.ticket_id)
    try:
        quote = build_quote(payload.quantity, payload.payment_method, payload.installments, unit_price=unit_price)
        purchase = record_purchase(db, user, quote, ticket=ticket)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return PurchaseOut.model_validate(purchase)


@router.get("/purchases", response_model=list[PurchaseOut])
def api_list_purchases(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    return [PurchaseOut.model_validate(p) for p in list_purchases_for_user(db, user.id)]


@router.get("/charges", response_model=list[PendingChargeOut])
def api_list_charges(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    return [PendingChargeOut.model_validate(c) for c in list_pending_charges(db, user.id)]


@router.post("/charges/{charge_id}/pay", response_model=PendingChargeOut)
def api_pay_charge(charge_id: int, user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    charge = get_charge(db, charge_id)
    if not charge or (charge.user_id != user.id and not user.is_admin):
        raise HTTPException(404, "Not found")
    try:
        paid = mark_charge_paid(db, charge)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return PendingChargeOut.model_validate(paid)
