from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..core.clock import utcnow_iso
from ..core.statuses import (
    TICKET_STATUS_ACTIVE,
    TICKET_STATUS_CHOICES,
    TICKET_STATUS_SOLD_OUT,
    normalize_choice,
)
from ..models.ticket import Ticket
from ..services.pricing import quantize_currency, to_decimal

logger = logging.getLogger(__name__)


def _parse_date(value: object, field: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"{field} must be an ISO date (YYYY-MM-DD)") from exc


def _parse_int(value: object, field: str) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field} must be a whole number") from exc


def list_tickets(db: Session, limit: int = 200, offset: int = 0) -> list[Ticket]:
    stmt = select(Ticket).order_by(desc(Ticket.created_at), desc(Ticket.id)).limit(limit).offset(offset)
    return list(db.execute(stmt).scalars().all())


def list_tickets_for_owner(db: Session, owner_id: str, limit: int = 200, offset: int = 0) -> list[Ticket]:
    stmt = (
        select(Ticket)
        .where(Ticket.created_by == owner_id)
        .order_by(desc(Ticket.created_at), desc(Ticket.id))
        .limit(limit)
        .offset(offset)
    )
    return list(db.execute(stmt).scalars().all())


def list_on_sale(db: Session, limit: int = 200) -> list[Ticket]:
    stmt = (
        select(Ticket)
        .where(Ticket.status == TICKET_STATUS_ACTIVE)
        .order_by(Ticket.event_date, Ticket.id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def get_ticket(db: Session, ticket_id: int) -> Ticket | None:
    return db.get(Ticket, ticket_id)


def create_ticket(db: Session, payload: dict, owner_id: str | None) -> Ticket:
    event = (payload.get("event") or "").strip()
    if not event:
        raise ValueError("event is required")
    if payload.get("price") in (None, ""):
        raise ValueError("price is required")
    price = to_decimal(payload.get("price"))
    if price < 0:
        raise ValueError("price cannot be negative")
    available = _parse_int(payload.get("available_quantity"), "available_quantity")
    if available < 1:
        raise ValueError("available_quantity must be at least 1")

    ticket = Ticket(
        event=event,
        description=(payload.get("description") or None),
        event_date=_parse_date(payload.get("event_date"), "event_date"),
        venue=(payload.get("venue") or None),
        price=quantize_currency(price),
        available_quantity=available,
        sold_quantity=0,
        status=TICKET_STATUS_ACTIVE,
        created_by=owner_id,
        created_at=utcnow_iso(),
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    logger.info("ticket.created", extra={"extra_data": {"ticket_id": ticket.id, "owner": owner_id}})
    return ticket


def set_ticket_status(db: Session, ticket: Ticket, status: str) -> Ticket:
    ticket.status = normalize_choice(status, TICKET_STATUS_CHOICES, "status")
    db.commit()
    db.refresh(ticket)
    return ticket


def reserve_tickets(db: Session, ticket: Ticket, quantity: int, *, commit: bool = True) -> Ticket:
    """Move ``quantity`` units from available to sold.

    A listing that runs out flips to ``sold-out``.
    """

    if quantity < 1:
        raise ValueError("quantity must be at least 1")
    if ticket.status != TICKET_STATUS_ACTIVE:
        raise ValueError(f"{ticket.event} is not on sale")
    if quantity > ticket.available_quantity:
        raise ValueError(f"only {ticket.available_quantity} ticket(s) left for {ticket.event}")
    ticket.available_quantity -= quantity
    ticket.sold_quantity += quantity
    if ticket.available_quantity == 0:
        ticket.status = TICKET_STATUS_SOLD_OUT
    if commit:
        db.commit()
        db.refresh(ticket)
    return ticket


def ticket_revenue(ticket: Ticket) -> Decimal:
    return quantize_currency(Decimal(ticket.sold_quantity or 0) * Decimal(ticket.price or 0))
