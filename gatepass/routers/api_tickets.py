from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.tickets import (
    create_ticket,
    get_ticket,
    list_on_sale,
    list_tickets_for_owner,
    set_ticket_status,
)
from ..db.session import get_db
from ..deps.auth import require_admin, require_approved_user
from ..models.user import User
from ..schemas.ticket import TicketCreate, TicketOut, TicketStatusUpdate

router = APIRouter(prefix="/api/v1/tickets", tags=["tickets"])


@router.get("", response_model=list[TicketOut])
def api_list_my_tickets(user: User = Depends(require_admin), db: Session = Depends(get_db)):
    return [TicketOut.model_validate(t) for t in list_tickets_for_owner(db, user.id)]


@router.get("/on-sale", response_model=list[TicketOut], dependencies=[Depends(require_approved_user)])
def api_list_on_sale(db: Session = Depends(get_db)):
    return [TicketOut.model_validate(t) for t in list_on_sale(db)]


@router.post("", response_model=TicketOut, status_code=201)
def api_create_ticket(payload: TicketCreate, user: User = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        ticket = create_ticket(db, payload.model_dump(), owner_id=user.id)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TicketOut.model_validate(ticket)


@router.get("/{ticket_id}", response_model=TicketOut, dependencies=[Depends(require_approved_user)])
def api_get_ticket(ticket_id: int, db: Session = Depends(get_db)):
    ticket = get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(404, "Not found")
    return TicketOut.model_validate(ticket)


@router.post("/{ticket_id}/status", response_model=TicketOut, dependencies=[Depends(require_admin)])
def api_set_ticket_status(ticket_id: int, payload: TicketStatusUpdate, db: Session = Depends(get_db)):
    ticket = get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(404, "Not found")
    try:
        updated = set_ticket_status(db, ticket, payload.status)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TicketOut.model_validate(updated)
