from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..crud.accesses import get_access, list_accesses_for_user, set_access_status
from ..db.session import get_db
from ..deps.auth import require_admin, require_approved_user
from ..models.user import User
from ..schemas.access import AccessOut, AccessStatusUpdate

router = APIRouter(prefix="/api/v1/accesses", tags=["accesses"])


@router.get("", response_model=list[AccessOut])
def api_list_accesses(user: User = Depends(require_approved_user), db: Session = Depends(get_db)):
    return [AccessOut.model_validate(a) for a in list_accesses_for_user(db, user.id)]


@router.post("/{access_id}/status", response_model=AccessOut, dependencies=[Depends(require_admin)])
def api_set_access_status(access_id: int, payload: AccessStatusUpdate, db: Session = Depends(get_db)):
    access = get_access(db, access_id)
    if not access:
        raise HTTPException(404, "Not found")
    try:
        updated = set_access_status(db, access, payload.status)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return AccessOut.model_validate(updated)
