from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from ..core.security import decode_token
from ..crud.users import get_user
from ..db.session import get_db
from ..middlewares import principal_ctx_var
from ..models.user import User

SESSION_USER_KEY = "user_id"
SESSION_TOKEN_KEY = "backend_token"


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def session_user_id(request: Request) -> str | None:
    try:
        value = request.session.get(SESSION_USER_KEY)
    except AssertionError:
        # SessionMiddleware is not installed (bare routers in tests).
        return None
    return str(value) if value else None


def get_optional_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> User | None:
    user_id = session_user_id(request)
    scheme_name = "session"
    if not user_id and authorization:
        scheme, credentials = get_authorization_scheme_param(authorization)
        if scheme.lower() == "bearer" and credentials:
            try:
                payload = decode_token(credentials, verify_type="access")
            except ValueError as exc:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
            user_id = payload.sub
            scheme_name = "jwt"
    if not user_id:
        return None
    user = get_user(db, user_id)
    if user is None:
        return None
    _set_principal(request, f"{scheme_name}:{user.id}")
    return user


def require_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization required")
    return user


def require_approved_user(user: User = Depends(require_user)) -> User:
    if not user.is_approved:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account awaiting approval")
    return user


def require_admin(user: User = Depends(require_approved_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required")
    return user
