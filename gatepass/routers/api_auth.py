from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..core.security import issue_token_pair, refresh_access_token
from ..db.session import get_db
from ..deps.auth import require_user
from ..models.user import User
from ..schemas.auth import (
    MessageResponse,
    PasswordResetRequest,
    RefreshRequest,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
    TokenResponse,
)
from ..schemas.user import UserOut
from ..services.auth import AuthProvider, get_auth_provider, remember_identity

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/token", response_model=TokenResponse, summary="Exchange e-mail and password for JWTs")
def exchange_token(
    payload: SignInRequest,
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider),
):
    result = provider.sign_in(payload.email, payload.password)
    if not result.success or result.identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=result.error or "Invalid credentials")
    user = remember_identity(db, result.identity)
    pair = issue_token_pair(subject=user.id)
    return TokenResponse(**pair.model_dump())


@router.post("/refresh", response_model=TokenResponse, summary="Refresh access token")
def refresh_token(payload: RefreshRequest):
    try:
        pair = refresh_access_token(payload.refresh_token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
    return TokenResponse(**pair.model_dump())


@router.post("/signup", response_model=SignUpResponse, status_code=201)
def sign_up(
    payload: SignUpRequest,
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider),
):
    result = provider.sign_up(payload.email, payload.password, payload.full_name, payload.phone)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error or "Sign up failed")
    if result.identity is not None:
        remember_identity(db, result.identity)
    return SignUpResponse(needs_approval=result.needs_approval)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: PasswordResetRequest, provider: AuthProvider = Depends(get_auth_provider)):
    result = provider.reset_password(payload.email)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error or "Password reset failed")
    return MessageResponse(message="Password reset e-mail sent")


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(require_user)):
    return UserOut.model_validate(user)
