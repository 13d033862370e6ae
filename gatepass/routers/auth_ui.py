"""Sign in, sign up, password reset and sign out pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..core.flash import flash, pop_flashes
from ..core.jinja import get_templates
from ..db.session import get_db
from ..deps.auth import SESSION_TOKEN_KEY, SESSION_USER_KEY, get_optional_user
from ..models.user import User
from ..services.auth import MOCK_USERS, AuthProvider, get_auth_provider, remember_identity

router = APIRouter()
templates = get_templates()

AUTH_TABS = ("signin", "signup", "reset")


def _back_to_auth(tab: str = "signin") -> RedirectResponse:
    return RedirectResponse(url=f"/auth?tab={tab}", status_code=303)


@router.get("/auth", response_class=HTMLResponse)
def auth_page(
    request: Request,
    tab: str = "signin",
    user: User | None = Depends(get_optional_user),
    provider: AuthProvider = Depends(get_auth_provider),
):
    if user is not None and user.is_approved:
        return RedirectResponse(url="/dashboard", status_code=303)
    context = {
        "tab": tab if tab in AUTH_TABS else "signin",
        "provider": provider.name,
        "demo_accounts": [
            {"email": record["email"], "name": record["full_name"]} for record in MOCK_USERS
        ]
        if provider.name == "mock"
        else [],
        "messages": pop_flashes(request),
    }
    return templates.TemplateResponse(request, "auth.html", context)


@router.post("/auth/signin")
def sign_in(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider),
):
    result = provider.sign_in(email, password)
    if not result.success or result.identity is None:
        flash(request, "Sign in failed", result.error or "Invalid credentials", "destructive")
        return _back_to_auth()

    user = remember_identity(db, result.identity)
    if not user.is_approved:
        provider.sign_out(result.access_token)
        flash(
            request,
            "Account awaiting approval",
            "An administrator needs to approve your account before you can sign in.",
            "destructive",
        )
        return _back_to_auth()

    request.session[SESSION_USER_KEY] = user.id
    if result.access_token:
        request.session[SESSION_TOKEN_KEY] = result.access_token
    flash(request, "Signed in", f"Welcome to {templates.env.globals['app_name']}!")
    return RedirectResponse(url="/dashboard", status_code=303)


@router.post("/auth/signup")
def sign_up(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    full_name: str = Form(""),
    phone: str = Form(""),
    db: Session = Depends(get_db),
    provider: AuthProvider = Depends(get_auth_provider),
):
    result = provider.sign_up(email, password, full_name, phone)
    if not result.success:
        flash(request, "Sign up failed", result.error or "", "destructive")
        return _back_to_auth("signup")
    if result.identity is not None:
        remember_identity(db, result.identity)
    if result.needs_approval:
        flash(request, "Account created", "An administrator will review your account shortly.")
    else:
        flash(request, "Account created", "You can sign in now.")
    return _back_to_auth()


@router.post("/auth/reset")
def reset_password(
    request: Request,
    email: str = Form(""),
    provider: AuthProvider = Depends(get_auth_provider),
):
    result = provider.reset_password(email)
    if result.success:
        flash(request, "Check your inbox", "We sent a link to reset your password.")
        return _back_to_auth()
    flash(request, "Password reset failed", result.error or "", "destructive")
    return _back_to_auth("reset")


@router.get("/logout")
def logout(
    request: Request,
    user: User | None = Depends(get_optional_user),
    provider: AuthProvider = Depends(get_auth_provider),
):
    provider.sign_out(request.session.get(SESSION_TOKEN_KEY))
    request.session.clear()
    if user is not None:
        flash(request, "Signed out", f"See you soon, {user.display_name}!")
    return RedirectResponse(url="/", status_code=303)
