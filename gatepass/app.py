"""Application wiring for Gate Pass.

Builds the FastAPI instance, creates missing tables, installs the session,
request-id and security-header middleware, plugs in the page and API routers
and registers the JSON error envelope.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.errors import http_exception_handler, validation_exception_handler
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Registers every table on Base.metadata.
from . import models as _models  # noqa: F401
from .routers import (
    api_accesses,
    api_admin,
    api_auth,
    api_checkout,
    api_plans,
    api_subscriptions,
    api_tickets,
    auth_ui,
    ui,
)

app = FastAPI(title=settings.APP_NAME)

app.mount("/static", StaticFiles(directory=str(settings.STATIC_DIR)), name="static")

Base.metadata.create_all(bind=engine)

# ---------- Middleware ----------
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.APP_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=False,  # flip once the app only runs behind HTTPS
)
app.add_middleware(RequestIdMiddleware)

# ---------- Routers ----------
# Pages
app.include_router(auth_ui.router)
app.include_router(ui.router)

# JSON API
app.include_router(api_auth.router)
app.include_router(api_tickets.router)
app.include_router(api_subscriptions.router)
app.include_router(api_accesses.router)
app.include_router(api_plans.router)
app.include_router(api_checkout.router)
app.include_router(api_admin.router)

# ---------- Exception handling ----------
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


__all__ = ["app"]
