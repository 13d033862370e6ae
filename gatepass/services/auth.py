"""Authentication providers.

``AuthProvider`` is the one interface the pages and API talk to. Two variants
exist and ``AUTH_PROVIDER`` picks between them:

* ``remote`` delegates every operation to the hosted auth backend.
* ``mock`` checks a short hardcoded list of demo accounts; it cannot create
  accounts or send reset e-mails.

Providers never raise for a failed operation. They return an ``AuthResult``
whose ``error`` carries the message to show the user.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..core.config import settings
from ..crud.users import upsert_user
from ..models.user import User, is_admin_email
from .hosted_auth import HostedAuthClient, HostedAuthError, extract_user

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 8
_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"\d")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Accounts created before the metadata keys were renamed still carry the old ones.
LEGACY_METADATA_KEYS = {"full_name": "nome_completo", "phone": "celular", "approved": "aprovado"}


class AuthIdentity(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    approved: bool = False

    @property
    def is_admin(self) -> bool:
        return is_admin_email(self.email)


class AuthResult(BaseModel):
    success: bool
    error: Optional[str] = None
    identity: Optional[AuthIdentity] = None
    needs_approval: bool = False
    access_token: Optional[str] = None


def validate_sign_up(email: str, password: str, full_name: str, phone: str) -> None:
    if not (full_name or "").strip():
        raise ValueError("Full name is required")
    if not (phone or "").strip():
        raise ValueError("Phone is required")
    if not _EMAIL.match((email or "").strip()):
        raise ValueError("A valid e-mail is required")
    if len(password or "") < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must have at least {PASSWORD_MIN_LENGTH} characters")
    if not _LETTER.search(password) or not _DIGIT.search(password):
        raise ValueError("Password must mix letters and numbers")


class AuthProvider:
    name = "base"

    def sign_up(self, email: str, password: str, full_name: str, phone: str) -> AuthResult:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> AuthResult:
        raise NotImplementedError

    def sign_out(self, access_token: str | None = None) -> None:
        raise NotImplementedError

    def reset_password(self, email: str) -> AuthResult:
        raise NotImplementedError


class RemoteAuthProvider(AuthProvider):
    name = "remote"

    def __init__(self, client: HostedAuthClient | None = None) -> None:
        self.client = client or HostedAuthClient()

    @staticmethod
    def _metadata_value(metadata: Dict[str, Any], key: str) -> Any:
        value = metadata.get(key)
        if value in (None, ""):
            value = metadata.get(LEGACY_METADATA_KEYS[key])
        return value

    @classmethod
    def _identity(cls, user: Dict[str, Any]) -> AuthIdentity:
        metadata = user.get("user_metadata") or {}
        email = (user.get("email") or "").strip().lower()
        return AuthIdentity(
            id=str(user.get("id")),
            email=email,
            full_name=cls._metadata_value(metadata, "full_name"),
            phone=cls._metadata_value(metadata, "phone"),
            approved=bool(cls._metadata_value(metadata, "approved")) or is_admin_email(email),
        )

    def sign_up(self, email: str, password: str, full_name: str, phone: str) -> AuthResult:
        try:
            validate_sign_up(email, password, full_name, phone)
        except ValueError as exc:
            return AuthResult(success=False, error=str(exc))
        email = email.strip().lower()
        metadata = {
            "full_name": full_name.strip(),
            "phone": phone.strip(),
            "approved": is_admin_email(email),
        }
        try:
            payload = self.client.sign_up(email, password, metadata)
        except HostedAuthError as exc:
            return AuthResult(success=False, error=exc.message)
        user = extract_user(payload)
        identity = self._identity(user) if user else None
        return AuthResult(
            success=True,
            identity=identity,
            needs_approval=not is_admin_email(email),
            access_token=payload.get("access_token"),
        )

    def sign_in(self, email: str, password: str) -> AuthResult:
        try:
            payload = self.client.sign_in_with_password((email or "").strip().lower(), password or "")
        except HostedAuthError as exc:
            logger.info("auth.sign_in_failed", extra={"extra_data": {"provider": self.name}})
            return AuthResult(success=False, error=exc.message)
        user = extract_user(payload)
        if not user:
            return AuthResult(success=False, error="Authentication backend returned no user")
        return AuthResult(
            success=True,
            identity=self._identity(user),
            access_token=payload.get("access_token"),
        )

    def sign_out(self, access_token: str | None = None) -> None:
        if not access_token:
            return
        try:
            self.client.sign_out(access_token)
        except HostedAuthError as exc:
            # The local session is dropped either way.
            logger.warning("Remote sign out failed: %s", exc.message)

    def reset_password(self, email: str) -> AuthResult:
        try:
            self.client.reset_password_for_email((email or "").strip().lower(), settings.PASSWORD_RESET_REDIRECT)
        except HostedAuthError as exc:
            return AuthResult(success=False, error=exc.message)
        return AuthResult(success=True)


def _hash(password: str) -> bytes:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4))


# Demo accounts; both use the password "123456".
MOCK_USERS: tuple[Dict[str, Any], ...] = (
    {
        "id": "admin-user-id",
        "email": "alice@gatepass.com",
        "password_hash": _hash("123456"),
        "full_name": "Alice Wonderland",
        "phone": "+55 11 99999-9999",
    },
    {
        "id": "client-user-id",
        "email": "joao@cliente.com",
        "password_hash": _hash("123456"),
        "full_name": "João Silva",
        "phone": "+55 11 88888-8888",
    },
)

MOCK_CREDENTIALS_HINT = "Invalid credentials. Use alice@gatepass.com or joao@cliente.com / 123456"
MOCK_UNAVAILABLE = "Account creation and password reset need the remote auth backend. Use the demo credentials to sign in."


class MockAuthProvider(AuthProvider):
    name = "mock"

    def __init__(self, users: tuple[Dict[str, Any], ...] = MOCK_USERS) -> None:
        self.users = users

    def sign_up(self, email: str, password: str, full_name: str, phone: str) -> AuthResult:
        return AuthResult(success=False, error=MOCK_UNAVAILABLE)

    def sign_in(self, email: str, password: str) -> AuthResult:
        normalized = (email or "").strip().lower()
        for record in self.users:
            if record["email"] != normalized:
                continue
            if bcrypt.checkpw((password or "").encode("utf-8"), record["password_hash"]):
                return AuthResult(
                    success=True,
                    identity=AuthIdentity(
                        id=record["id"],
                        email=record["email"],
                        full_name=record["full_name"],
                        phone=record["phone"],
                        approved=True,
                    ),
                )
            break
        logger.info("auth.sign_in_failed", extra={"extra_data": {"provider": self.name}})
        return AuthResult(success=False, error=MOCK_CREDENTIALS_HINT)

    def sign_out(self, access_token: str | None = None) -> None:
        return None

    def reset_password(self, email: str) -> AuthResult:
        return AuthResult(success=False, error=MOCK_UNAVAILABLE)


def remember_identity(db: Session, identity: AuthIdentity) -> User:
    """Mirror a backend identity into the local ``users`` table."""

    return upsert_user(db, identity.model_dump())


def build_auth_provider(kind: str | None = None) -> AuthProvider:
    selected = (kind or settings.AUTH_PROVIDER).strip().lower()
    if selected == "remote":
        return RemoteAuthProvider()
    if selected == "mock":
        return MockAuthProvider()
    raise ValueError(f"unknown auth provider: {selected}")


@lru_cache(maxsize=1)
def get_auth_provider() -> AuthProvider:
    """FastAPI dependency returning the configured provider (built once)."""

    return build_auth_provider()
