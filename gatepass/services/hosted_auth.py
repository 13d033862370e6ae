"""HTTP client for the hosted authentication backend.

The backend speaks the GoTrue REST dialect: ``/auth/v1/signup``,
``/auth/v1/token?grant_type=password``, ``/auth/v1/recover`` and
``/auth/v1/logout``. Every request carries the project's anon key.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..core.config import settings

logger = logging.getLogger(__name__)


class HostedAuthNotConfigured(Exception):
    """Raised when the remote provider is selected without a backend URL/key."""


class HostedAuthError(Exception):
    """The backend rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        for key in ("error_description", "msg", "message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return f"Authentication backend returned HTTP {response.status_code}"


def _raise_for_status(response: httpx.Response, context: str) -> None:
    if response.is_success:
        return
    message = _error_message(response)
    if response.status_code >= 500:
        logger.error("Auth backend error %s during %s", response.status_code, context)
    else:
        logger.info("Auth backend rejected %s: %s", context, message)
    raise HostedAuthError(message, status_code=response.status_code)


class HostedAuthClient:
    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.backend_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.BACKEND_ANON_KEY
        if not self.base_url or not self.api_key:
            raise HostedAuthNotConfigured("BACKEND_URL and BACKEND_ANON_KEY must be set for remote auth")
        self._client = httpx.Client(
            base_url=f"{self.base_url}/auth/v1",
            timeout=timeout if timeout is not None else settings.BACKEND_TIMEOUT,
            transport=transport,
            headers={"apikey": self.api_key, "Content-Type": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def _post(
        self,
        path: str,
        context: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        bearer: str | None = None,
    ) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {bearer or self.api_key}"}
        try:
            response = self._client.post(path, json=json, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Auth backend unreachable during %s: %s", context, exc)
            raise HostedAuthError("Authentication service is unavailable") from exc
        _raise_for_status(response, context)
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as exc:
            raise HostedAuthError("Authentication backend sent an unreadable response") from exc
        return data if isinstance(data, dict) else {}

    def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(
            "/signup",
            "sign up",
            json={"email": email, "password": password, "data": metadata},
        )

    def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        return self._post(
            "/token",
            "sign in",
            json={"email": email, "password": password},
            params={"grant_type": "password"},
        )

    def reset_password_for_email(self, email: str, redirect_to: str | None = None) -> None:
        params = {"redirect_to": redirect_to} if redirect_to else None
        self._post("/recover", "password reset", json={"email": email}, params=params)

    def sign_out(self, access_token: str) -> None:
        self._post("/logout", "sign out", bearer=access_token)


def extract_user(payload: Dict[str, Any]) -> Dict[str, Any] | None:
    """Pull the user object out of a sign-up or token response."""

    user = payload.get("user") if isinstance(payload.get("user"), dict) else None
    if user is None and payload.get("id") and payload.get("email"):
        user = payload
    return user
