"""Environment-driven configuration for Gate Pass.

Every setting the service reads lives on ``AppSettings``. Values come from the
process environment first and then from ``.env``/``.env.local`` so a developer
can boot the app locally without exporting anything.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AUTH_PROVIDER_CHOICES = ("remote", "mock")


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Alice Gate Pass"
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parent.parent)
    DATA_DIR: Path = Field(default_factory=lambda: Path.cwd() / "data")
    TEMPLATES_DIR: Path | None = None
    STATIC_DIR: Path | None = None
    TZ: str = "America/Sao_Paulo"
    LOG_LEVEL: str = "INFO"

    # Browser sessions (the signed-in user id lives in a signed cookie)
    APP_SECRET: str = "dev-insecure-secret-change-me"
    SESSION_COOKIE_NAME: str = "gp_session"
    SESSION_MAX_AGE: int = 60 * 60 * 24 * 30

    # Bearer tokens for API clients
    JWT_SECRET: str = "change-me"
    JWT_ACCESS_TTL_MIN: int = 15
    JWT_REFRESH_TTL_DAYS: int = 7

    # Authentication backend
    AUTH_PROVIDER: str = "mock"
    ADMIN_EMAIL: str = "alice@gatepass.com"
    BACKEND_URL: str = ""
    BACKEND_ANON_KEY: str = ""
    BACKEND_TIMEOUT: float = 10.0
    PASSWORD_RESET_REDIRECT: str = "http://localhost:8089/auth?reset=1"

    TICKET_PRICE: Decimal = Decimal("90.00")

    DB_URL: str = Field(default="", validation_alias="DATABASE_URL")

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    @field_validator("AUTH_PROVIDER")
    @classmethod
    def check_auth_provider(cls, value: str) -> str:
        normalized = (value or "").strip().lower()
        if normalized not in AUTH_PROVIDER_CHOICES:
            raise ValueError(f"AUTH_PROVIDER must be one of {', '.join(AUTH_PROVIDER_CHOICES)}")
        return normalized

    @property
    def backend_url(self) -> str:
        return self.BACKEND_URL.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    if settings.TEMPLATES_DIR is None:
        settings.TEMPLATES_DIR = settings.BASE_DIR / "templates"
    if settings.STATIC_DIR is None:
        settings.STATIC_DIR = settings.BASE_DIR / "static"
    if not settings.DB_URL:
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'gatepass.db'}"
    return settings


# Importing ``settings`` anywhere gives the configured values without
# rebuilding the object each time.
settings = get_settings()
