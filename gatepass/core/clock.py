from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from .config import settings


def utcnow_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def local_today() -> date:
    """Calendar date in the configured timezone; subscriptions and due dates use it."""

    tz = ZoneInfo(settings.TZ) if settings.TZ else timezone.utc
    return datetime.now(tz=tz).date()
