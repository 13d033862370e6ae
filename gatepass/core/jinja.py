"""Jinja2 environment with the formatting filters every page uses."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from fastapi.templating import Jinja2Templates

from ..services.pricing import format_currency
from .config import settings
from .statuses import DURATION_LABELS

_LOCAL_TZ = ZoneInfo(settings.TZ) if settings.TZ else None


def _to_dt(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None and _LOCAL_TZ:
        dt = dt.replace(tzinfo=_LOCAL_TZ)
    if _LOCAL_TZ:
        dt = dt.astimezone(_LOCAL_TZ)
    return dt


def _fmt_dt(value: Any, fmt: str = "%d/%m/%Y %H:%M") -> str:
    dt = _to_dt(value)
    return dt.strftime(fmt) if dt else ""


def _fmt_date(value: Any, fmt: str = "%d/%m/%Y") -> str:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value.strftime(fmt)
    if isinstance(value, str) and len(value) == 10:
        try:
            return date.fromisoformat(value).strftime(fmt)
        except ValueError:
            return ""
    dt = _to_dt(value)
    return dt.strftime(fmt) if dt else ""


def _fmt_duration(value: Any) -> str:
    return DURATION_LABELS.get(str(value or ""), str(value or ""))


def get_templates() -> Jinja2Templates:
    """Create a ``Jinja2Templates`` instance with our standard filters registered."""

    templates = Jinja2Templates(directory=str(settings.TEMPLATES_DIR))
    env = templates.env
    env.filters["fmt_dt"] = _fmt_dt
    env.filters["fmt_date"] = _fmt_date
    env.filters["fmt_currency"] = format_currency
    env.filters["fmt_duration"] = _fmt_duration
    env.globals["app_name"] = settings.APP_NAME
    return templates
