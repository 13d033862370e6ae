from __future__ import annotations

import calendar
from datetime import date

from ..core.statuses import (
    DURATION_ANNUAL,
    DURATION_MONTHLY,
    DURATION_QUARTERLY,
    DURATION_SEMIANNUAL,
)

DURATION_MONTHS = {
    DURATION_MONTHLY: 1,
    DURATION_QUARTERLY: 3,
    DURATION_SEMIANNUAL: 6,
    DURATION_ANNUAL: 12,
}
EXPIRY_WARNING_DAYS = 7


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping the day to the month's end."""

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def calculate_end_date(duration: str | None, start: date | None = None) -> date:
    # Unknown durations bill as a single month.
    months = DURATION_MONTHS.get((duration or "").strip().lower(), 1)
    return add_months(start or date.today(), months)


def days_until(end: date, today: date | None = None) -> int:
    return (end - (today or date.today())).days


def is_expiring_soon(end: date | None, today: date | None = None) -> bool:
    if end is None:
        return False
    remaining = days_until(end, today)
    return 0 < remaining <= EXPIRY_WARNING_DAYS
