"""Static subscription plan catalogue.

Plans bundle a number of tickets per month for 3, 6 or 12 months. Longer and
larger plans carry a discount recorded as ``savings`` against buying the same
tickets one by one.
"""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

from pydantic import BaseModel, ConfigDict

from ..core.statuses import DURATION_ANNUAL, DURATION_QUARTERLY, DURATION_SEMIANNUAL
from .pricing import TICKET_PRICE


class Plan(BaseModel):
    model_config = ConfigDict(frozen=True)

    tickets: int
    months: int
    monthly_price: Decimal
    total_price: Decimal
    savings: Decimal

    @property
    def key(self) -> str:
        return f"{self.tickets}-{self.months}"

    @property
    def name(self) -> str:
        return f"{self.tickets} tickets / {self.months} months"


def _plan(tickets: int, months: int, monthly: int, total: int, savings: int) -> Plan:
    return Plan(
        tickets=tickets,
        months=months,
        monthly_price=Decimal(monthly),
        total_price=Decimal(total),
        savings=Decimal(savings),
    )


PLANS: tuple[Plan, ...] = (
    _plan(10, 3, 300, 900, 0),
    _plan(10, 6, 285, 1710, 90),
    _plan(10, 12, 270, 3240, 240),
    _plan(20, 3, 570, 1710, 90),
    _plan(20, 6, 540, 3240, 240),
    _plan(20, 12, 510, 6120, 480),
    _plan(30, 3, 810, 2430, 270),
    _plan(30, 6, 765, 4590, 540),
    _plan(30, 12, 720, 8640, 960),
    _plan(40, 3, 1080, 3240, 360),
    _plan(40, 6, 1020, 6120, 720),
    _plan(40, 12, 960, 11520, 1440),
    _plan(50, 3, 1350, 4050, 450),
    _plan(50, 6, 1275, 7650, 900),
    _plan(50, 12, 1200, 14400, 1800),
)

PLAN_DURATIONS = (3, 6, 12)

DURATION_BY_MONTHS = {
    3: DURATION_QUARTERLY,
    6: DURATION_SEMIANNUAL,
    12: DURATION_ANNUAL,
}

MOST_POPULAR = (20, 6)


def plans_by_duration(months: int) -> list[Plan]:
    return [plan for plan in PLANS if plan.months == months]


def find_plan(tickets: int, months: int) -> Plan | None:
    for plan in PLANS:
        if plan.tickets == tickets and plan.months == months:
            return plan
    return None


def most_popular_plan() -> Plan | None:
    return find_plan(*MOST_POPULAR)


def savings_ratio(plan: Plan, unit_price: Decimal = TICKET_PRICE) -> Fraction:
    """Savings as a share of the list price of every ticket in the plan."""

    list_price = Fraction(plan.tickets) * Fraction(unit_price) * plan.months
    return Fraction(plan.savings) / list_price


def best_value_plan(plans: tuple[Plan, ...] | list[Plan] = PLANS) -> Plan:
    """Plan with the highest savings ratio; equal ratios go to the larger saving."""

    if not plans:
        raise ValueError("no plans to choose from")
    return max(plans, key=lambda plan: (savings_ratio(plan), plan.savings))
