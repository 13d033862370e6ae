from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ..core.config import settings
from ..core.statuses import PAYMENT_METHOD_CHOICES, PAYMENT_METHOD_CREDIT, normalize_choice

TICKET_PRICE = settings.TICKET_PRICE
MIN_QUANTITY = 1
MAX_QUANTITY = 100
INSTALLMENT_INTEREST = Decimal("0.06")
MAX_INSTALLMENTS = 3
TWOPLACES = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Best-effort conversion of form/API values to Decimal for currency math."""

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace("R$", "").replace(" ", "")
        # Accept both "1234.56" and the Brazilian "1.234,56".
        if "," in cleaned:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        try:
            result = Decimal(cleaned)
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {value!r}") from exc
    else:
        raise ValueError(f"invalid amount: {value!r}")
    # NaN and Infinity parse but cannot be compared or quantized.
    if not result.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    return result


def quantize_currency(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def format_currency(value: Any) -> str:
    """Render an amount as Brazilian reais, e.g. ``R$ 1.234,56``."""

    try:
        amount = quantize_currency(to_decimal(value))
    except ValueError:
        return ""
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def clamp_quantity(value: Any) -> int:
    """Coerce a quantity input into [MIN_QUANTITY, MAX_QUANTITY].

    Unparseable input falls back to one ticket.
    """

    try:
        quantity = int(value)
    except (TypeError, ValueError):
        quantity = MIN_QUANTITY
    return max(MIN_QUANTITY, min(MAX_QUANTITY, quantity))


def adjust_quantity(current: int, delta: int) -> int:
    """Apply a +/- step; a step that would leave the range keeps the current value."""

    proposed = current + delta
    if MIN_QUANTITY <= proposed <= MAX_QUANTITY:
        return proposed
    return current


def validate_quantity(quantity: int) -> int:
    if quantity < MIN_QUANTITY or quantity > MAX_QUANTITY:
        raise ValueError(f"Select between {MIN_QUANTITY} and {MAX_QUANTITY} tickets")
    return quantity


def total_price(quantity: int, unit_price: Decimal = TICKET_PRICE) -> Decimal:
    return Decimal(quantity) * unit_price


def installment_amount(total: Decimal, installments: int) -> Decimal:
    """Per-installment value: the flat 6% surcharge spread over ``installments``."""

    if installments < 1:
        raise ValueError("installments must be at least 1")
    return total * (1 + INSTALLMENT_INTEREST) / Decimal(installments)


def payment_total(total: Decimal, installments: int) -> Decimal:
    """Amount actually charged; paying in one go carries no interest."""

    if installments <= 1:
        return total
    return total * (1 + INSTALLMENT_INTEREST)


def installment_options(total: Decimal) -> list[dict[str, Any]]:
    options: list[dict[str, Any]] = [
        {"installments": 1, "amount": quantize_currency(total), "with_interest": False}
    ]
    for times in range(2, MAX_INSTALLMENTS + 1):
        options.append(
            {
                "installments": times,
                "amount": quantize_currency(installment_amount(total, times)),
                "with_interest": True,
            }
        )
    return options


def build_quote(
    quantity: int,
    payment_method: str | None = None,
    installments: int = 1,
    unit_price: Decimal = TICKET_PRICE,
) -> dict[str, Any]:
    """Validate a checkout request and price it.

    ``payment_method`` may be omitted while the buyer is still choosing; the
    quote then only carries the order summary and installment options.
    """

    validate_quantity(quantity)
    total = total_price(quantity, unit_price)
    quote: dict[str, Any] = {
        "quantity": quantity,
        "unit_price": quantize_currency(unit_price),
        "total": quantize_currency(total),
        "payment_method": None,
        "installments": 1,
        "installment_amount": quantize_currency(total),
        "amount_charged": quantize_currency(total),
        "options": installment_options(total),
    }
    if payment_method is None:
        return quote

    method = normalize_choice(payment_method, PAYMENT_METHOD_CHOICES, "payment_method")
    if method != PAYMENT_METHOD_CREDIT and installments != 1:
        raise ValueError("installments are only available for credit card payments")
    if installments < 1 or installments > MAX_INSTALLMENTS:
        raise ValueError(f"installments must be between 1 and {MAX_INSTALLMENTS}")

    charged = payment_total(total, installments)
    quote.update(
        {
            "payment_method": method,
            "installments": installments,
            "installment_amount": quantize_currency(charged / Decimal(installments)),
            "amount_charged": quantize_currency(charged),
        }
    )
    return quote
