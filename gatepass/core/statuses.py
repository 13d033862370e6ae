"""Shared status and duration constants for tickets, subscriptions and accesses."""

TICKET_STATUS_ACTIVE = "active"
TICKET_STATUS_INACTIVE = "inactive"
TICKET_STATUS_SOLD_OUT = "sold-out"

TICKET_STATUS_CHOICES = (
    TICKET_STATUS_ACTIVE,
    TICKET_STATUS_INACTIVE,
    TICKET_STATUS_SOLD_OUT,
)

SUBSCRIPTION_STATUS_ACTIVE = "active"
SUBSCRIPTION_STATUS_INACTIVE = "inactive"
SUBSCRIPTION_STATUS_CANCELLED = "cancelled"
SUBSCRIPTION_STATUS_EXPIRED = "expired"

SUBSCRIPTION_STATUS_CHOICES = (
    SUBSCRIPTION_STATUS_ACTIVE,
    SUBSCRIPTION_STATUS_INACTIVE,
    SUBSCRIPTION_STATUS_CANCELLED,
    SUBSCRIPTION_STATUS_EXPIRED,
)

DURATION_MONTHLY = "monthly"
DURATION_QUARTERLY = "quarterly"
DURATION_SEMIANNUAL = "semiannual"
DURATION_ANNUAL = "annual"

DURATION_CHOICES = (
    DURATION_MONTHLY,
    DURATION_QUARTERLY,
    DURATION_SEMIANNUAL,
    DURATION_ANNUAL,
)

DURATION_LABELS = {
    DURATION_MONTHLY: "Monthly",
    DURATION_QUARTERLY: "Quarterly",
    DURATION_SEMIANNUAL: "Semiannual",
    DURATION_ANNUAL: "Annual",
}

ACCESS_STATUS_USED = "used"
ACCESS_STATUS_PENDING = "pending"
ACCESS_STATUS_CANCELLED = "cancelled"

ACCESS_STATUS_CHOICES = (
    ACCESS_STATUS_USED,
    ACCESS_STATUS_PENDING,
    ACCESS_STATUS_CANCELLED,
)

PAYMENT_METHOD_PIX = "pix"
PAYMENT_METHOD_CREDIT = "credit"

PAYMENT_METHOD_CHOICES = (PAYMENT_METHOD_PIX, PAYMENT_METHOD_CREDIT)

CHARGE_STATUS_OPEN = "open"
CHARGE_STATUS_PAID = "paid"


def normalize_choice(value: str | None, choices: tuple[str, ...], field: str) -> str:
    """Return a lowercase member of ``choices`` or raise ``ValueError``."""

    normalized = (value or "").strip().lower()
    if normalized not in choices:
        raise ValueError(f"{field} must be one of: {', '.join(choices)}")
    return normalized


def choice_pattern(choices: tuple[str, ...]) -> str:
    return f"^({'|'.join(choices)})$"
