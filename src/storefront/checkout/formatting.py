"""Display helpers for amounts and the payment countdown."""

import math
from decimal import ROUND_HALF_UP, Decimal

DEFAULT_CURRENCY = "SOL"
CENT = Decimal("0.01")


def format_amount(amount: Decimal | str | float, currency: str | None = DEFAULT_CURRENCY) -> str:
    value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    return f"{value} {currency or DEFAULT_CURRENCY}"


def format_countdown(seconds: float | None) -> str:
    """Render remaining seconds as ``m:ss``, rounding partial seconds up."""
    if seconds is None or seconds <= 0:
        return "0:00"
    total = math.ceil(seconds)
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"
