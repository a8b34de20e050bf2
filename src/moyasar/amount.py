"""Currency-aware conversion between minor units and display strings."""
from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from moyasar.models.common import Currency

DEFAULT_DIVISOR = 100

CURRENCY_DIVISORS = {
    "KWD": 1000,
    "JPY": 1,
    "SAR": 100,
    "USD": 100,
    "EUR": 100,
}

_NON_NUMERIC = re.compile(r"[^\d.]")


def _code(currency: Currency | str) -> str:
    if isinstance(currency, Currency):
        return currency.value
    return currency.upper()


def divisor_for(currency: Currency | str) -> int:
    """Minor units per major unit. Unknown currencies fall back to 100."""
    return CURRENCY_DIVISORS.get(_code(currency), DEFAULT_DIVISOR)


def _decimals(divisor: int) -> int:
    return len(str(divisor)) - 1


def format_amount(amount: int, currency: Currency | str) -> str:
    """Render an amount in minor units, e.g. ``format_amount(5000, "SAR") == "50.00 SAR"``."""
    code = _code(currency)
    value = Decimal(amount).scaleb(-_decimals(divisor_for(code)))
    return f"{value} {code}"


def parse_amount(formatted: str, currency: Currency | str) -> int:
    """Inverse of :func:`format_amount`. Raises ValueError if no number is present."""
    cleaned = _NON_NUMERIC.sub("", formatted)
    try:
        value = Decimal(cleaned) * divisor_for(currency)
    except InvalidOperation:
        raise ValueError(f"No amount found in {formatted!r}") from None
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))
