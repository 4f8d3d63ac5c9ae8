"""Presentation helpers: every amount is rendered in one fixed currency format."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from fintrax.config import get_settings


Number = Union[Decimal, int, float]

_CENTS = Decimal("0.01")


def to_cents(amount: Number) -> Decimal:
    """Round to 2 decimal places for display (never applied to stored values)."""
    return Decimal(str(amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount: Number, symbol: Optional[str] = None) -> str:
    """
    Format an amount, e.g. 1234.5 -> '₦1,234.50'.

    Negative amounts are rendered as '-₦12.00'.
    """
    if symbol is None:
        symbol = get_settings().app.currency_symbol
    value = to_cents(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
