"""
Money helpers for the dashboard.

Amounts live in the database as integer cents and are shown as US dollars.
`to_cents` is the only write-side conversion and `from_cents` the only read-side
one; `format_currency` renders cents for display.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

Number = Union[int, float, Decimal, str]

_CENT = Decimal("0.01")


def to_cents(amount: Number) -> int:
    """Convert a decimal dollar amount to integer cents, rounding half up."""
    dollars = Decimal(str(amount))
    return int((dollars * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: Number) -> float:
    """Convert integer cents to dollars."""
    return float(Decimal(str(cents)) / 100)


def format_currency(cents: Number) -> str:
    """Format a cents amount as an en-US dollar string, e.g. ``$1,234.56``."""
    dollars = (Decimal(str(cents)) / 100).quantize(_CENT, rounding=ROUND_HALF_UP)
    sign = "-" if dollars < 0 else ""
    return f"{sign}${abs(dollars):,.2f}"


__all__ = ["format_currency", "from_cents", "to_cents"]
