"""Shared utilities used across the booking engine."""

import math
import re
from decimal import ROUND_HALF_UP, Decimal

_WHITESPACE = re.compile(r"\s+")


def round_money(value: float) -> float:
    """Round a currency amount to 2 decimal places, halves away from zero.

    Examples:
        >>> round_money(2.345)
        2.35
        >>> round_money(7.5)
        7.5
    """
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (``round`` is banker's)."""
    return int(math.floor(value + 0.5))


def normalize_name(value: str) -> str:
    """Upper-case a display name and collapse internal whitespace.

    Examples:
        >>> normalize_name("  Hair  by jennifer ")
        'HAIR BY JENNIFER'
    """
    return _WHITESPACE.sub(" ", value.strip()).upper()
