"""
Numeric parsing - converts loosely typed storage and form values into floats.

Values arrive as numbers, numeric strings ("1,234.50", "HKD 12.3"), percent
strings ("56.67%") or nothing at all. Everything past this module works with
``float | None`` only.

Usage:
    to_number("HKD 1,234.5")                 # 1234.5
    ratio_from_percent_or_fraction("56.67%") # 0.5667
    round_half_away(2.5)                     # 3
    round2(12.345)                           # 12.35
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Optional

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def to_number(value: Any) -> Optional[float]:
    """Parse a number from a number or string, returning None when unavailable.

    Strings have every character other than digits, '.' and '-' removed before
    parsing, so currency prefixes and thousands separators are tolerated.
    Booleans are not numbers here.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        num = float(value)
        return num if math.isfinite(num) else None
    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value)
        match = re.match(r"-?\d*\.?\d+", cleaned)
        if not match:
            return None
        num = float(match.group(0))
        return num if math.isfinite(num) else None
    return None


def ratio_from_percent_or_fraction(value: Any) -> Optional[float]:
    """Normalize an allocation ratio to a 0-1 fraction.

    Values above 1 are taken to be percentages and divided by 100.
    """
    if isinstance(value, str):
        value = value.replace("%", "")
    num = to_number(value)
    if num is None:
        return None
    return num / 100 if num > 1 else num


def round_half_away(value: float, digits: int = 0) -> float:
    """Round half away from zero (Python's round() rounds half to even)."""
    quantum = Decimal(1).scaleb(-digits)
    exact = Decimal(repr(value))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the requested decimals
        ctx.prec = max(ctx.prec, exact.adjusted() + digits + 2)
        rounded = exact.quantize(quantum, rounding=ROUND_HALF_UP)
    return float(rounded)


def round2(value: float) -> float:
    """Round a currency amount to cents."""
    return round_half_away(value, 2)


def is_positive(value: Optional[float]) -> bool:
    """True for a finite number greater than zero."""
    return value is not None and math.isfinite(value) and value > 0
