"""
IPO Calc Utilities Package

Contains shared helpers for parsing and rounding numeric input.
"""

from ipocalc.utils.decorators import singleton
from ipocalc.utils.numbers import (
    is_positive,
    ratio_from_percent_or_fraction,
    round2,
    round_half_away,
    to_number,
)

__all__ = [
    "singleton",
    "to_number",
    "ratio_from_percent_or_fraction",
    "round_half_away",
    "round2",
    "is_positive",
]
