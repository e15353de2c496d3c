"""
IPO Calc Configuration Package

Contains configuration constants and defaults.
"""

from ipocalc.config.calculator import (
    DAYS_PER_YEAR,
    FIELD_DEFAULTS,
    MIN_PADDED_WIDTH,
    SELL_FEE_RATE,
    SHARE_TOLERANCE,
    WINNING_FEE_RATE,
)

__all__ = [
    "SELL_FEE_RATE",
    "WINNING_FEE_RATE",
    "SHARE_TOLERANCE",
    "DAYS_PER_YEAR",
    "MIN_PADDED_WIDTH",
    "FIELD_DEFAULTS",
]
