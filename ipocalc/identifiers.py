"""
Identifier Normalizer - comparable forms of a user-entered stock code.

The stock table keys codes as strings ("0005", "2015"), while tier tables may
key them as bare integers (5) or as zero-padded strings of varying width. A
code is therefore compared in two forms: its integer value and its padded
string.

Usage:
    ident = normalize("5")
    ident.numeric_id   # 5
    ident.padded       # "0005"
"""

import re
from dataclasses import dataclass
from typing import Optional

from ipocalc.config.calculator import MIN_PADDED_WIDTH

_LEADING_INT = re.compile(r"^[+-]?\d+")


@dataclass(frozen=True)
class StockIdentifier:
    raw: str
    padded_width: int
    padded: str
    numeric_id: Optional[int]


def lpad(value, width: int, fill: str = " ") -> str:
    """Left-pad ``value`` to ``width`` characters.

    Longer values are truncated on the right, as SQL ``lpad`` does.
    """
    text = "" if value is None else str(value)
    if width <= 0:
        return ""
    if len(text) >= width:
        return text[:width]
    if not fill:
        return text
    pad = (fill * width)[: width - len(text)]
    return pad + text


def parse_numeric_id(raw: str) -> Optional[int]:
    """Integer value of the leading digits, None when there are none."""
    match = _LEADING_INT.match(raw.lstrip())
    return int(match.group(0)) if match else None


def normalize(raw: str) -> StockIdentifier:
    """Normalize a trimmed stock code.

    Non-numeric codes are accepted; their ``numeric_id`` is None and callers
    match on the string forms only.
    """
    width = max(MIN_PADDED_WIDTH, len(raw))
    return StockIdentifier(
        raw=raw,
        padded_width=width,
        padded=lpad(raw, width, "0"),
        numeric_id=parse_numeric_id(raw),
    )
