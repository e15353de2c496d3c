"""
Tier Estimator - expected allotment for an applied share count.

Allotment statistics give, per tier, the approximate allocation ratio, the
number of valid applications and the number of winners. Spreading the tier's
allotted shares over its winners gives the expected allotment per winner:

    estimated = ratio * valid_applications * applied_shares / winners

rounded to whole board lots.

Usage:
    shares = estimate_allotment(2000, tiers, lot_size=500)  # None = no estimate
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from ipocalc.matcher import shares_match
from ipocalc.models import MatchedTier
from ipocalc.utils.numbers import is_positive, round_half_away


@dataclass(frozen=True)
class TierEstimate:
    """A matched tier and the allotment estimated from it."""

    tier: MatchedTier
    estimated_shares: Optional[int]
    formula: str = ""


def _valid_applied(applied_shares: Optional[float]) -> bool:
    return is_positive(applied_shares)


def _lot(lot_size: Optional[float]) -> int:
    if lot_size is None or not math.isfinite(lot_size):
        return 1
    lot = int(lot_size)
    return lot if lot > 0 else 1


def find_tier(applied_shares: Optional[float], tiers: Iterable[MatchedTier]) -> Optional[MatchedTier]:
    """First tier with the same applied share count."""
    if not _valid_applied(applied_shares):
        return None
    for tier in tiers:
        if shares_match(tier.applied_shares, applied_shares):
            return tier
    return None


def estimate_for_tier(tier: MatchedTier, applied_shares: float, lot_size: Optional[float] = 1) -> Optional[int]:
    """Estimated allotment from one tier's statistics, None without statistics."""
    if not tier.has_statistics:
        return None
    lot = _lot(lot_size)
    estimated_raw = tier.approx_allocation_ratio * tier.valid_applications * applied_shares / tier.winners
    estimated_lots = round_half_away(estimated_raw / lot)
    return int(estimated_lots) * lot


def estimate_allotment(
    applied_shares: Optional[float],
    matched_tiers: Iterable[MatchedTier],
    lot_size: Optional[float] = 1,
) -> Optional[int]:
    """Estimated allotted shares, or None when no estimate is available."""
    tier = find_tier(applied_shares, matched_tiers)
    if tier is None:
        return None
    return estimate_for_tier(tier, applied_shares, lot_size)


def estimate_tier(
    applied_shares: Optional[float],
    matched_tiers: Iterable[MatchedTier],
    lot_size: Optional[float] = 1,
) -> Optional[TierEstimate]:
    """Matched tier with its estimate and a readable formula.

    Returns None when no tier matches. A matched tier without usable
    statistics yields an estimate of None and an empty formula.
    """
    tier = find_tier(applied_shares, matched_tiers)
    if tier is None:
        return None

    estimated = estimate_for_tier(tier, applied_shares, lot_size)
    if estimated is None:
        return TierEstimate(tier=tier, estimated_shares=None)

    formula = (
        f"estimated allotment = allocation ratio {tier.approx_allocation_ratio * 100:.2f}%"
        f" x valid applications {tier.valid_applications}"
        f" x applied shares {applied_shares:g} / winners {tier.winners},"
        f" rounded to lots of {_lot(lot_size)}"
    )
    return TierEstimate(tier=tier, estimated_shares=estimated, formula=formula)
