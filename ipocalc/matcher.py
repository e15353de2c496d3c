"""
Cross-Table Matcher - joins prospectus tiers with allotment statistics.

The two tables are keyed independently. A tier joins to the statistics row
with the same match key; when either side has no match key, the row with the
same applied share count (within SHARE_TOLERANCE) is used instead. Every tier
appears in the output, with allotment fields left as None when nothing joins.

Usage:
    tiers = join_tiers(tier_records, allotment_stats)
"""

import logging
from typing import Iterable, Optional

from ipocalc.config.calculator import SHARE_TOLERANCE
from ipocalc.models import AllotmentStat, MatchedTier, TierRecord

logger = logging.getLogger(__name__)


def shares_match(a: float, b: float) -> bool:
    """Whether two applied share counts denote the same tier."""
    return abs(a - b) < SHARE_TOLERANCE


def _candidates(tier: TierRecord, stats: list[AllotmentStat]) -> list[AllotmentStat]:
    if tier.match_key is not None:
        by_key = [s for s in stats if s.match_key == tier.match_key]
        if by_key:
            return by_key

    nearby = [
        s
        for s in stats
        if (tier.match_key is None or s.match_key is None) and shares_match(tier.applied_shares, s.applied_shares)
    ]
    # Stable sort keeps stored order between equally close rows
    return sorted(nearby, key=lambda s: abs(s.applied_shares - tier.applied_shares))


def match_tier(tier: TierRecord, stats: list[AllotmentStat]) -> MatchedTier:
    """Join one tier against the statistics rows."""
    candidates = _candidates(tier, stats)
    stat: Optional[AllotmentStat] = candidates[0] if candidates else None
    ambiguous = len(candidates) > 1
    if ambiguous:
        logger.warning(
            "Ambiguous allotment join for tier %s (%s shares): %d candidates, using row %s",
            tier.row_id,
            tier.applied_shares,
            len(candidates),
            stat.row_id,
        )

    return MatchedTier(
        row_id=tier.row_id,
        applied_shares=tier.applied_shares,
        max_payment_amount=tier.max_payment_amount,
        apply_group=tier.apply_group,
        match_key=tier.match_key,
        approx_allocation_ratio=stat.approx_allocation_ratio if stat else None,
        valid_applications=stat.valid_applications if stat else None,
        winners=stat.winners if stat else None,
        ambiguous=ambiguous,
    )


def join_tiers(tier_records: Iterable[TierRecord], allotment_stats: Iterable[AllotmentStat]) -> list[MatchedTier]:
    """Outer-join tiers with statistics, ordered by applied shares then row id."""
    stats = list(allotment_stats)
    tiers = sorted(tier_records, key=lambda t: (t.applied_shares, t.row_id))
    return [match_tier(tier, stats) for tier in tiers]
