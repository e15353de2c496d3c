"""Tests for joining prospectus tiers with allotment statistics."""

import logging

from ipocalc.matcher import join_tiers, shares_match
from ipocalc.models import AllotmentStat, TierRecord


def _tier(row_id, shares, key=None):
    return TierRecord(row_id=row_id, applied_shares=shares, apply_group="A", match_key=key)


def _stat(row_id, shares, key=None, ratio=0.5, apps=100, winners=50):
    return AllotmentStat(
        row_id=row_id,
        applied_shares=shares,
        approx_allocation_ratio=ratio,
        valid_applications=apps,
        winners=winners,
        match_key=key,
    )


def test_shares_match_tolerance():
    assert shares_match(2000, 2000.009)
    assert not shares_match(2000, 2000.02)


class TestJoinTiers:
    def test_joins_by_applied_shares(self):
        matched = join_tiers([_tier(1, 500), _tier(2, 1000)], [_stat(10, 1000, winners=7), _stat(11, 500, winners=3)])

        assert [m.applied_shares for m in matched] == [500, 1000]
        assert matched[0].winners == 3
        assert matched[1].winners == 7
        assert not any(m.ambiguous for m in matched)

    def test_unmatched_tier_kept_with_empty_statistics(self):
        matched = join_tiers([_tier(1, 500), _tier(2, 777)], [_stat(10, 500)])

        assert len(matched) == 2
        assert matched[1].applied_shares == 777
        assert matched[1].approx_allocation_ratio is None
        assert matched[1].valid_applications is None
        assert matched[1].winners is None

    def test_match_key_wins_over_proximity(self):
        """A tier with a key joins the statistics row carrying that key."""
        matched = join_tiers(
            [_tier(1, 500, key="A-500")],
            [_stat(10, 500, key=None, winners=1), _stat(11, 600, key="A-500", winners=2)],
        )
        assert matched[0].winners == 2
        assert not matched[0].ambiguous

    def test_proximity_used_when_key_absent_on_one_side(self):
        matched = join_tiers([_tier(1, 500, key="A-500")], [_stat(10, 500, key=None, winners=4)])
        assert matched[0].winners == 4

    def test_different_keys_do_not_join_by_proximity(self):
        matched = join_tiers([_tier(1, 500, key="A-500")], [_stat(10, 500, key="B-500")])
        assert matched[0].winners is None

    def test_ordered_by_shares_then_row_id(self):
        matched = join_tiers([_tier(3, 1000), _tier(2, 500), _tier(1, 500)], [])
        assert [(m.applied_shares, m.row_id) for m in matched] == [(500, 1), (500, 2), (1000, 3)]

    def test_empty_tiers(self):
        assert join_tiers([], [_stat(10, 500)]) == []

    def test_ambiguous_join_takes_first_and_flags(self, caplog):
        """Two statistics rows within tolerance: flagged, first one used, nothing dropped."""
        with caplog.at_level(logging.WARNING, logger="ipocalc.matcher"):
            matched = join_tiers(
                [_tier(1, 500)],
                [_stat(10, 500.005, winners=1), _stat(11, 500, winners=2), _stat(12, 500.005, winners=3)],
            )

        assert len(matched) == 1
        assert matched[0].ambiguous
        # Closest first, then stored order
        assert matched[0].winners == 2
        assert "Ambiguous allotment join" in caplog.text

    def test_ambiguous_key_join_uses_stored_order(self):
        matched = join_tiers([_tier(1, 500, key="k")], [_stat(10, 900, key="k", winners=1), _stat(11, 500, key="k", winners=2)])
        assert matched[0].ambiguous
        assert matched[0].winners == 1
