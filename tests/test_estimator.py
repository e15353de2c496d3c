"""Tests for allotment estimation from tier statistics."""

import math

import pytest

from ipocalc.estimator import estimate_allotment, estimate_tier, find_tier
from ipocalc.models import MatchedTier


class TestFindTier:
    def test_matches_within_tolerance(self, tiers):
        assert find_tier(2000.004, tiers).row_id == 2

    def test_no_match(self, tiers):
        assert find_tier(3000, tiers) is None

    @pytest.mark.parametrize("applied", [None, 0, -500, math.nan, math.inf])
    def test_invalid_applied_shares(self, tiers, applied):
        assert find_tier(applied, tiers) is None


class TestEstimateAllotment:
    def test_exact_lots(self, tiers):
        # 0.25 * 12000 * 2000 / 6000 = 1000 -> 2 lots of 500
        assert estimate_allotment(2000, tiers, lot_size=500) == 1000

    def test_rounds_to_nearest_lot(self):
        tier = MatchedTier(row_id=1, applied_shares=1000, approx_allocation_ratio=0.3, valid_applications=100, winners=40)
        # 0.3 * 100 * 1000 / 40 = 750 -> 1.5 lots -> 2 lots (half away from zero)
        assert estimate_allotment(1000, [tier], lot_size=500) == 1000

    def test_within_one_lot_of_raw_estimate(self, tiers):
        for tier in tiers:
            if not tier.has_statistics:
                continue
            raw = tier.approx_allocation_ratio * tier.valid_applications * tier.applied_shares / tier.winners
            for lot in (1, 100, 400, 500):
                estimated = estimate_allotment(tier.applied_shares, tiers, lot_size=lot)
                assert abs(estimated - raw) <= lot

    @pytest.mark.parametrize("lot", [0, -100, None, 0.5])
    def test_lot_below_one_is_one(self, tiers, lot):
        tier = MatchedTier(row_id=1, applied_shares=300, approx_allocation_ratio=0.5, valid_applications=7, winners=3)
        # 0.5 * 7 * 300 / 3 = 350
        assert estimate_allotment(300, [tier], lot_size=lot) == 350

    def test_no_matching_tier(self, tiers):
        assert estimate_allotment(1234, tiers, lot_size=500) is None

    def test_tier_without_statistics(self, tiers):
        assert estimate_allotment(10000, tiers, lot_size=500) is None

    def test_zero_winners_gives_no_estimate(self, tiers):
        """Zero winners is guarded, not turned into infinity."""
        assert estimate_allotment(50000, tiers, lot_size=500) is None

    def test_zero_ratio_estimates_nothing_allotted(self):
        tier = MatchedTier(row_id=1, applied_shares=500, approx_allocation_ratio=0.0, valid_applications=10, winners=5)
        assert estimate_allotment(500, [tier], lot_size=500) == 0


class TestEstimateTier:
    def test_includes_formula(self, tiers):
        estimate = estimate_tier(2000, tiers, lot_size=500)
        assert estimate.tier.row_id == 2
        assert estimate.estimated_shares == 1000
        assert "25.00%" in estimate.formula
        assert "winners 6000" in estimate.formula

    def test_matched_without_statistics(self, tiers):
        estimate = estimate_tier(10000, tiers, lot_size=500)
        assert estimate.tier.row_id == 3
        assert estimate.estimated_shares is None
        assert estimate.formula == ""

    def test_unmatched(self, tiers):
        assert estimate_tier(1, tiers) is None
