"""Tests for the reactive calculator field graph.

These tests verify:
1. Derivation of allotted shares and sell fee from their dependencies
2. Manual overrides surviving every dependency change
3. Explicit override clearing and reset
4. Idempotence of derive_fields
"""

import pytest

from ipocalc.errors import UnknownFieldError
from ipocalc.fields import TIERS, CalculatorFields, FieldGraph, derive_fields
from ipocalc.models import TierContext


@pytest.fixture
def context(tiers):
    return TierContext(tiers=tuple(tiers), lot_size=500)


@pytest.fixture
def graph(context):
    graph = FieldGraph()
    graph.set_tiers(context)
    return graph


class TestDefaults:
    def test_initial_values(self):
        fields = FieldGraph().snapshot()
        assert fields.application_fee == 100
        assert fields.sell_fee == 0
        assert fields.leverage_enabled is False
        assert fields.leverage_multiple == 1
        assert fields.annual_financing_rate == 3.68
        assert fields.holding_days == 3
        assert fields.allotted_shares is None
        assert fields.overridden == frozenset()

    def test_custom_defaults(self):
        graph = FieldGraph({"application_fee": 50, "unrelated": 1})
        assert graph.get("application_fee") == 50


class TestDerivation:
    def test_applied_shares_derives_allotment(self, graph):
        graph.edit("applied_shares", 2000)
        assert graph.get("allotted_shares") == 1000
        assert not graph.is_overridden("allotted_shares")

    def test_allotment_cascades_into_sell_fee(self, graph):
        graph.edit("sell_price", 15)
        graph.edit("applied_shares", 2000)
        # 1000 * 15 * 0.0013219 = 19.8285
        assert graph.get("sell_fee") == 19.83

    def test_sell_price_derives_sell_fee(self, graph):
        graph.edit("applied_shares", 500)
        graph.edit("sell_price", 12)
        # 500 * 12 * 0.0013219 = 7.9314
        assert graph.get("sell_fee") == 7.93

    def test_no_estimate_leaves_allotment_untouched(self, graph):
        graph.edit("applied_shares", 2000)
        graph.edit("applied_shares", 3000)  # no such tier
        assert graph.get("allotted_shares") == 1000

    def test_tiers_arriving_later_derive_allotment(self, context):
        graph = FieldGraph()
        graph.edit("applied_shares", 500)
        assert graph.get("allotted_shares") is None

        graph.set_tiers(context)
        assert graph.get("allotted_shares") == 500

    def test_sell_fee_needs_both_inputs(self, graph):
        graph.edit("sell_price", 15)
        assert graph.get("sell_fee") == 0


class TestOverrides:
    def test_manual_allotment_survives_dependency_changes(self, graph, tiers):
        graph.edit("applied_shares", 2000)
        graph.edit("allotted_shares", 1500)

        graph.edit("applied_shares", 500)
        graph.set_tiers(TierContext(tiers=tuple(tiers), lot_size=100))
        graph.apply("allotted_shares", 42)

        assert graph.get("allotted_shares") == 1500
        assert graph.is_overridden("allotted_shares")

    def test_manual_allotment_still_feeds_sell_fee(self, graph):
        graph.edit("allotted_shares", 1500)
        graph.edit("sell_price", 10)
        # 1500 * 10 * 0.0013219 = 19.8285
        assert graph.get("sell_fee") == 19.83

    def test_manual_sell_fee_survives(self, graph):
        graph.edit("sell_fee", 5)
        graph.edit("applied_shares", 2000)
        graph.edit("sell_price", 20)
        assert graph.get("sell_fee") == 5

    def test_derivation_never_sets_override(self, graph):
        graph.edit("applied_shares", 2000)
        graph.edit("sell_price", 20)
        assert graph.snapshot().overridden == frozenset({"applied_shares", "sell_price"})

    def test_recompute_from_ratio(self, graph):
        graph.edit("applied_shares", 2000)
        graph.edit("allotted_shares", 1500)

        graph.recompute_from_ratio()

        assert graph.get("allotted_shares") == 1000
        assert not graph.is_overridden("allotted_shares")

    def test_recompute_sell_fee(self, graph):
        graph.edit("applied_shares", 500)
        graph.edit("sell_price", 12)
        graph.edit("sell_fee", 99)

        graph.recompute_sell_fee()

        assert graph.get("sell_fee") == 7.93

    def test_recompute_sell_fee_without_inputs_drops_to_zero(self, graph):
        graph.edit("sell_fee", 99)

        graph.recompute_sell_fee()

        assert graph.get("sell_fee") == 0
        assert not graph.is_overridden("sell_fee")

    def test_huge_values_still_derive_sell_fee(self, graph):
        graph.edit("allotted_shares", 1e20)
        graph.edit("sell_price", 1e10)

        assert graph.get("sell_fee") == pytest.approx(1e30 * 0.0013219)

    def test_reset_clears_everything(self, graph):
        graph.edit("applied_shares", 2000)
        graph.edit("allotted_shares", 1500)

        graph.reset()

        assert graph.snapshot() == CalculatorFields()
        assert graph.context is None

    def test_unknown_field(self, graph):
        with pytest.raises(UnknownFieldError):
            graph.edit("overridden", 1)
        with pytest.raises(UnknownFieldError):
            graph.get("price")


class TestDeriveFields:
    def test_idempotent(self, context):
        fields = CalculatorFields(applied_shares=2000, sell_price=15)
        once = derive_fields(fields, {"applied_shares", "sell_price", TIERS}, context)
        twice = derive_fields(once, {"applied_shares", "sell_price", TIERS}, context)
        assert once == twice
        assert once.allotted_shares == 1000

    def test_unchanged_returns_same_snapshot(self, context):
        fields = CalculatorFields(applied_shares=2000)
        assert derive_fields(fields, "holding_days", context) is fields

    def test_overridden_field_is_never_derived(self, context):
        fields = CalculatorFields(applied_shares=2000, allotted_shares=7, overridden=frozenset({"allotted_shares"}))
        for changed in ("applied_shares", TIERS, "sell_price"):
            fields = derive_fields(fields, changed, context)
        assert fields.allotted_shares == 7

    def test_without_context(self):
        fields = CalculatorFields(applied_shares=2000)
        assert derive_fields(fields, TIERS).allotted_shares is None
