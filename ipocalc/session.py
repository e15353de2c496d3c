"""
Calculator Session - one user's calculator form bound to the offering store.

Selecting a stock starts lookups that suspend the caller. Each selection or
reset bumps a generation counter; a lookup that completes after the counter
moved on belongs to an abandoned selection and its result is dropped, so only
the latest request ever touches the form.

Usage:
    session = CalculatorSession(db)
    await session.select_stock('2015')
    session.edit('applied_shares', 2000)
    session.edit('sell_price', 15.2)
    report = session.calculate()
"""

import logging
from typing import Any, Optional

from ipocalc.database import Database
from ipocalc.errors import StockNotFoundError
from ipocalc.estimator import TierEstimate, estimate_tier
from ipocalc.fields import CalculatorFields, FieldGraph
from ipocalc.models import MatchedTier, StockRecord, TierContext
from ipocalc.outcome import OutcomeReport, compute_outcome

logger = logging.getLogger(__name__)


class CalculatorSession:
    """Calculator form state for a selected stock."""

    def __init__(self, db=None, defaults: Optional[dict] = None):
        self._db = db if db is not None else Database()
        self.graph = FieldGraph(defaults)
        self.stock: Optional[StockRecord] = None
        self.tiers: list[MatchedTier] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def fields(self) -> CalculatorFields:
        return self.graph.snapshot()

    def _stale(self, generation: int, code: str) -> bool:
        if generation != self._generation:
            logger.debug("Discarding stale lookup for %s (request %d, current %d)", code, generation, self._generation)
            return True
        return False

    def _clear(self) -> None:
        self.graph.reset()
        self.stock = None
        self.tiers = []

    async def select_stock(self, code: str) -> Optional[StockRecord]:
        """Select a stock by code, name or "code name" and load its tiers.

        Resets every field, prefills the issue price and derives the allotment
        once tiers arrive.

        Returns:
            The stock, or None when the input is blank or a newer selection or
            reset superseded this one

        Raises:
            StockNotFoundError: when neither the code nor the name matches a stock
        """
        code = code.strip()
        self._generation += 1
        generation = self._generation
        self._clear()
        if not code:
            return None

        try:
            stock = await self._db.resolve_stock(code)
        except StockNotFoundError:
            if self._stale(generation, code):
                return None
            raise
        if self._stale(generation, code):
            return None

        self.stock = stock
        price = stock.pick_issue_price()
        if price is not None:
            self.graph.apply("issue_price", price)

        tiers = await self._db.get_matched_tiers(stock.code)
        if self._stale(generation, code):
            return None

        self.tiers = tiers
        self.graph.set_tiers(TierContext(tiers=tuple(tiers), lot_size=stock.lot))
        logger.info("Selected %s %s with %d tiers", stock.code, stock.name or "", len(tiers))
        return stock

    def reset(self) -> CalculatorFields:
        """Reset the form; in-flight lookups are ignored when they complete."""
        self._generation += 1
        self._clear()
        return self.graph.snapshot()

    def edit(self, name: str, value: Any) -> CalculatorFields:
        return self.graph.edit(name, value)

    def recompute_from_ratio(self) -> CalculatorFields:
        return self.graph.recompute_from_ratio()

    def recompute_sell_fee(self) -> CalculatorFields:
        return self.graph.recompute_sell_fee()

    def estimate(self) -> Optional[TierEstimate]:
        """Tier matching the applied shares and its estimate, if any."""
        if self.stock is None:
            return None
        return estimate_tier(self.graph.get("applied_shares"), self.tiers, self.stock.lot)

    def calculate(self) -> OutcomeReport:
        """Outcome report of the current form (raises InvalidInputError)."""
        return compute_outcome(self.graph.snapshot())
