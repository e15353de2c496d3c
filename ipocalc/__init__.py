"""
IPO Calc - Outcome calculator for IPO subscriptions.

Usage:
    from ipocalc import CalculatorSession, Database

    db = Database()
    await db.connect()

    session = CalculatorSession(db)
    await session.select_stock('2015')
    session.edit('applied_shares', 2000)
    session.edit('sell_price', 132.5)
    report = session.calculate()
    report.net_profit, report.break_even_price

Engine functions work without a database:

    estimate_allotment(2000, matched_tiers, lot_size=100)
    derive_fields(fields, 'applied_shares', context)
    compute_outcome(fields)
"""

from ipocalc.database import Database
from ipocalc.errors import InvalidInputError, IpoCalcError, StockNotFoundError, UnknownFieldError
from ipocalc.estimator import TierEstimate, estimate_allotment, estimate_tier
from ipocalc.fields import CalculatorFields, FieldGraph, derive_fields
from ipocalc.identifiers import StockIdentifier, normalize
from ipocalc.matcher import join_tiers
from ipocalc.models import AllotmentStat, MatchedTier, StockRecord, TierContext, TierRecord
from ipocalc.outcome import UNAVAILABLE, OutcomeReport, compute_outcome
from ipocalc.session import CalculatorSession
from ipocalc.settings import Settings

__all__ = [
    "Database",
    "Settings",
    "CalculatorSession",
    # Engine
    "normalize",
    "join_tiers",
    "estimate_allotment",
    "estimate_tier",
    "derive_fields",
    "compute_outcome",
    "FieldGraph",
    # Types
    "StockIdentifier",
    "StockRecord",
    "TierRecord",
    "AllotmentStat",
    "MatchedTier",
    "TierContext",
    "TierEstimate",
    "CalculatorFields",
    "OutcomeReport",
    "UNAVAILABLE",
    # Errors
    "IpoCalcError",
    "StockNotFoundError",
    "InvalidInputError",
    "UnknownFieldError",
]
