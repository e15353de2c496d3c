"""
Outcome Calculator - profit breakdown of a subscription.

Pure functions of a resolved ``CalculatorFields`` snapshot. Invalid input
raises ``InvalidInputError``; a partial report is never returned.

The return rate is measured against the capital committed to the application
(applied shares x issue price), not the amount paid for allotted shares.

Usage:
    report = compute_outcome(graph.snapshot())
    report.net_profit, report.return_rate_percent, report.break_even_price
"""

import math
from dataclasses import asdict, dataclass
from typing import Optional

from ipocalc.config.calculator import DAYS_PER_YEAR, SELL_FEE_RATE, WINNING_FEE_RATE
from ipocalc.errors import InvalidInputError
from ipocalc.fields import CalculatorFields

# Reported for quantities that cannot be computed
UNAVAILABLE = float("nan")

_REQUIRED = ("applied_shares", "issue_price", "allotted_shares", "sell_price")
_OPTIONAL = ("application_fee", "sell_fee", "leverage_multiple", "annual_financing_rate", "holding_days")


@dataclass(frozen=True)
class OutcomeReport:
    paid_amount: float
    sell_revenue: float
    gross_profit: float
    winning_fee: float
    financing_cost: float
    total_fees: float
    net_profit: float
    return_rate_percent: float
    break_even_price: float
    principal: float
    financing_amount: float
    total_required: float
    sell_fee_used: float

    def to_dict(self) -> dict:
        """Dict form with the unavailable sentinel as None."""
        return {k: (None if isinstance(v, float) and math.isnan(v) else v) for k, v in asdict(self).items()}


def _finite(value: Optional[float]) -> bool:
    return value is not None and isinstance(value, (int, float)) and math.isfinite(value)


def validate(fields: CalculatorFields) -> None:
    """Raise InvalidInputError naming every unusable field."""
    bad = [name for name in _REQUIRED if not (_finite(getattr(fields, name)) and getattr(fields, name) > 0)]
    bad += [name for name in _OPTIONAL if getattr(fields, name) is not None and not _finite(getattr(fields, name))]
    if bad:
        raise InvalidInputError(
            bad,
            "Enter valid applied shares, issue price, allotted shares and sell price (invalid: "
            + ", ".join(bad)
            + ")",
        )


def principal_amount(total_required: float, leverage_enabled: bool, leverage_multiple: Optional[float]) -> float:
    """Own capital put up for the application."""
    if leverage_enabled and leverage_multiple is not None and leverage_multiple > 0:
        return total_required / leverage_multiple
    return total_required


def financing_cost(
    fields: CalculatorFields,
    principal: float,
) -> float:
    """Interest on the margin loan, 0 when financing is off or incomplete."""
    if not fields.leverage_enabled:
        return 0.0
    leverage = fields.leverage_multiple
    rate = fields.annual_financing_rate
    days = fields.holding_days
    if not (leverage is not None and leverage > 0 and rate is not None and rate > 0 and days is not None and days > 0):
        return 0.0
    borrowed = max(fields.applied_shares * fields.issue_price - principal, 0.0)
    return borrowed * (rate / 100) * (days / DAYS_PER_YEAR)


def break_even_price(
    issue_price: float,
    allotted_shares: float,
    application_fee: float,
    financing_cost: float,
    winning_fee: float,
) -> float:
    """Sell price at which net profit is zero, UNAVAILABLE without allotted shares."""
    if not allotted_shares:
        return UNAVAILABLE
    cost = issue_price * allotted_shares + application_fee + financing_cost + winning_fee
    return cost / (allotted_shares * (1 - SELL_FEE_RATE))


def compute_outcome(fields: CalculatorFields) -> OutcomeReport:
    """Compute the full outcome report.

    Raises:
        InvalidInputError: when a required field is missing, non-finite or not
            positive, or an optional field is non-finite
    """
    validate(fields)

    applied = fields.applied_shares
    price = fields.issue_price
    allotted = fields.allotted_shares
    sell = fields.sell_price
    application_fee = fields.application_fee or 0.0
    sell_fee = fields.sell_fee or 0.0

    total_required = applied * price
    principal = principal_amount(total_required, fields.leverage_enabled, fields.leverage_multiple)
    financing_amount = max(total_required - principal, 0.0)

    paid_amount = allotted * price
    sell_revenue = allotted * sell
    gross_profit = sell_revenue - paid_amount

    interest = financing_cost(fields, principal)
    winning_fee = paid_amount * WINNING_FEE_RATE
    total_fees = application_fee + interest + sell_fee + winning_fee
    net_profit = gross_profit - total_fees

    return OutcomeReport(
        paid_amount=paid_amount,
        sell_revenue=sell_revenue,
        gross_profit=gross_profit,
        winning_fee=winning_fee,
        financing_cost=interest,
        total_fees=total_fees,
        net_profit=net_profit,
        return_rate_percent=net_profit / total_required * 100,
        break_even_price=break_even_price(price, allotted, application_fee, interest, winning_fee),
        principal=principal,
        financing_amount=financing_amount,
        total_required=total_required,
        sell_fee_used=sell_fee,
    )
