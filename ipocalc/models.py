"""
Record types shared by the store, the matcher and the estimator.

Rows from the database are converted with ``from_row`` so that numeric columns
stored as text (prices, percentages, share counts) are parsed once, here.
"""

from dataclasses import dataclass
from typing import Optional

from ipocalc.utils.numbers import ratio_from_percent_or_fraction, to_number


def _as_int(value) -> Optional[int]:
    num = to_number(value)
    return int(num) if num is not None else None


def _as_key(value) -> Optional[str]:
    if value is None:
        return None
    key = str(value).strip()
    return key or None


@dataclass(frozen=True)
class StockRecord:
    """Base record of an offering."""

    code: str
    name: Optional[str] = None
    lot_size: Optional[int] = None
    cap_price: Optional[float] = None
    issue_price: Optional[float] = None
    final_price: Optional[float] = None
    subscription_deadline: Optional[str] = None
    total_valid_applications: Optional[int] = None
    total_winners: Optional[int] = None

    @property
    def lot(self) -> int:
        """Board lot size, 1 when unknown or not positive."""
        return self.lot_size if self.lot_size and self.lot_size > 0 else 1

    def pick_issue_price(self) -> Optional[float]:
        """Best known issue price: final, then announced, then the cap."""
        for price in (self.final_price, self.issue_price, self.cap_price):
            if price is not None:
                return price
        return None

    @classmethod
    def from_row(cls, row: dict) -> "StockRecord":
        return cls(
            code=str(row["code"]),
            name=row.get("name"),
            lot_size=_as_int(row.get("lot_size")),
            cap_price=to_number(row.get("cap_price")),
            issue_price=to_number(row.get("issue_price")),
            final_price=to_number(row.get("final_price")),
            subscription_deadline=row.get("subscription_deadline"),
            total_valid_applications=_as_int(row.get("total_valid_applications")),
            total_winners=_as_int(row.get("total_winners")),
        )


@dataclass(frozen=True)
class TierRecord:
    """One subscription tier from the prospectus application table."""

    row_id: int
    applied_shares: float
    max_payment_amount: Optional[float] = None
    apply_group: Optional[str] = None
    match_key: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> Optional["TierRecord"]:
        """Build from a row, or None when the applied share count is unusable."""
        shares = to_number(row.get("shares_applied"))
        if shares is None:
            return None
        return cls(
            row_id=int(row["row_id"]),
            applied_shares=shares,
            max_payment_amount=to_number(row.get("max_payment_hkd")),
            apply_group=row.get("apply_group"),
            match_key=_as_key(row.get("match_key")),
        )


@dataclass(frozen=True)
class AllotmentStat:
    """Realized allotment outcome for one tier."""

    row_id: int
    applied_shares: float
    approx_allocation_ratio: Optional[float] = None
    valid_applications: Optional[int] = None
    winners: Optional[int] = None
    match_key: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict) -> Optional["AllotmentStat"]:
        shares = to_number(row.get("shares_applied"))
        if shares is None:
            return None
        return cls(
            row_id=int(row["row_id"]),
            applied_shares=shares,
            approx_allocation_ratio=ratio_from_percent_or_fraction(row.get("approx_alloc_pct")),
            valid_applications=_as_int(row.get("valid_applications")),
            winners=_as_int(row.get("winners")),
            match_key=_as_key(row.get("match_key")),
        )


@dataclass(frozen=True)
class MatchedTier:
    """A tier joined with its allotment statistics (None when unmatched)."""

    row_id: int
    applied_shares: float
    max_payment_amount: Optional[float] = None
    apply_group: Optional[str] = None
    match_key: Optional[str] = None
    approx_allocation_ratio: Optional[float] = None
    valid_applications: Optional[int] = None
    winners: Optional[int] = None
    ambiguous: bool = False

    @property
    def has_statistics(self) -> bool:
        return (
            self.approx_allocation_ratio is not None
            and self.valid_applications is not None
            and self.winners is not None
            and self.winners != 0
        )

    def to_dict(self) -> dict:
        return {
            "row_id": self.row_id,
            "shares_applied": self.applied_shares,
            "max_payment_hkd": self.max_payment_amount,
            "apply_group": self.apply_group,
            "match_key": self.match_key,
            "approx_alloc_ratio": self.approx_allocation_ratio,
            "valid_applications": self.valid_applications,
            "winners": self.winners,
            "ambiguous": self.ambiguous,
        }


@dataclass(frozen=True)
class TierContext:
    """Matched tiers and lot size of the selected stock."""

    tiers: tuple[MatchedTier, ...] = ()
    lot_size: int = 1
