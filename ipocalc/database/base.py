"""
Base Database - read side of the offering store.

Stock codes are stored in the form the data source provides. The stocks table
keys them as strings; the tier tables key them as bare integers or as
zero-padded strings of inconsistent width. Every lookup therefore matches a
row when its key equals the integer value of the code, when its key,
left-padded to the code's padded width, equals the padded code, or when an
all-digit key has the same integer value as an all-digit code.
"""

import logging
from typing import Optional

import aiosqlite

from ipocalc.errors import StockNotFoundError
from ipocalc.identifiers import StockIdentifier, normalize
from ipocalc.matcher import join_tiers
from ipocalc.models import AllotmentStat, MatchedTier, StockRecord, TierRecord

logger = logging.getLogger(__name__)

# All-digit keys also compare by integer value, which catches padded strings
# wider than the code ("00005" for "0005")
_KEY_MATCH = """(stock_id = ?
    OR lpad(stock_id, ?, '0') = ?
    OR (stock_id <> '' AND stock_id NOT GLOB '*[^0-9]*' AND CAST(stock_id AS INTEGER) = ?))"""

# Per-row form of the same rule, correlating apply_tiers t with stocks s
_SAME_STOCK = """(lpad(t.stock_id, max(4, length(s.code)), '0') = s.code
    OR (s.code <> '' AND s.code NOT GLOB '*[^0-9]*' AND t.stock_id <> '' AND t.stock_id NOT GLOB '*[^0-9]*'
        AND CAST(t.stock_id AS INTEGER) = CAST(s.code AS INTEGER)))"""


def _key_params(ident: StockIdentifier) -> tuple:
    digits_only = ident.numeric_id if ident.raw.isdigit() else None
    return (ident.numeric_id, ident.padded_width, ident.padded, digits_only)


class BaseDatabase:
    """Base class with the stock and tier lookups."""

    _connection: Optional[aiosqlite.Connection] = None

    @property
    def conn(self) -> aiosqlite.Connection:
        """Get database connection."""
        if not self._connection:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._connection

    # -------------------------------------------------------------------------
    # Stocks
    # -------------------------------------------------------------------------

    async def get_stock_row(self, code: str) -> Optional[dict]:
        """Raw stock row for a code, exact code preferred over padded match."""
        ident = normalize(code.strip())
        cursor = await self.conn.execute(
            """SELECT * FROM stocks
               WHERE code = ? OR lpad(code, ?, '0') = ?
               ORDER BY code = ? DESC, id
               LIMIT 1""",
            (ident.raw, ident.padded_width, ident.padded, ident.raw),
        )
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def get_stock(self, code: str) -> StockRecord:
        """Get a stock by code.

        Raises:
            StockNotFoundError: when no stock matches
        """
        row = await self.get_stock_row(code)
        if row is None:
            raise StockNotFoundError(code)
        return StockRecord.from_row(row)

    async def find_stock(self, query: str) -> Optional[StockRecord]:
        """Find a stock by code, by name, or by "code name" as listed in pickers."""
        text = query.strip()
        if not text:
            return None
        cursor = await self.conn.execute(
            """SELECT * FROM stocks
               WHERE code = ? OR name = ? OR (code || ' ' || name) = ?
               ORDER BY id
               LIMIT 1""",
            (text, text, text),
        )
        row = await cursor.fetchone()
        return StockRecord.from_row(dict(row)) if row else None

    async def resolve_stock(self, query: str) -> StockRecord:
        """Stock for picker input: exact code, name or "code name", then padded code.

        Raises:
            StockNotFoundError: when nothing matches
        """
        stock = await self.find_stock(query)
        if stock is not None:
            return stock
        return await self.get_stock(query)

    async def get_all_stocks(self) -> list[dict]:
        """All stocks, newest subscription deadline first, with tier totals."""
        cursor = await self.conn.execute(
            f"""SELECT s.*,
                      (SELECT SUM(t.valid_applications) FROM apply_tiers t
                        WHERE {_SAME_STOCK}) AS total_valid_applications,
                      (SELECT SUM(t.winners) FROM apply_tiers t
                        WHERE {_SAME_STOCK}) AS total_winners
               FROM stocks s
               ORDER BY s.subscription_deadline DESC, s.id"""  # noqa: S608
        )
        rows = await cursor.fetchall()
        return [dict(row) for row in rows]

    # -------------------------------------------------------------------------
    # Tiers
    # -------------------------------------------------------------------------

    async def get_tier_records(self, ident: StockIdentifier, distinct: bool = False) -> list[TierRecord]:
        """Prospectus tier rows for a code, by applied shares then row id.

        With ``distinct``, only the first row per stored key and share count is
        kept. Keys stored in different forms (5 and "0005") stay separate rows.
        """
        unique = (
            " AND row_id IN (SELECT MIN(row_id) FROM apply_details GROUP BY stock_id, CAST(shares_applied AS REAL))"
            if distinct
            else ""
        )
        cursor = await self.conn.execute(
            f"""SELECT * FROM apply_details
                WHERE {_KEY_MATCH}{unique}
                ORDER BY CAST(shares_applied AS REAL), row_id""",  # noqa: S608
            _key_params(ident),
        )
        rows = await cursor.fetchall()
        records = [TierRecord.from_row(dict(row)) for row in rows]
        return [r for r in records if r is not None]

    async def get_allotment_stats(self, ident: StockIdentifier) -> list[AllotmentStat]:
        """Allotment statistics rows for a code, by applied shares then row id."""
        cursor = await self.conn.execute(
            f"""SELECT * FROM apply_tiers
                WHERE {_KEY_MATCH}
                ORDER BY CAST(shares_applied AS REAL), row_id""",  # noqa: S608
            _key_params(ident),
        )
        rows = await cursor.fetchall()
        stats = [AllotmentStat.from_row(dict(row)) for row in rows]
        return [s for s in stats if s is not None]

    async def get_matched_tiers(self, code: str) -> list[MatchedTier]:
        """Tiers of a stock joined with their allotment statistics.

        Raises:
            StockNotFoundError: when no stock matches; a stock without tiers
                returns an empty list
        """
        stock = await self.get_stock(code)
        ident = normalize(stock.code)
        tiers = await self.get_tier_records(ident)
        stats = await self.get_allotment_stats(ident)
        matched = join_tiers(tiers, stats)
        logger.debug("Matched %d tiers (%d statistics rows) for %s", len(matched), len(stats), stock.code)
        return matched

    async def get_stock_details(self, code: str) -> dict:
        """Stock row with its distinct tier rows and, when there are tiers, allotment rows.

        Raises:
            StockNotFoundError: when no stock matches
        """
        stock = await self.get_stock_row(code)
        if stock is None:
            raise StockNotFoundError(code)
        ident = normalize(stock["code"])

        details = await self.get_tier_records(ident, distinct=True)

        stats: list[AllotmentStat] = []
        if details:
            stats = await self.get_allotment_stats(ident)

        return {"stock": stock, "apply_details": details, "apply_tiers": stats}
