"""
Loader - imports offering data exported from the source database.

Expected JSON layout:

    {
        "stocks": [{"code": "2015", "name": "...", "lot_size": 100, ...}],
        "apply_details": [{"stock_id": 2015, "shares_applied": "2000", ...}],
        "apply_tiers": [{"stock_id": "2015", "shares_applied": "2000", ...}]
    }

``stock_id`` values are stored exactly as exported.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

STOCK_COLUMNS = {
    "name",
    "subscription_deadline",
    "dark_pool_time",
    "cap_price",
    "issue_price",
    "final_price",
    "total_offer",
    "public_offer_shares",
    "lot_size",
    "listing_time",
    "oversubscription",
}
DETAIL_COLUMNS = {"max_payment_hkd", "apply_group", "match_key"}
TIER_COLUMNS = {"valid_applications", "winners", "approx_alloc_pct", "avg_shares_per_winner", "match_key"}


def _pick(row: dict, columns: set[str]) -> dict:
    return {k: v for k, v in row.items() if k in columns}


async def load_records(db, data: dict) -> dict[str, int]:
    """Insert stocks, tier rows and allotment rows. Returns counts per table."""
    counts = {"stocks": 0, "apply_details": 0, "apply_tiers": 0}

    for row in data.get("stocks", []):
        await db.upsert_stock(str(row["code"]), **_pick(row, STOCK_COLUMNS))
        counts["stocks"] += 1

    for row in data.get("apply_details", []):
        await db.add_apply_detail(row["stock_id"], row["shares_applied"], **_pick(row, DETAIL_COLUMNS))
        counts["apply_details"] += 1

    for row in data.get("apply_tiers", []):
        await db.add_apply_tier(row["stock_id"], row["shares_applied"], **_pick(row, TIER_COLUMNS))
        counts["apply_tiers"] += 1

    return counts


async def load_json(db, path: str | Path) -> dict[str, int]:
    """Load a JSON export file into the database."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    logger.info("Loading offering data from %s", path)
    return await load_records(db, data)
