"""Pytest configuration and fixtures."""

import os
import tempfile

import pytest
import pytest_asyncio

from ipocalc.database import Database
from ipocalc.models import MatchedTier


def _cleanup(path: str) -> None:
    for ext in ["", "-wal", "-shm"]:
        p = path + ext
        if os.path.exists(p):
            os.unlink(p)


@pytest_asyncio.fixture
async def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = Database(db_path)
    await db.connect()

    yield db

    await db.close()
    db.remove_from_cache()
    _cleanup(db_path)


@pytest_asyncio.fixture
async def seeded_db(temp_db):
    """Database with one offering keyed inconsistently across the tier tables.

    Stock "0005" (lot 500): prospectus tiers keyed by the integer 5, allotment
    statistics keyed by the string "0005".
    """
    await temp_db.upsert_stock(
        "0005",
        name="Alpha Robotics",
        lot_size=500,
        cap_price="HKD 12.00",
        final_price="10.00",
        subscription_deadline="2025-11-02",
    )
    await temp_db.add_apply_detail(5, "500", max_payment_hkd="5050.40", apply_group="A")
    await temp_db.add_apply_detail(5, "2000", max_payment_hkd="20201.60", apply_group="A")
    await temp_db.add_apply_detail(5, "50000", max_payment_hkd="505040.00", apply_group="B")
    await temp_db.add_apply_tier("0005", "500", valid_applications=15000, winners=7500, approx_alloc_pct="50%")
    await temp_db.add_apply_tier("0005", "2000", valid_applications=12000, winners=6000, approx_alloc_pct="25")
    await temp_db.add_apply_tier("0005", "50000", valid_applications=1000, winners=1000, approx_alloc_pct="0.1")

    await temp_db.upsert_stock("2718", name="Beta Tech", lot_size=200, cap_price="14.10")
    return temp_db


@pytest.fixture
def tiers():
    """Matched tiers of a lot-500 offering."""
    return [
        MatchedTier(
            row_id=1,
            applied_shares=500,
            apply_group="A",
            approx_allocation_ratio=0.5,
            valid_applications=15000,
            winners=7500,
        ),
        MatchedTier(
            row_id=2,
            applied_shares=2000,
            apply_group="A",
            approx_allocation_ratio=0.25,
            valid_applications=12000,
            winners=6000,
        ),
        MatchedTier(row_id=3, applied_shares=10000, apply_group="A"),
        MatchedTier(
            row_id=4,
            applied_shares=50000,
            apply_group="B",
            approx_allocation_ratio=0.1,
            valid_applications=1000,
            winners=0,
        ),
    ]
