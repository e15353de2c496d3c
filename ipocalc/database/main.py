"""
Database - Single source of truth for all database operations.

Usage:
    db = Database()
    await db.connect()
    stock = await db.get_stock('2015')
    tiers = await db.get_matched_tiers('2015')
    await db.set_setting('application_fee', 50)
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from ipocalc.database.base import BaseDatabase
from ipocalc.identifiers import lpad

logger = logging.getLogger(__name__)

# stock_id columns are declared without a type so that keys keep the form
# they were loaded in (5 and "0005" stay distinct values)
SCHEMA = """
CREATE TABLE IF NOT EXISTS stocks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    code TEXT NOT NULL UNIQUE,
    name TEXT,
    subscription_deadline TEXT,
    dark_pool_time TEXT,
    cap_price TEXT,
    issue_price TEXT,
    final_price TEXT,
    total_offer TEXT,
    public_offer_shares TEXT,
    lot_size INTEGER,
    listing_time TEXT,
    oversubscription TEXT
);

CREATE TABLE IF NOT EXISTS apply_details (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    stock_id,
    shares_applied TEXT NOT NULL,
    max_payment_hkd TEXT,
    apply_group TEXT,
    match_key TEXT
);

CREATE TABLE IF NOT EXISTS apply_tiers (
    row_id INTEGER PRIMARY KEY AUTOINCREMENT,
    stock_id,
    shares_applied TEXT NOT NULL,
    valid_applications INTEGER,
    winners INTEGER,
    avg_shares_per_winner TEXT,
    approx_alloc_pct TEXT,
    match_key TEXT
);

CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT
);

CREATE INDEX IF NOT EXISTS idx_apply_details_stock ON apply_details(stock_id);
CREATE INDEX IF NOT EXISTS idx_apply_tiers_stock ON apply_tiers(stock_id);
"""


class Database(BaseDatabase):
    """Single source of truth for all database operations."""

    _instances: dict[str, "Database"] = {}  # path -> instance
    _default_path: str = None

    def __new__(cls, path: str = None):
        """
        Singleton pattern per path - one database instance per unique path.

        Args:
            path: Database file path. If None, uses default path.
        """
        if path is None:
            if cls._default_path is None:
                from ipocalc.paths import DATA_DIR

                cls._default_path = str(DATA_DIR / "ipocalc.db")
            path = cls._default_path

        if path not in cls._instances:
            instance = super().__new__(cls)
            instance._path = Path(path)
            instance._connection = None
            cls._instances[path] = instance

        return cls._instances[path]

    def __init__(self, path: str = None):
        # Path is already set in __new__
        pass

    async def connect(self) -> "Database":
        """Connect to database and initialize schema."""
        if self._connection is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._connection = await aiosqlite.connect(self._path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.create_function("lpad", 3, lpad, deterministic=True)
            await self._connection.execute("PRAGMA journal_mode=WAL")
            await self._connection.execute("PRAGMA busy_timeout=30000")
            await self._init_schema()
            logger.info("Database connected at %s", self._path)
        return self

    async def close(self):
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def remove_from_cache(self):
        """Remove this instance from the singleton cache. Use for temporary databases."""
        path_str = str(self._path)
        if path_str in self._instances:
            del self._instances[path_str]

    async def _init_schema(self) -> None:
        """Initialize database schema."""
        await self.conn.executescript(SCHEMA)
        await self.conn.commit()

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    async def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value by key."""
        cursor = await self.conn.execute("SELECT value FROM settings WHERE key = ?", (key,))
        row = await cursor.fetchone()
        if row is None:
            return default
        try:
            return json.loads(row["value"])
        except (json.JSONDecodeError, TypeError):
            return row["value"]

    async def set_setting(self, key: str, value: Any) -> None:
        """Set a setting value."""
        json_value = json.dumps(value) if not isinstance(value, str) else value
        await self.conn.execute("INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)", (key, json_value))
        await self.conn.commit()

    async def get_all_settings(self) -> dict:
        """Get all settings as a dictionary."""
        cursor = await self.conn.execute("SELECT key, value FROM settings")
        rows = await cursor.fetchall()
        result = {}
        for row in rows:
            try:
                result[row["key"]] = json.loads(row["value"])
            except (json.JSONDecodeError, TypeError):
                result[row["key"]] = row["value"]
        return result

    # -------------------------------------------------------------------------
    # Loading offering data
    # -------------------------------------------------------------------------

    async def upsert_stock(self, code: str, **data) -> None:
        """Insert or update a stock by code."""
        existing = await self.conn.execute("SELECT id FROM stocks WHERE code = ?", (code,))
        if await existing.fetchone():
            if data:
                sets = ", ".join(f"{k} = ?" for k in data.keys())
                await self.conn.execute(
                    f"UPDATE stocks SET {sets} WHERE code = ?",  # noqa: S608
                    (*data.values(), code),
                )
        else:
            data["code"] = code
            cols = ", ".join(data.keys())
            placeholders = ", ".join("?" * len(data))
            await self.conn.execute(
                f"INSERT INTO stocks ({cols}) VALUES ({placeholders})",  # noqa: S608
                tuple(data.values()),
            )
        await self.conn.commit()

    async def _insert(self, table: str, data: dict) -> int:
        cols = ", ".join(data.keys())
        placeholders = ", ".join("?" * len(data))
        cursor = await self.conn.execute(
            f"INSERT INTO {table} ({cols}) VALUES ({placeholders})",  # noqa: S608
            tuple(data.values()),
        )
        await self.conn.commit()
        return cursor.lastrowid

    async def add_apply_detail(
        self,
        stock_id: Any,
        shares_applied: Any,
        max_payment_hkd: Any = None,
        apply_group: Optional[str] = None,
        match_key: Optional[str] = None,
    ) -> int:
        """Add a prospectus tier row. ``stock_id`` is stored as given (int or str)."""
        return await self._insert(
            "apply_details",
            {
                "stock_id": stock_id,
                "shares_applied": str(shares_applied),
                "max_payment_hkd": None if max_payment_hkd is None else str(max_payment_hkd),
                "apply_group": apply_group,
                "match_key": match_key,
            },
        )

    async def add_apply_tier(
        self,
        stock_id: Any,
        shares_applied: Any,
        valid_applications: Optional[int] = None,
        winners: Optional[int] = None,
        approx_alloc_pct: Any = None,
        avg_shares_per_winner: Any = None,
        match_key: Optional[str] = None,
    ) -> int:
        """Add an allotment statistics row. ``stock_id`` is stored as given (int or str)."""
        return await self._insert(
            "apply_tiers",
            {
                "stock_id": stock_id,
                "shares_applied": str(shares_applied),
                "valid_applications": valid_applications,
                "winners": winners,
                "avg_shares_per_winner": None if avg_shares_per_winner is None else str(avg_shares_per_winner),
                "approx_alloc_pct": None if approx_alloc_pct is None else str(approx_alloc_pct),
                "match_key": match_key,
            },
        )
