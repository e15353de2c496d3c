"""
Settings - Single source of truth for calculator defaults.

Usage:
    settings = Settings()
    fee = await settings.get('application_fee')
    await settings.set('annual_financing_rate', 4.2)
    defaults = await settings.calculator_defaults()

Settings are stored in the database and editable via the API; the values
below apply until changed.
"""

from typing import Any

from ipocalc.config.calculator import FIELD_DEFAULTS
from ipocalc.database import Database
from ipocalc.utils.decorators import singleton

# Default settings - applied on first run, then configurable via API
DEFAULTS = {
    # Broker handling fee per application (HKD)
    "application_fee": FIELD_DEFAULTS["application_fee"],
    # Margin financing
    "leverage_multiple": FIELD_DEFAULTS["leverage_multiple"],
    "annual_financing_rate": FIELD_DEFAULTS["annual_financing_rate"],  # % p.a.
    "holding_days": FIELD_DEFAULTS["holding_days"],
}


@singleton
class Settings:
    """Single source of truth for application settings."""

    _db: "Database"

    def __init__(self):
        self._db = Database()

    async def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        value = await self._db.get_setting(key)
        if value is None:
            return default if default is not None else DEFAULTS.get(key)
        return value

    async def set(self, key: str, value: Any) -> None:
        """Set a setting value."""
        await self._db.set_setting(key, value)

    async def all(self) -> dict:
        """Get all settings with defaults applied."""
        stored = await self._db.get_all_settings()
        result = DEFAULTS.copy()
        result.update(stored)
        return result

    async def calculator_defaults(self) -> dict:
        """Settings that seed a fresh calculator form."""
        values = await self.all()
        return {key: values[key] for key in DEFAULTS}

    async def init_defaults(self) -> None:
        """Initialize default settings if not already set."""
        for key, value in DEFAULTS.items():
            existing = await self._db.get_setting(key)
            if existing is None:
                await self._db.set_setting(key, value)
