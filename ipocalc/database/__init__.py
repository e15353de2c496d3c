"""
Database Package

Provides database access for the IPO calculator.
"""

from ipocalc.database.base import BaseDatabase
from ipocalc.database.main import Database

__all__ = ["Database", "BaseDatabase"]
