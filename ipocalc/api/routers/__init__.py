"""API routers for the IPO calculator.

Each router handles a specific domain of the API.
"""

from ipocalc.api.routers.calculator import router as calculator_router
from ipocalc.api.routers.settings import router as settings_router
from ipocalc.api.routers.stocks import router as stocks_router
from ipocalc.api.routers.system import router as system_router

__all__ = [
    "calculator_router",
    "settings_router",
    "stocks_router",
    "system_router",
]
