"""IPO Calc API package.

Contains FastAPI routers for the web API.
"""

from ipocalc.api.dependencies import CommonDependencies

__all__ = ["CommonDependencies"]
