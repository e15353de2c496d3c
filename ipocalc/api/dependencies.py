"""FastAPI dependencies for API routers.

Provides common dependencies that can be injected into route handlers.
"""

from dataclasses import dataclass

from ipocalc.database import Database
from ipocalc.settings import Settings


@dataclass
class CommonDependencies:
    """Common dependencies used across API routes.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(deps: Annotated[CommonDependencies, Depends(get_common_deps)]):
            stock = await deps.db.get_stock(code)
    """

    db: Database
    settings: Settings


async def get_common_deps() -> CommonDependencies:
    """Factory for common dependencies (singleton Database and Settings)."""
    return CommonDependencies(
        db=Database(),
        settings=Settings(),
    )
