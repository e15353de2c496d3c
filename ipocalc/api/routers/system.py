"""System API routes for health and version."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

from ipocalc.version import VERSION

router = APIRouter(tags=["system"])


@router.get("/health")
async def health() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/version")
async def version() -> dict[str, str]:
    """Return the application version."""
    return {"version": VERSION}
