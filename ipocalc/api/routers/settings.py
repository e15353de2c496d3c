"""Settings API routes."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from typing_extensions import Annotated

from ipocalc.api.dependencies import CommonDependencies, get_common_deps
from ipocalc.settings import DEFAULTS
from ipocalc.utils.numbers import to_number

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("")
async def get_settings(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Get all settings."""
    return await deps.settings.all()


@router.put("/{key}")
async def set_setting(
    key: str,
    value: dict,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, str]:
    """Set a calculator default. All settings are numeric."""
    if key not in DEFAULTS:
        raise HTTPException(status_code=404, detail=f"Unknown setting: {key}")
    parsed = to_number(value.get("value"))
    if parsed is None or parsed < 0:
        raise HTTPException(status_code=400, detail=f"Setting {key} must be a non-negative number")
    await deps.settings.set(key, parsed)
    return {"status": "ok"}
