"""Stock and tier lookup API routes."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from typing_extensions import Annotated

from ipocalc.api.dependencies import CommonDependencies, get_common_deps
from ipocalc.errors import StockNotFoundError

router = APIRouter(tags=["stocks"])


@router.get("/stocks")
async def get_stocks(
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> list[dict]:
    """All offerings, newest subscription deadline first."""
    return await deps.db.get_all_stocks()


@router.get("/stock-details/{code}")
async def get_stock_details(
    code: str,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Stock with its prospectus tiers and allotment statistics rows."""
    try:
        details = await deps.db.get_stock_details(code)
    except StockNotFoundError:
        raise HTTPException(status_code=404, detail="Stock not found")
    return {
        "stock": details["stock"],
        "apply_details": [asdict(d) for d in details["apply_details"]],
        "apply_tiers": [asdict(t) for t in details["apply_tiers"]],
    }


@router.get("/tier-details/{code}")
async def get_tier_details(
    code: str,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Stock with its tiers joined to allotment statistics."""
    try:
        stock = await deps.db.get_stock_row(code)
        if stock is None:
            raise StockNotFoundError(code)
        tiers = await deps.db.get_matched_tiers(stock["code"])
    except StockNotFoundError:
        raise HTTPException(status_code=404, detail="Stock not found")
    return {"stock": stock, "tiers": [t.to_dict() for t in tiers]}
