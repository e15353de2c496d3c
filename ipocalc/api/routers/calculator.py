"""Outcome calculation API route."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing_extensions import Annotated

from ipocalc.api.dependencies import CommonDependencies, get_common_deps
from ipocalc.errors import InvalidInputError, StockNotFoundError
from ipocalc.estimator import estimate_tier
from ipocalc.fields import FIELD_NAMES, FieldGraph
from ipocalc.models import TierContext
from ipocalc.outcome import compute_outcome

logger = logging.getLogger(__name__)
router = APIRouter(tags=["calculator"])


class CalculateRequest(BaseModel):
    """Calculator form. Omitted fields take defaults or are derived."""

    code: Optional[str] = Field(None, description='Stock code, name or "code name"; enables tier-based allotment estimate')
    issue_price: Optional[float] = None
    applied_shares: Optional[float] = None
    allotted_shares: Optional[float] = Field(None, description="Omit to use the tier estimate")
    sell_price: Optional[float] = None
    application_fee: Optional[float] = None
    sell_fee: Optional[float] = Field(None, description="Omit to derive from the sell fee rate")
    leverage_enabled: Optional[bool] = None
    leverage_multiple: Optional[float] = None
    annual_financing_rate: Optional[float] = None
    holding_days: Optional[float] = None


@router.post("/calculate")
async def calculate(
    request: CalculateRequest,
    deps: Annotated[CommonDependencies, Depends(get_common_deps)],
) -> dict[str, Any]:
    """Resolve derived fields and compute the outcome report."""
    graph = FieldGraph(await deps.settings.calculator_defaults())
    stock = None

    if request.code and request.code.strip():
        try:
            stock = await deps.db.resolve_stock(request.code)
        except StockNotFoundError:
            raise HTTPException(status_code=404, detail="Stock not found")
        tiers = await deps.db.get_matched_tiers(stock.code)
        graph.apply("issue_price", stock.pick_issue_price())
        graph.set_tiers(TierContext(tiers=tuple(tiers), lot_size=stock.lot))

    provided = request.model_dump(exclude={"code"}, exclude_none=True)
    for name in FIELD_NAMES:
        if name in provided:
            graph.edit(name, provided[name])

    fields = graph.snapshot()
    estimate = None
    if graph.context is not None:
        estimate = estimate_tier(fields.applied_shares, graph.context.tiers, graph.context.lot_size)

    try:
        report = compute_outcome(fields)
    except InvalidInputError as e:
        logger.info("Rejected calculation: %s", e)
        raise HTTPException(status_code=422, detail={"message": str(e), "fields": e.fields})

    return {
        "stock": {"code": stock.code, "name": stock.name, "lot_size": stock.lot} if stock else None,
        "fields": fields.values(),
        "overridden": sorted(fields.overridden),
        "estimate": (
            {
                "tier": estimate.tier.to_dict(),
                "estimated_shares": estimate.estimated_shares,
                "formula": estimate.formula,
            }
            if estimate
            else None
        ),
        "report": report.to_dict(),
    }
