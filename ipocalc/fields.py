"""
Reactive Field Graph - calculator fields with derivation and manual override.

Two fields have derivation rules:

    allotted_shares <- applied_shares, tiers       (tier estimate)
    sell_fee        <- allotted_shares, sell_price (SELL_FEE_RATE of proceeds)

There are two ways to write a field. A derivation write happens when a
dependency changes and never marks the field as overridden. A user write
(``FieldGraph.edit``) stores the value and marks the field as overridden, after
which derivations leave it alone until the override is cleared explicitly
(``clear_override``, ``recompute_from_ratio``, ``recompute_sell_fee`` or
``reset``).

Usage:
    graph = FieldGraph()
    graph.set_tiers(TierContext(tiers=tuple(matched), lot_size=500))
    graph.edit("applied_shares", 2000)   # allotted_shares and sell_fee follow
    graph.edit("allotted_shares", 1000)  # user value sticks from now on
    graph.recompute_from_ratio()         # back to the tier estimate
"""

import logging
import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Callable, Iterable, Optional, Union

from ipocalc.config.calculator import FIELD_DEFAULTS, SELL_FEE_RATE
from ipocalc.errors import UnknownFieldError
from ipocalc.estimator import estimate_allotment
from ipocalc.models import TierContext
from ipocalc.utils.numbers import round2, to_number

logger = logging.getLogger(__name__)

# Dependency name for the matched-tier context of the selected stock
TIERS = "tiers"


@dataclass(frozen=True)
class CalculatorFields:
    """Snapshot of every calculator field plus the set of overridden names."""

    issue_price: Optional[float] = None
    applied_shares: Optional[float] = None
    allotted_shares: Optional[float] = None
    sell_price: Optional[float] = None
    application_fee: Optional[float] = FIELD_DEFAULTS["application_fee"]
    sell_fee: Optional[float] = FIELD_DEFAULTS["sell_fee"]
    leverage_enabled: bool = FIELD_DEFAULTS["leverage_enabled"]
    leverage_multiple: Optional[float] = FIELD_DEFAULTS["leverage_multiple"]
    annual_financing_rate: Optional[float] = FIELD_DEFAULTS["annual_financing_rate"]
    holding_days: Optional[float] = FIELD_DEFAULTS["holding_days"]
    overridden: frozenset = field(default_factory=frozenset)

    def is_overridden(self, name: str) -> bool:
        return name in self.overridden

    def values(self) -> dict[str, Any]:
        """Field values without the override set."""
        return {name: getattr(self, name) for name in FIELD_NAMES}


FIELD_NAMES: tuple[str, ...] = tuple(f.name for f in fields(CalculatorFields) if f.name != "overridden")


@dataclass(frozen=True)
class Derivation:
    """A derived field, its dependencies and its rule."""

    field: str
    depends_on: frozenset
    rule: Callable[[CalculatorFields, Optional[TierContext]], Optional[float]]


def _nonzero(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value != 0


def _derive_allotted_shares(current: CalculatorFields, context: Optional[TierContext]) -> Optional[float]:
    if context is None:
        return None
    estimated = estimate_allotment(current.applied_shares, context.tiers, context.lot_size)
    return float(estimated) if estimated is not None else None


def _derive_sell_fee(current: CalculatorFields, context: Optional[TierContext]) -> Optional[float]:
    if not (_nonzero(current.allotted_shares) and _nonzero(current.sell_price)):
        return None
    return round2(current.allotted_shares * current.sell_price * SELL_FEE_RATE)


# Evaluated in this order; later rules see earlier results
DERIVATIONS: tuple[Derivation, ...] = (
    Derivation("allotted_shares", frozenset({"applied_shares", TIERS}), _derive_allotted_shares),
    Derivation("sell_fee", frozenset({"allotted_shares", "sell_price"}), _derive_sell_fee),
)

DERIVED_FIELDS = {d.field: d for d in DERIVATIONS}


def derive_fields(
    current_fields: CalculatorFields,
    changed_dependency: Union[str, Iterable[str]],
    context: Optional[TierContext] = None,
) -> CalculatorFields:
    """Re-evaluate derived fields after a dependency change.

    Overridden fields are skipped. A rule that yields no value leaves its field
    untouched. A derived field whose value changes becomes a changed dependency
    for the rules after it.

    Args:
        current_fields: Snapshot to derive from
        changed_dependency: Name (or names) of what changed; TIERS for the tier context
        context: Matched tiers of the selected stock, if any

    Returns:
        New snapshot; ``current_fields`` itself when nothing changed
    """
    changed = {changed_dependency} if isinstance(changed_dependency, str) else set(changed_dependency)
    updated = current_fields

    for derivation in DERIVATIONS:
        if not derivation.depends_on & changed:
            continue
        if updated.is_overridden(derivation.field):
            continue
        value = derivation.rule(updated, context)
        if value is None or value == getattr(updated, derivation.field):
            continue
        updated = replace(updated, **{derivation.field: value})
        changed.add(derivation.field)

    return updated


def _coerce(name: str, value: Any) -> Any:
    if name == "leverage_enabled":
        return bool(value)
    return to_number(value)


class FieldGraph:
    """Stateful calculator form built on ``derive_fields``."""

    def __init__(self, defaults: Optional[dict] = None):
        self._defaults = {**FIELD_DEFAULTS}
        if defaults:
            self._defaults.update({k: v for k, v in defaults.items() if k in FIELD_NAMES})
        self._fields = self._initial_fields()
        self._context: Optional[TierContext] = None

    def _initial_fields(self) -> CalculatorFields:
        return CalculatorFields(**{name: _coerce(name, self._defaults[name]) for name in FIELD_NAMES})

    @property
    def context(self) -> Optional[TierContext]:
        return self._context

    def snapshot(self) -> CalculatorFields:
        return self._fields

    def get(self, name: str) -> Any:
        self._check(name)
        return getattr(self._fields, name)

    def is_overridden(self, name: str) -> bool:
        self._check(name)
        return self._fields.is_overridden(name)

    def _check(self, name: str) -> None:
        if name not in FIELD_NAMES:
            raise UnknownFieldError(name)

    def _derive(self, changed: Union[str, Iterable[str]]) -> None:
        self._fields = derive_fields(self._fields, changed, self._context)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def edit(self, name: str, value: Any) -> CalculatorFields:
        """User write: store the value and mark the field as overridden."""
        self._check(name)
        self._fields = replace(
            self._fields,
            **{name: _coerce(name, value)},
            overridden=self._fields.overridden | {name},
        )
        self._derive(name)
        return self._fields

    def apply(self, name: str, value: Any) -> CalculatorFields:
        """Programmatic write that leaves override flags alone."""
        self._check(name)
        if name in DERIVED_FIELDS and self._fields.is_overridden(name):
            return self._fields
        self._fields = replace(self._fields, **{name: _coerce(name, value)})
        self._derive(name)
        return self._fields

    def set_tiers(self, context: Optional[TierContext]) -> CalculatorFields:
        """Replace the matched-tier context and re-derive."""
        self._context = context
        self._derive(TIERS)
        return self._fields

    def clear_override(self, name: str) -> CalculatorFields:
        """Drop the override flag and re-derive the field immediately."""
        self._check(name)
        self._fields = replace(self._fields, overridden=self._fields.overridden - {name})
        derivation = DERIVED_FIELDS.get(name)
        if derivation is not None:
            self._derive(derivation.depends_on)
        return self._fields

    def recompute_from_ratio(self) -> CalculatorFields:
        """Discard a manual allotment and use the tier estimate again."""
        return self.clear_override("allotted_shares")

    def recompute_sell_fee(self) -> CalculatorFields:
        """Discard a manual sell fee and use the fee rate again.

        Without allotted shares and a sell price there is nothing to charge,
        so the fee drops to 0 rather than keeping the manual value.
        """
        self.clear_override("sell_fee")
        if _derive_sell_fee(self._fields, self._context) is None:
            self._fields = replace(self._fields, sell_fee=0.0)
        return self._fields

    def reset(self) -> CalculatorFields:
        """All fields back to defaults, no overrides, no tier context."""
        self._fields = self._initial_fields()
        self._context = None
        logger.debug("Calculator fields reset")
        return self._fields
