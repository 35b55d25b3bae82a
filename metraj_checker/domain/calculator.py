"""Deterministic quantity calculation for metraj line items.

Quantities follow the usual survey hierarchy: ``x * y`` is an area,
``x * y * z`` a volume, and weight units multiply either basis by the unit
weight. Missing inputs never raise; they resolve to neutral defaults and the
structural rules are left to flag the inconsistency.

Rounding is half away from zero on the shortest decimal representation of
the float, so ``1.0005`` rounds to ``1.001`` regardless of its binary
approximation.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import MAX_EMAX, MIN_EMIN, ROUND_HALF_UP, Context, Decimal
from enum import Enum
from typing import Any, Mapping

from .models import LineItem

DEFAULT_DECIMAL_PLACES = 3


class UnitKind(Enum):
    VOLUME = "m3"
    AREA = "m2"
    WEIGHT_KG = "kg"
    WEIGHT_TON = "ton"
    LINEAR = "linear"


def classify_unit(unit: object) -> UnitKind:
    """Map a unit label to its calculation basis; unknown labels are linear/count units."""
    text = "" if unit is None else str(unit).strip().lower()
    for kind in UnitKind:
        if kind is not UnitKind.LINEAR and kind.value == text:
            return kind
    return UnitKind.LINEAR


@dataclass(frozen=True)
class QuantityInputs:
    """Line item fields after default resolution."""

    x: float
    y: float
    z: float
    multiplier: float
    count: float
    unit_weight: float
    unit: str


def item_field(item: LineItem | Mapping[str, Any], name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _resolve(value: object, default: float) -> float:
    if value is None:
        return default
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or number == 0:
        return default
    return number


def resolve_inputs(item: LineItem | Mapping[str, Any]) -> QuantityInputs:
    """Apply the default policy: absent, zero, NaN or non-numeric fields take their defaults."""
    unit = item_field(item, "unit")
    return QuantityInputs(
        x=_resolve(item_field(item, "x"), 0.0),
        y=_resolve(item_field(item, "y"), 0.0),
        z=_resolve(item_field(item, "z"), 0.0),
        multiplier=_resolve(item_field(item, "multiplier"), 1.0),
        count=_resolve(item_field(item, "count"), 1.0),
        unit_weight=_resolve(item_field(item, "unit_weight"), 0.0),
        unit="" if unit is None else str(unit).strip().lower(),
    )


def round_quantity(value: float, places: int = DEFAULT_DECIMAL_PLACES) -> float:
    if not math.isfinite(value):
        return value
    exact = Decimal(repr(value))
    # the quantized coefficient spans every digit from the leading one down to 10**-places
    context = Context(prec=max(exact.adjusted() + places + 2, 28), Emin=MIN_EMIN, Emax=MAX_EMAX)
    exponent = Decimal(1).scaleb(-places, context=context)
    rounded = exact.quantize(exponent, rounding=ROUND_HALF_UP, context=context)
    # + 0.0 folds -0.0 into 0.0
    return float(rounded) + 0.0


def calculate_quantity(item: LineItem | Mapping[str, Any], places: int = DEFAULT_DECIMAL_PLACES) -> float:
    """Return the expected quantity of ``item`` rounded to ``places`` decimals.

    Negative dimensions are passed through unchanged.
    """
    inputs = resolve_inputs(item)
    area = inputs.x * inputs.y
    volume = inputs.x * inputs.y * inputs.z

    kind = classify_unit(inputs.unit)
    if kind is UnitKind.VOLUME:
        result = volume
    elif kind is UnitKind.AREA:
        result = area
    elif kind in (UnitKind.WEIGHT_KG, UnitKind.WEIGHT_TON):
        base = volume if inputs.z > 0 else area
        result = base * inputs.unit_weight
        if kind is UnitKind.WEIGHT_TON:
            result = result / 1000
    else:
        result = inputs.x or inputs.y or inputs.z or 1.0

    return round_quantity(result * inputs.multiplier * inputs.count, places)


def with_calculated_quantity(item: LineItem, places: int = DEFAULT_DECIMAL_PLACES) -> LineItem:
    return item.replace(calculated_quantity=calculate_quantity(item, places))
