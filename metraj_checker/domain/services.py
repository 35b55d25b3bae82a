"""Domain services implementing the structural quantity rules."""
from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping, Sequence

from .calculator import (
    DEFAULT_DECIMAL_PLACES,
    UnitKind,
    calculate_quantity,
    classify_unit,
    item_field,
    resolve_inputs,
)
from .models import Category, Finding, LineItem, Severity
from .results import ValidationReport, ValidationSummary

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.01
DEFAULT_STANDARD_REFERENCE = "TS 500"
MATH_REFERENCE = "Mathematical Verification"

MISSING_DIMENSION_RULE = "missing_dimension"
CALCULATION_MISMATCH_RULE = "calculation_mismatch"


def _is_concrete(category: object) -> bool:
    if isinstance(category, Category):
        return category is Category.CONCRETE
    text = "" if category is None else str(category).strip().lower()
    return text == Category.CONCRETE.value.lower()


def _manual_total(item: LineItem | Mapping[str, Any]) -> float:
    value = item_field(item, "total_quantity")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


def format_number(value: float) -> str:
    """Shortest round-trip text for ``value``; integral values drop the ``.0``."""
    if math.isfinite(value) and value == int(value) and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class StructuralRuleValidator:
    """Runs the per-item structural rules over an ordered list of line items.

    Each item is checked for missing concrete dimensions and then for a
    mismatch between its manual total and the recomputed quantity. Findings
    keep the input order.
    """

    def __init__(
        self,
        tolerance: float | None = None,
        standard_reference: str | None = None,
        decimal_places: int | None = None,
    ) -> None:
        self._tolerance = DEFAULT_TOLERANCE if tolerance is None else tolerance
        self._standard_reference = standard_reference or DEFAULT_STANDARD_REFERENCE
        self._places = DEFAULT_DECIMAL_PLACES if decimal_places is None else decimal_places

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @property
    def decimal_places(self) -> int:
        return self._places

    def run(self, items: Iterable[LineItem | Mapping[str, Any]]) -> list[Finding]:
        findings: list[Finding] = []
        for item in items:
            missing = self._check_missing_dimensions(item)
            if missing is not None:
                findings.append(missing)
            mismatch = self._check_calculation(item)
            if mismatch is not None:
                findings.append(mismatch)
        return findings

    def validate(self, items: Sequence[LineItem | Mapping[str, Any]]) -> ValidationReport:
        findings = self.run(items)
        summary = ValidationSummary(
            total_items=len(items),
            missing_dimensions=len([f for f in findings if f.rule == MISSING_DIMENSION_RULE]),
            calculation_mismatches=len([f for f in findings if f.rule == CALCULATION_MISMATCH_RULE]),
            critical=len([f for f in findings if f.severity is Severity.CRITICAL]),
        )
        logger.debug(
            "Validated %d items: %d missing-dimension, %d mismatch findings",
            summary.total_items,
            summary.missing_dimensions,
            summary.calculation_mismatches,
        )
        return ValidationReport(summary=summary, findings=tuple(findings))

    def _check_missing_dimensions(self, item: LineItem | Mapping[str, Any]) -> Finding | None:
        if not _is_concrete(item_field(item, "category")):
            return None
        if classify_unit(item_field(item, "unit")) is not UnitKind.VOLUME:
            return None
        inputs = resolve_inputs(item)
        if inputs.x and inputs.y and inputs.z:
            return None
        return Finding(
            item_id=str(item_field(item, "id")),
            severity=Severity.CRITICAL,
            message=(
                "Concrete quantity (m3) is missing one of its dimensions (X, Y or Z). "
                f"Poz: {item_field(item, 'poz_number') or ''}"
            ),
            standard_reference=self._standard_reference,
            suggested_action="Check every geometric dimension against the project drawings.",
            rule=MISSING_DIMENSION_RULE,
        )

    def _check_calculation(self, item: LineItem | Mapping[str, Any]) -> Finding | None:
        computed = calculate_quantity(item, self._places)
        manual = _manual_total(item)
        if not abs(computed - manual) > self._tolerance:
            return None
        return Finding(
            item_id=str(item_field(item, "id")),
            severity=Severity.CRITICAL,
            message=(
                f"Calculation mismatch. Manual: {format_number(manual)}, "
                f"System: {format_number(computed)}. Poz: {item_field(item, 'poz_number') or ''}"
            ),
            standard_reference=MATH_REFERENCE,
            suggested_action="Align the manually entered total with the system calculation.",
            rule=CALCULATION_MISMATCH_RULE,
        )


def run_structural_rules(
    items: Iterable[LineItem | Mapping[str, Any]],
    tolerance: float | None = None,
) -> list[Finding]:
    """Validate ``items`` in order and return the findings; empty when nothing fires."""
    return StructuralRuleValidator(tolerance=tolerance).run(items)
