"""Offline risk analyzer used when no external analysis service is wired in."""
from __future__ import annotations

from typing import Sequence

from metraj_checker.domain.models import Finding, LineItem, RiskAnalysis, RiskFinding, Severity
from metraj_checker.domain.services import (
    CALCULATION_MISMATCH_RULE,
    MATH_REFERENCE,
    MISSING_DIMENSION_RULE,
)


class StaticRiskAnalyzer:
    """Scores risk as the share of items carrying at least one critical finding."""

    def __init__(self, standard_reference: str = "TS 500") -> None:
        self._standard_reference = standard_reference

    def analyze(self, items: Sequence[LineItem], findings: Sequence[Finding]) -> RiskAnalysis:
        if not items:
            return RiskAnalysis(risk_score=0, summary="No line items to analyze.", findings=())

        flagged = {f.item_id for f in findings if f.severity is Severity.CRITICAL}
        score = round(100 * len(flagged) / len(items))

        missing = [f for f in findings if f.rule == MISSING_DIMENSION_RULE]
        mismatches = [f for f in findings if f.rule == CALCULATION_MISMATCH_RULE]
        risk_findings: list[RiskFinding] = []
        if missing:
            risk_findings.append(
                RiskFinding(
                    title="Missing concrete dimensions",
                    explanation=f"{len(missing)} concrete item(s) lack one of X, Y or Z.",
                    standard=self._standard_reference,
                    severity=Severity.CRITICAL,
                )
            )
        if mismatches:
            risk_findings.append(
                RiskFinding(
                    title="Manual totals disagree with dimensions",
                    explanation=f"{len(mismatches)} item(s) differ from the recomputed quantity.",
                    standard=MATH_REFERENCE,
                    severity=Severity.CRITICAL,
                )
            )

        summary = f"{len(flagged)} of {len(items)} items carry critical findings."
        return RiskAnalysis(risk_score=min(score, 100), summary=summary, findings=tuple(risk_findings))
