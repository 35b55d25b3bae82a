"""Domain-level results for structural rule validation."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import Finding, Severity


@dataclass(frozen=True)
class ValidationSummary:
    total_items: int
    missing_dimensions: int
    calculation_mismatches: int
    critical: int


@dataclass(frozen=True)
class ValidationReport:
    summary: ValidationSummary
    findings: Sequence[Finding] = field(default_factory=tuple)

    def has_issues(self) -> bool:
        return bool(self.findings)

    def iter_findings(self, severity: Severity | None = None) -> Iterable[Finding]:
        for finding in self.findings:
            if severity is None or finding.severity is severity:
                yield finding

    def findings_for(self, item_id: str) -> tuple[Finding, ...]:
        return tuple(f for f in self.findings if f.item_id == item_id)
