"""Domain models for the metraj (quantity survey) checker.

These dataclasses capture the canonical shape of quantity-survey line items,
the findings produced by the structural rules, and the records kept for
audit runs.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Sequence


class Severity(str, Enum):
    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"

    @classmethod
    def parse(cls, value: object) -> "Severity":
        text = "" if value is None else str(value).strip().upper()
        try:
            return cls(text)
        except ValueError:
            return cls.INFO


class Category(str, Enum):
    CONCRETE = "Concrete"
    FORMWORK = "Formwork"
    REINFORCEMENT = "Reinforcement"
    FINISHING = "Finishing"

    @classmethod
    def parse(cls, value: object) -> "Category | str":
        """Case-insensitive lookup.

        Empty values map to Concrete; unrecognised labels are kept verbatim so
        that rules scoped to a category do not apply to them.
        """
        text = "" if value is None else str(value).strip()
        if not text:
            return cls.CONCRETE
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        return text


def category_label(category: Category | str) -> str:
    return category.value if isinstance(category, Category) else str(category)


@dataclass(frozen=True)
class LineItem:
    """One quantity-survey entry as entered by hand or imported in bulk.

    Numeric dimensions are optional; ``None`` and ``0`` are treated the same
    way by the calculator.
    """

    id: str
    poz_number: str = ""
    description: str = ""
    unit: str = ""
    x: float | None = None
    y: float | None = None
    z: float | None = None
    multiplier: float | None = None
    count: float | None = None
    unit_weight: float | None = None
    category: Category | str = Category.CONCRETE
    total_quantity: float = 0.0
    calculated_quantity: float | None = None
    notes: str | None = None

    @property
    def area(self) -> float:
        return (self.x or 0) * (self.y or 0)

    @property
    def volume(self) -> float:
        return (self.x or 0) * (self.y or 0) * (self.z or 0)

    def replace(self, **changes: Any) -> "LineItem":
        return replace(self, **changes)


@dataclass(frozen=True)
class Finding:
    """Represents one problem detected by the structural rules."""

    item_id: str
    severity: Severity
    message: str
    standard_reference: str
    suggested_action: str
    rule: str = ""


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    created_at: datetime
    items: Sequence[LineItem] = field(default_factory=tuple)
    source_hash: str = ""


@dataclass(frozen=True)
class RiskFinding:
    title: str
    explanation: str
    standard: str
    severity: Severity


@dataclass(frozen=True)
class RiskAnalysis:
    """Narrative risk summary returned by an external analysis service."""

    risk_score: int
    summary: str
    findings: Sequence[RiskFinding] = field(default_factory=tuple)

    @classmethod
    def failed(cls) -> "RiskAnalysis":
        return cls(risk_score=0, summary="Analysis failed", findings=())

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RiskAnalysis":
        try:
            score = int(round(float(payload.get("riskScore", payload.get("risk_score", 0)))))
        except (TypeError, ValueError):
            score = 0
        findings = []
        for raw in payload.get("findings") or ():
            if not isinstance(raw, Mapping):
                continue
            findings.append(
                RiskFinding(
                    title=str(raw.get("title", "")),
                    explanation=str(raw.get("explanation", "")),
                    standard=str(raw.get("standard", "")),
                    severity=Severity.parse(raw.get("severity")),
                )
            )
        return cls(
            risk_score=min(max(score, 0), 100),
            summary=str(payload.get("summary", "")),
            findings=tuple(findings),
        )

    def to_payload(self) -> dict[str, Any]:
        return {
            "riskScore": self.risk_score,
            "summary": self.summary,
            "findings": [
                {
                    "title": f.title,
                    "explanation": f.explanation,
                    "standard": f.standard,
                    "severity": f.severity.value,
                }
                for f in self.findings
            ],
        }


@dataclass(frozen=True)
class AuditRecord:
    """Snapshot of one full audit run over a project."""

    id: str
    project_id: str
    project_name: str
    date: datetime
    analysis: RiskAnalysis
    item_count: int
    findings: Sequence[Finding] = field(default_factory=tuple)
    source_hash: str = ""

    @property
    def risk_score(self) -> int:
        return self.analysis.risk_score
