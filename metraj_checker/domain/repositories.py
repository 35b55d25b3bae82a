"""Repository and collaborator interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import AuditRecord, Finding, LineItem, Project, RiskAnalysis


class ProjectRepository(Protocol):
    """Provides a project and its line items."""

    def get_project(self) -> Project:
        ...


class AuditHistoryRepository(Protocol):
    """Stores audit runs and lists them newest first."""

    def save(self, record: AuditRecord) -> None:
        ...

    def list_records(self) -> Sequence[AuditRecord]:
        ...


class RiskAnalyzer(Protocol):
    """Produces a narrative risk analysis from items and rule findings."""

    def analyze(self, items: Sequence[LineItem], findings: Sequence[Finding]) -> RiskAnalysis:
        ...
