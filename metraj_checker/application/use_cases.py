"""Application services orchestrating validation and audit runs."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable

from metraj_checker.domain.calculator import with_calculated_quantity
from metraj_checker.domain.models import AuditRecord, Project, RiskAnalysis
from metraj_checker.domain.repositories import (
    AuditHistoryRepository,
    ProjectRepository,
    RiskAnalyzer,
)
from metraj_checker.domain.results import ValidationReport
from metraj_checker.domain.services import StructuralRuleValidator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ProjectValidationContext:
    project_repository: ProjectRepository
    validator: StructuralRuleValidator


class ValidateProjectUseCase:
    def __init__(self, context: ProjectValidationContext) -> None:
        self._context = context

    def execute(self) -> tuple[ValidationReport, Project]:
        project = self._context.project_repository.get_project()
        places = self._context.validator.decimal_places
        items = tuple(with_calculated_quantity(item, places) for item in project.items)
        project = replace(project, items=items)
        report = self._context.validator.validate(items)
        logger.info(
            "Project %s: %d items, %d findings",
            project.name,
            report.summary.total_items,
            len(report.findings),
        )
        return report, project


@dataclass(slots=True)
class AuditContext:
    project_repository: ProjectRepository
    validator: StructuralRuleValidator
    analyzer: RiskAnalyzer
    history: AuditHistoryRepository | None = None
    clock: Callable[[], datetime] = field(default=_utcnow)


class RunAuditUseCase:
    """Validate a project, ask the analyzer for a risk summary and record the run."""

    def __init__(self, context: AuditContext) -> None:
        self._context = context

    def execute(self) -> tuple[AuditRecord, ValidationReport, Project]:
        validation = ProjectValidationContext(
            project_repository=self._context.project_repository,
            validator=self._context.validator,
        )
        report, project = ValidateProjectUseCase(validation).execute()

        try:
            analysis = self._context.analyzer.analyze(project.items, report.findings)
        except Exception:
            logger.warning("Risk analysis failed for project %s", project.name, exc_info=True)
            analysis = RiskAnalysis.failed()

        now = self._context.clock()
        record = AuditRecord(
            id=now.strftime("%Y%m%d_%H%M%S%f"),
            project_id=project.id,
            project_name=project.name,
            date=now,
            analysis=analysis,
            item_count=len(project.items),
            findings=tuple(report.findings),
            source_hash=project.source_hash,
        )
        if self._context.history is not None:
            self._context.history.save(record)
            logger.info("Audit %s saved with risk score %d", record.id, record.risk_score)
        return record, report, project
