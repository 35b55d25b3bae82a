"""Command-line entrypoint for metraj validation."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from metraj_checker.application.analysis import StaticRiskAnalyzer
from metraj_checker.application.use_cases import (
    AuditContext,
    ProjectValidationContext,
    RunAuditUseCase,
    ValidateProjectUseCase,
)
from metraj_checker.config import SETTINGS
from metraj_checker.domain.services import StructuralRuleValidator
from metraj_checker.infrastructure.archive.file_repository import FileSystemAuditRepository
from metraj_checker.infrastructure.repositories.json_repositories import (
    JsonProjectRepository,
    dump_project,
)
from metraj_checker.presentation.findings_report import render_csv, render_html
from metraj_checker.presentation.quantity_report import export_items_excel, summarize_quantities

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recompute metraj quantities and check them against manual totals")
    parser.add_argument("project", type=str, help="Path to project JSON file")
    parser.add_argument("--csv", type=str, help="Write findings as CSV to this path")
    parser.add_argument("--html", type=str, help="Write findings as an HTML table to this path")
    parser.add_argument("--xlsx", type=str, help="Write the recomputed metraj workbook to this path")
    parser.add_argument("--output-project", type=str, help="Write the project with calculated quantities as JSON")
    parser.add_argument("--tolerance", type=float, help=f"Mismatch tolerance (default {SETTINGS.tolerance})")
    parser.add_argument("--audit", action="store_true", help="Run a risk audit and store it in the history directory")
    parser.add_argument("--history-dir", type=str, help=f"Audit history directory (default {SETTINGS.history_dir})")
    parser.add_argument("--fail-on-findings", action="store_true", help="Exit with status 1 when findings exist")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    try:
        repository = JsonProjectRepository(Path(args.project))
    except OSError as exc:
        print(f"Cannot read project file: {exc}", file=sys.stderr)
        return 2

    validator = StructuralRuleValidator(
        tolerance=SETTINGS.tolerance if args.tolerance is None else args.tolerance,
        standard_reference=SETTINGS.standard_reference,
        decimal_places=SETTINGS.decimal_places,
    )

    try:
        if args.audit:
            history_dir = Path(args.history_dir) if args.history_dir else SETTINGS.history_dir
            context = AuditContext(
                project_repository=repository,
                validator=validator,
                analyzer=StaticRiskAnalyzer(SETTINGS.standard_reference),
                history=FileSystemAuditRepository(history_dir),
            )
            record, report, project = RunAuditUseCase(context).execute()
        else:
            record = None
            report, project = ValidateProjectUseCase(ProjectValidationContext(repository, validator)).execute()
    except ValueError as exc:
        print(f"Invalid project file: {exc}", file=sys.stderr)
        return 2

    stats = summarize_quantities(project.items)
    summary = report.summary
    print("Metraj Summary")
    print("==============")
    print(f"Project: {project.name}")
    print(f"Items: {stats.item_count}")
    print(f"Total volume: {stats.total_volume:.2f} m3")
    print(f"Total area: {stats.total_area:.2f} m2")
    print(f"Missing dimensions: {summary.missing_dimensions}")
    print(f"Calculation mismatches: {summary.calculation_mismatches}")

    if report.has_issues():
        print("\nFindings:")
        for finding in report.iter_findings():
            print(f"- [{finding.severity.value}] {finding.item_id}: {finding.message} ({finding.standard_reference})")
    else:
        print("\nNo findings detected.")

    if record is not None:
        print(f"\nRisk score: {record.risk_score}% - {record.analysis.summary}")

    if args.csv:
        Path(args.csv).write_bytes(render_csv(report.findings, project.items))
        logger.info("Findings CSV written to %s", args.csv)
    if args.html:
        Path(args.html).write_text(render_html(report, project.items), encoding="utf-8")
        logger.info("Findings HTML written to %s", args.html)
    if args.xlsx:
        export_items_excel(project.items, report.findings, Path(args.xlsx), places=validator.decimal_places)
        logger.info("Metraj workbook written to %s", args.xlsx)
    if args.output_project:
        Path(args.output_project).write_text(dump_project(project), encoding="utf-8")
        logger.info("Recomputed project written to %s", args.output_project)

    if args.fail_on_findings and report.has_issues():
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
