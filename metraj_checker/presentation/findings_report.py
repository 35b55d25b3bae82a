"""Finding report generators."""
from __future__ import annotations

import csv
import html
import io
from typing import Sequence

from metraj_checker.domain.models import Finding, LineItem, Severity
from metraj_checker.domain.results import ValidationReport

SEVERITY_COLORS = {
    Severity.CRITICAL: "#ef4444",
    Severity.WARNING: "#f59e0b",
    Severity.INFO: "#3b82f6",
}


def findings_to_rows(findings: Sequence[Finding], items: Sequence[LineItem] = ()) -> list[dict[str, str]]:
    poz_by_id = {item.id: item.poz_number for item in items}
    rows: list[dict[str, str]] = []
    for finding in findings:
        rows.append(
            {
                "item_id": finding.item_id,
                "poz_number": poz_by_id.get(finding.item_id, ""),
                "severity": finding.severity.value,
                "rule": finding.rule,
                "message": finding.message,
                "standard_reference": finding.standard_reference,
                "suggested_action": finding.suggested_action,
            }
        )
    return rows


def render_csv(findings: Sequence[Finding], items: Sequence[LineItem] = ()) -> bytes:
    rows = findings_to_rows(findings, items)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()) if rows else [])
    if rows:
        writer.writeheader()
        writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(report: ValidationReport, items: Sequence[LineItem] = ()) -> str:
    rows = findings_to_rows(tuple(report.iter_findings()), items)
    if not rows:
        return "<p>No findings detected.</p>"
    header = "".join(f"<th>{col}</th>" for col in rows[0].keys())
    body_parts = []
    for row in rows:
        color = SEVERITY_COLORS.get(Severity.parse(row["severity"]), SEVERITY_COLORS[Severity.INFO])
        cells = "".join(f"<td>{html.escape(value)}</td>" for value in row.values())
        body_parts.append(f'<tr style="border-left: 6px solid {color}">{cells}</tr>')
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"
