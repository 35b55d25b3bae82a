"""Filesystem repository for archiving audit runs."""
from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from metraj_checker.domain.models import AuditRecord, Finding, RiskAnalysis, Severity

AUDIT_FILE = "audit.json"
MANIFEST_FILE = "manifest.json"


def _normalize_run_id(run_id: str) -> str:
    if not run_id:
        return "run"
    digits = re.findall(r"\d", run_id)
    if len(digits) >= 14:
        date_part = "".join(digits[:8])
        time_part = "".join(digits[8:14])
        rest = "".join(digits[14:])
        normalized = f"{date_part}_{time_part}"
        if rest:
            normalized += rest
        return normalized
    sanitized = re.sub(r"[^0-9A-Za-z_-]+", "", run_id.strip())
    return sanitized or "run"


def finding_to_dict(finding: Finding) -> dict[str, str]:
    return {
        "itemId": finding.item_id,
        "severity": finding.severity.value,
        "message": finding.message,
        "standardReference": finding.standard_reference,
        "suggestedAction": finding.suggested_action,
        "rule": finding.rule,
    }


def record_to_dict(record: AuditRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "projectId": record.project_id,
        "projectName": record.project_name,
        "date": record.date.isoformat(),
        "analysis": record.analysis.to_payload(),
        "itemCount": record.item_count,
        "riskScore": record.risk_score,
        "findings": [finding_to_dict(f) for f in record.findings],
        "sourceHash": record.source_hash,
    }


def record_from_dict(data: dict[str, Any]) -> AuditRecord:
    findings = tuple(
        Finding(
            item_id=str(raw.get("itemId", "")),
            severity=Severity.parse(raw.get("severity")),
            message=str(raw.get("message", "")),
            standard_reference=str(raw.get("standardReference", "")),
            suggested_action=str(raw.get("suggestedAction", "")),
            rule=str(raw.get("rule", "")),
        )
        for raw in data.get("findings") or ()
    )
    return AuditRecord(
        id=str(data["id"]),
        project_id=str(data.get("projectId", "")),
        project_name=str(data.get("projectName", "")),
        date=datetime.fromisoformat(data["date"]),
        analysis=RiskAnalysis.from_payload(data.get("analysis") or {}),
        item_count=int(data.get("itemCount", 0)),
        findings=findings,
        source_hash=str(data.get("sourceHash", "")),
    )


class FileSystemAuditRepository:
    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def save(self, record: AuditRecord) -> Path:
        normalized_run_id = _normalize_run_id(record.id)
        run_dir = self._root / normalized_run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        payload = json.dumps(record_to_dict(record), ensure_ascii=False, indent=2)
        (run_dir / AUDIT_FILE).write_text(payload, encoding="utf-8")

        manifest = {
            "run_id": normalized_run_id,
            "project": record.project_name,
            "source_hash": record.source_hash,
            "files": [{"name": AUDIT_FILE, "bytes": len(payload.encode("utf-8"))}],
        }
        (run_dir / MANIFEST_FILE).write_text(json.dumps(manifest, indent=2), encoding="utf-8")
        return run_dir

    def list_records(self) -> Sequence[AuditRecord]:
        if not self._root.is_dir():
            return []
        records: list[AuditRecord] = []
        for audit_path in self._root.glob(f"*/{AUDIT_FILE}"):
            try:
                data = json.loads(audit_path.read_text(encoding="utf-8"))
                records.append(record_from_dict(data))
            except (json.JSONDecodeError, KeyError, ValueError) as exc:
                raise ValueError(f"Corrupt audit record at {audit_path}: {exc}") from exc
        records.sort(key=lambda r: r.date, reverse=True)
        return records
