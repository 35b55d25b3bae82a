"""JSON-backed repositories for metraj projects."""
from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Any, Mapping

from metraj_checker.domain.models import Category, LineItem, Project, category_label
from metraj_checker.domain.repositories import ProjectRepository
from metraj_checker.infrastructure.parsing.utils import (
    compute_file_hash,
    ensure_bytes,
    parse_optional_quantity,
    parse_quantity,
)

# camelCase keys as exported by the browser app
_KEY_ALIASES = {
    "pozNumber": "poz_number",
    "unitWeight": "unit_weight",
    "totalQuantity": "total_quantity",
    "calculatedQuantity": "calculated_quantity",
}


def _normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {_KEY_ALIASES.get(str(key), str(key)): value for key, value in raw.items()}


def _parse_created_at(value: object) -> datetime:
    if isinstance(value, str) and value.strip():
        text = value.strip().replace("Z", "+00:00")
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    return datetime.fromtimestamp(0, tz=timezone.utc)


def item_from_mapping(raw: Mapping[str, Any], index: int = 0) -> LineItem:
    data = _normalize_keys(raw)
    item_id = str(data.get("id") or f"item-{index}")
    return LineItem(
        id=item_id,
        poz_number=str(data.get("poz_number") or ""),
        description=str(data.get("description") or ""),
        unit=str(data.get("unit") or ""),
        x=parse_optional_quantity(data.get("x")),
        y=parse_optional_quantity(data.get("y")),
        z=parse_optional_quantity(data.get("z")),
        multiplier=parse_optional_quantity(data.get("multiplier")),
        count=parse_optional_quantity(data.get("count")),
        unit_weight=parse_optional_quantity(data.get("unit_weight")),
        category=Category.parse(data.get("category")),
        total_quantity=parse_quantity(data.get("total_quantity")),
        calculated_quantity=parse_optional_quantity(data.get("calculated_quantity")),
        notes=data.get("notes"),
    )


def item_to_mapping(item: LineItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "pozNumber": item.poz_number,
        "description": item.description,
        "unit": item.unit,
        "multiplier": item.multiplier,
        "x": item.x,
        "y": item.y,
        "z": item.z,
        "area": item.area,
        "volume": item.volume,
        "unitWeight": item.unit_weight,
        "count": item.count,
        "totalQuantity": item.total_quantity,
        "calculatedQuantity": item.calculated_quantity,
        "category": category_label(item.category),
        "notes": item.notes,
    }


def project_from_payload(payload: object, default_name: str = "project") -> Project:
    """Build a :class:`Project` from a project document or a bare item list."""
    if isinstance(payload, list):
        payload = {"items": payload}
    if not isinstance(payload, Mapping):
        raise ValueError("Project document must be a JSON object or a list of items")
    raw_items = payload.get("items")
    if raw_items is None:
        raw_items = []
    if not isinstance(raw_items, list):
        raise ValueError("Project 'items' must be a list")

    items: list[LineItem] = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, Mapping):
            raise ValueError(f"Item #{index} is not a JSON object")
        items.append(item_from_mapping(raw, index))

    return Project(
        id=str(payload.get("id") or default_name),
        name=str(payload.get("name") or default_name),
        created_at=_parse_created_at(payload.get("createdAt") or payload.get("created_at")),
        items=tuple(items),
    )


class JsonProjectRepository(ProjectRepository):
    def __init__(self, source: BytesIO | Path | bytes | str, name: str | None = None) -> None:
        self._source = ensure_bytes(source)
        if name is None and isinstance(source, (Path, str)):
            name = Path(source).stem
        self._name = name or "project"

    def get_project(self) -> Project:
        try:
            payload = json.loads(self._source.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValueError(f"Project file is not valid JSON: {exc}") from exc
        project = project_from_payload(payload, default_name=self._name)
        return replace(project, source_hash=compute_file_hash(self._source))


def dump_project(project: Project) -> str:
    payload = {
        "id": project.id,
        "name": project.name,
        "createdAt": project.created_at.isoformat(),
        "items": [item_to_mapping(item) for item in project.items],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)
