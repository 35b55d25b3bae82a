import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from metraj_checker.domain.models import Category, Project
from metraj_checker.domain.services import run_structural_rules
from metraj_checker.infrastructure.parsing.utils import parse_optional_quantity, parse_quantity
from metraj_checker.infrastructure.repositories.json_repositories import (
    JsonProjectRepository,
    dump_project,
    project_from_payload,
)


PROJECT_DOCUMENT = {
    "id": "1717000000000",
    "name": "Blok A",
    "createdAt": "2024-05-29T16:26:40.000Z",
    "items": [
        {
            "id": "row-1",
            "pozNumber": "15.150.1005",
            "description": "C30 hazır beton",
            "unit": "m3",
            "multiplier": 1,
            "x": 4,
            "y": 3,
            "z": 0.3,
            "unitWeight": 0,
            "count": 1,
            "totalQuantity": 3.6,
            "category": "Concrete",
        },
        {
            "id": "row-2",
            "pozNumber": "15.160.1003",
            "unit": "kg",
            "x": "2,5",
            "y": "4",
            "unitWeight": "4,22",
            "totalQuantity": "42,2",
            "category": "reinforcement",
        },
    ],
}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.234,5", 1234.5),
        ("1234,5", 1234.5),
        ("12.5", 12.5),
        ("1.234.567", 1234567.0),
        ("(3,5)", -3.5),
        ("  7 adet ", 7.0),
        ("1.5e3", 1500.0),
        ("1e-3", 0.001),
        ("inf", 0.0),
        ("", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("nan", 0.0),
        (7, 7.0),
        (float("nan"), 0.0),
    ],
)
def test_parse_quantity(raw, expected):
    assert parse_quantity(raw) == expected


def test_parse_optional_quantity_keeps_absence():
    assert parse_optional_quantity(None) is None
    assert parse_optional_quantity("  ") is None
    assert parse_optional_quantity("0") == 0.0


def test_load_camel_case_project(tmp_path: Path):
    path = tmp_path / "blok_a.json"
    path.write_text(json.dumps(PROJECT_DOCUMENT, ensure_ascii=False), encoding="utf-8")

    project = JsonProjectRepository(path).get_project()

    assert project.id == "1717000000000"
    assert project.name == "Blok A"
    assert project.created_at == datetime(2024, 5, 29, 16, 26, 40, tzinfo=timezone.utc)
    first, second = project.items
    assert first.poz_number == "15.150.1005"
    assert first.total_quantity == 3.6
    assert first.category is Category.CONCRETE
    assert second.x == 2.5
    assert second.unit_weight == 4.22
    assert second.total_quantity == 42.2
    assert second.category is Category.REINFORCEMENT
    assert second.z is None


def test_bare_item_list_uses_file_stem_as_name(tmp_path: Path):
    path = tmp_path / "kalip.json"
    path.write_text(json.dumps([{"unit": "m2", "x": 2, "y": 3, "totalQuantity": 6}]), encoding="utf-8")

    project = JsonProjectRepository(path).get_project()

    assert project.name == "kalip"
    assert project.items[0].id == "item-0"
    assert project.items[0].category is Category.CONCRETE


def test_unknown_category_is_kept_verbatim():
    project = project_from_payload(
        {"items": [{"id": "s1", "category": "Steel", "unit": "m3", "x": 2, "y": 3, "totalQuantity": 6}]}
    )
    item = project.items[0]
    assert item.category == "Steel"

    findings = run_structural_rules(project.items)
    assert [f.rule for f in findings] == ["calculation_mismatch"]

    dumped = json.loads(dump_project(project))
    assert dumped["items"][0]["category"] == "Steel"


def test_blank_category_defaults_to_concrete():
    project = project_from_payload({"items": [{"id": "1", "category": "  "}]})
    assert project.items[0].category is Category.CONCRETE


def test_bytes_source():
    repo = JsonProjectRepository(json.dumps(PROJECT_DOCUMENT).encode("utf-8"), name="inline")
    project = repo.get_project()
    assert len(project.items) == 2
    assert len(project.source_hash) == 64


def test_invalid_json_raises_value_error():
    with pytest.raises(ValueError, match="not valid JSON"):
        JsonProjectRepository(b"{not json").get_project()


def test_items_must_be_a_list():
    with pytest.raises(ValueError, match="must be a list"):
        project_from_payload({"items": {"id": "1"}})


def test_items_must_be_objects():
    with pytest.raises(ValueError, match="Item #1"):
        project_from_payload({"items": [{"id": "1"}, 5]})


def test_unsupported_source_type():
    with pytest.raises(TypeError):
        JsonProjectRepository(12345)  # type: ignore[arg-type]


def test_dump_project_round_trips_through_loader():
    project = project_from_payload(PROJECT_DOCUMENT)

    reloaded = JsonProjectRepository(dump_project(project).encode("utf-8")).get_project()

    assert isinstance(reloaded, Project)
    assert reloaded.items == project.items
    assert json.loads(dump_project(project))["items"][0]["pozNumber"] == "15.150.1005"
