"""Quantity statistics and spreadsheet export for metraj projects."""
from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from metraj_checker.domain.calculator import (
    DEFAULT_DECIMAL_PLACES,
    UnitKind,
    calculate_quantity,
    classify_unit,
)
from metraj_checker.domain.models import Finding, LineItem, category_label
from metraj_checker.presentation.findings_report import findings_to_rows

ITEM_COLUMNS = [
    "id",
    "poz_number",
    "description",
    "category",
    "unit",
    "multiplier",
    "x",
    "y",
    "z",
    "area",
    "volume",
    "unit_weight",
    "count",
    "total_quantity",
    "calculated_quantity",
    "difference",
]


@dataclass(frozen=True)
class QuantityStatistics:
    item_count: int
    total_volume: float
    total_area: float


def summarize_quantities(items: Sequence[LineItem]) -> QuantityStatistics:
    """Sum manual totals of volume (m3) and area (m2) items."""
    volume = 0.0
    area = 0.0
    for item in items:
        kind = classify_unit(item.unit)
        if kind is UnitKind.VOLUME:
            volume += item.total_quantity
        elif kind is UnitKind.AREA:
            area += item.total_quantity
    return QuantityStatistics(item_count=len(items), total_volume=volume, total_area=area)


def items_to_dataframe(items: Sequence[LineItem], places: int = DEFAULT_DECIMAL_PLACES) -> pd.DataFrame:
    rows = []
    for item in items:
        calculated = item.calculated_quantity
        if calculated is None:
            calculated = calculate_quantity(item, places)
        rows.append(
            {
                "id": item.id,
                "poz_number": item.poz_number,
                "description": item.description,
                "category": category_label(item.category),
                "unit": item.unit,
                "multiplier": item.multiplier,
                "x": item.x,
                "y": item.y,
                "z": item.z,
                "area": item.area,
                "volume": item.volume,
                "unit_weight": item.unit_weight,
                "count": item.count,
                "total_quantity": item.total_quantity,
                "calculated_quantity": calculated,
                "difference": item.total_quantity - calculated,
            }
        )
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def export_items_excel(
    items: Sequence[LineItem],
    findings: Sequence[Finding] = (),
    out_path: Path | BytesIO | None = None,
    places: int = DEFAULT_DECIMAL_PLACES,
) -> bytes:
    """Write a "Metraj" sheet (flagged rows highlighted) and a "Findings" sheet."""
    items_df = items_to_dataframe(items, places)
    findings_df = pd.DataFrame(findings_to_rows(findings, items))
    flagged = {f.item_id for f in findings}

    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        items_df.to_excel(writer, sheet_name="Metraj", index=False)
        findings_df.to_excel(writer, sheet_name="Findings", index=False)
        if flagged:
            workbook = writer.book
            worksheet = writer.sheets["Metraj"]
            yellow = workbook.add_format({"bg_color": "#FFFF00"})
            last_col = len(ITEM_COLUMNS) - 1
            for r, item_id in enumerate(items_df["id"]):
                if item_id in flagged:
                    # row 0 is the header
                    worksheet.conditional_format(r + 1, 0, r + 1, last_col, {
                        "type": "no_blanks",
                        "format": yellow,
                    })
    data = buf.getvalue()
    if isinstance(out_path, BytesIO):
        out_path.write(data)
    elif out_path is not None:
        Path(out_path).write_bytes(data)
    return data
