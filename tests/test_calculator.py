import math

import pytest

from metraj_checker.domain.calculator import (
    UnitKind,
    calculate_quantity,
    classify_unit,
    resolve_inputs,
    round_quantity,
    with_calculated_quantity,
)
from metraj_checker.domain.models import LineItem


def make_item(unit: str, **fields) -> LineItem:
    return LineItem(id="1", poz_number="15.150.1005", unit=unit, **fields)


def test_volume_unit_multiplies_all_dimensions():
    item = make_item("m3", x=2, y=3, z=4, multiplier=2, count=3)
    assert calculate_quantity(item) == 144.0


def test_area_unit_ignores_z():
    item = make_item("m2", x=2.5, y=4, z=9, multiplier=2)
    assert calculate_quantity(item) == 20.0


def test_kg_uses_area_when_z_is_zero():
    item = make_item("kg", x=2, y=3, z=0, unit_weight=3.5, multiplier=2)
    assert calculate_quantity(item) == 42.0


def test_kg_uses_volume_when_z_present():
    item = make_item("kg", x=2, y=3, z=0.5, unit_weight=7850)
    assert calculate_quantity(item) == 23550.0


def test_ton_is_kg_divided_by_thousand():
    ton = calculate_quantity({"unit": "ton", "x": 2, "y": 2, "z": 2, "unit_weight": 500})
    kg = calculate_quantity({"unit": "kg", "x": 2, "y": 2, "z": 2, "unit_weight": 500})
    assert kg == 4000.0
    assert ton == kg / 1000


def test_weight_without_unit_weight_is_zero():
    assert calculate_quantity({"unit": "kg", "x": 2, "y": 3}) == 0.0


def test_count_unit_defaults_to_one_when_dimensions_are_zero():
    assert calculate_quantity({"unit": "adet", "x": 0, "y": 0, "z": 0}) == 1


def test_linear_unit_takes_first_non_zero_dimension():
    assert calculate_quantity({"unit": "m", "x": 0, "y": 5, "z": 2}) == 5.0
    assert calculate_quantity({"unit": "mt", "x": 12.5, "count": 4}) == 50.0


def test_unit_is_case_insensitive():
    lower = make_item("m3", x=1.5, y=2, z=3)
    upper = make_item("M3", x=1.5, y=2, z=3)
    assert calculate_quantity(lower) == calculate_quantity(upper) == 9.0


def test_empty_item_resolves_to_defaults():
    assert calculate_quantity({}) == 1.0
    assert calculate_quantity({"unit": "m3"}) == 0.0


def test_zero_multiplier_and_count_fall_back_to_one():
    assert calculate_quantity({"unit": "m2", "x": 2, "y": 3, "multiplier": 0, "count": 0}) == 6.0


def test_nan_and_non_numeric_fields_resolve_to_defaults():
    assert calculate_quantity({"unit": "m", "x": float("nan"), "y": 3}) == 3.0
    assert calculate_quantity({"unit": "m", "x": "abc", "y": 2}) == 2.0
    assert calculate_quantity({"unit": "m", "x": "2.5"}) == 2.5


def test_line_item_and_mapping_agree():
    item = make_item("kg", x=1.2, y=2.4, unit_weight=4.22, count=3)
    mapping = {"unit": "kg", "x": 1.2, "y": 2.4, "unit_weight": 4.22, "count": 3}
    assert calculate_quantity(item) == calculate_quantity(mapping)


def test_result_is_rounded_to_three_decimals():
    assert calculate_quantity({"unit": "m3", "x": 1.1, "y": 1.1, "z": 1.1}) == 1.331
    assert calculate_quantity({"unit": "m3", "x": 4, "y": 3, "z": 0.3}) == 3.6


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.0005, 1.001),
        (-1.0005, -1.001),
        (2.0004, 2.0),
        (0.0005, 0.001),
        (2.6745, 2.675),
    ],
)
def test_rounding_breaks_ties_away_from_zero(value, expected):
    assert round_quantity(value) == expected


def test_rounding_tie_uses_decimal_text_not_binary_value():
    # 1.0005 is stored slightly below the tie in binary
    assert calculate_quantity({"unit": "m", "x": 1.0005}) == 1.001


def test_rounding_never_returns_negative_zero():
    result = round_quantity(-0.0001)
    assert result == 0.0
    assert math.copysign(1.0, result) == 1.0


def test_rounding_handles_large_values():
    assert round_quantity(1e30) == 1e30


def test_negative_dimensions_pass_through():
    assert calculate_quantity({"unit": "m2", "x": -2, "y": 3}) == -6.0
    assert calculate_quantity({"unit": "m3", "x": -2, "y": 3, "z": 1}) == -6.0


def test_negative_z_selects_area_basis_for_weights():
    assert calculate_quantity({"unit": "kg", "x": 2, "y": 3, "z": -1, "unit_weight": 10}) == 60.0


def test_calculation_is_deterministic():
    item = make_item("ton", x=3.3, y=1.7, z=0.25, unit_weight=2400, multiplier=3, count=2)
    results = {calculate_quantity(item) for _ in range(20)}
    assert len(results) == 1


def test_classify_unit():
    assert classify_unit("M2") is UnitKind.AREA
    assert classify_unit(" ton ") is UnitKind.WEIGHT_TON
    assert classify_unit("adet") is UnitKind.LINEAR
    assert classify_unit(None) is UnitKind.LINEAR
    assert classify_unit("linear") is UnitKind.LINEAR


def test_resolve_inputs_treats_absent_and_zero_alike():
    absent = resolve_inputs({"unit": "KG"})
    zero = resolve_inputs({"unit": "kg", "x": 0, "y": 0, "z": 0, "multiplier": 0, "count": 0, "unit_weight": 0})
    assert absent == zero
    assert absent.multiplier == 1.0
    assert absent.count == 1.0
    assert absent.unit == "kg"


def test_with_calculated_quantity_returns_new_item():
    item = make_item("m2", x=2, y=3)
    updated = with_calculated_quantity(item)
    assert updated.calculated_quantity == 6.0
    assert item.calculated_quantity is None
    assert updated.area == 6


@pytest.mark.parametrize("places", [17, 400, 500])
def test_rounding_supports_wide_precision(places):
    assert calculate_quantity({"unit": "m", "x": 1.5}, places=places) == 1.5
    assert round_quantity(1e300, places) == 1e300


def test_with_calculated_quantity_honours_places():
    item = make_item("m3", x=1.1, y=1.1, z=1.1)
    assert with_calculated_quantity(item, 2).calculated_quantity == 1.33
