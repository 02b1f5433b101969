"""Tests for nutrient extraction and calorie reconciliation."""

import pytest

from food_lookup.domain.errors import FailureReason, LookupFailure
from food_lookup.services.nutrients import (
    extract_nutrients,
    find_nutrient,
    reconcile_calories,
)
from food_lookup.services.portions import round_calories
from tests.conftest import BANANA_DETAIL


def test_find_nutrient_reads_every_identifier_scheme() -> None:
    assert find_nutrient([{"nutrientId": 1003, "value": 3.1}], [1003]) == 3.1
    assert find_nutrient([{"nutrient": {"id": 1003}, "amount": 2.5}], [1003]) == 2.5
    assert find_nutrient([{"nutrientNumber": "203", "value": 4.0}], [1003, 203]) == 4.0


def test_find_nutrient_skips_zero_values_in_priority_order() -> None:
    entries = [
        {"nutrientId": 1008, "value": 0},
        {"nutrient": {"id": 2047}, "amount": 61},
        {"nutrient": {"id": 2048}, "amount": 59},
    ]

    assert find_nutrient(entries, [1008, 208, 2047, 2048]) == 61


def test_find_nutrient_returns_zero_when_missing() -> None:
    assert find_nutrient([{"nutrientId": 1004, "value": 1.0}], [1003, 203]) == 0.0


@pytest.mark.parametrize(
    ("protein", "carbs", "fat"),
    [(31.0, 0.0, 3.6), (1.09, 22.84, 0.33), (0.0, 0.0, 100.0), (8.25, 12.5, 0.5)],
)
def test_reconcile_calories_uses_atwater_factors(
    protein: float, carbs: float, fat: float
) -> None:
    expected = round_calories(protein * 4 + carbs * 4 + fat * 9)

    assert reconcile_calories(0, protein, carbs, fat) == expected


def test_reconcile_calories_prefers_direct_value() -> None:
    assert reconcile_calories(88.6, 1.0, 20.0, 0.3) == 89


def test_extract_nutrients_backfills_calories() -> None:
    entries = [
        {"nutrientId": 1003, "value": 10},
        {"nutrientId": 1005, "value": 20},
        {"nutrientId": 1004, "value": 5},
    ]

    profile = extract_nutrients(entries)

    assert profile.calories == 165
    assert profile.fiber == 0
    assert profile.sugar == 0


def test_extract_nutrients_reads_sugar_fallback_id() -> None:
    entries = [
        {"nutrientId": 1008, "value": 52},
        {"nutrientId": 1063, "value": 10.4},
    ]

    profile = extract_nutrients(entries)

    assert profile.calories == 52
    assert profile.sugar == 10.4


def test_extract_nutrients_rejects_empty_record() -> None:
    entries = [{"nutrientId": 1008, "value": 0}, {"nutrientId": 1079, "value": 2.0}]

    with pytest.raises(LookupFailure) as excinfo:
        extract_nutrients(entries)

    assert excinfo.value.reason is FailureReason.INCOMPLETE_NUTRIENTS


def test_extract_nutrients_rounds_per_100g_values() -> None:
    profile = extract_nutrients(BANANA_DETAIL["foodNutrients"])

    assert profile.as_dict() == {
        "calories": 89,
        "protein": 1.1,
        "carbs": 22.8,
        "fat": 0.3,
        "fiber": 2.6,
        "sugar": 12.2,
    }


def test_extract_nutrients_backfills_calories_from_unrounded_macros() -> None:
    entries = [
        {"nutrientId": 1003, "value": 1.04},
        {"nutrientId": 1005, "value": 1.04},
        {"nutrientId": 1004, "value": 1.04},
    ]

    profile = extract_nutrients(entries)

    assert profile.calories == 18
    assert profile.protein == 1.0
