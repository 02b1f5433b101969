"""Nutrient extraction across FDC identifier schemes."""

from collections.abc import Iterable

from food_lookup.domain.errors import FailureReason, LookupFailure
from food_lookup.domain.nutrition import NutrientKind, NutrientProfile
from food_lookup.services.portions import round_calories, round_grams

# Probe order per nutrient. Energy appears as 1008 (standard), 208 (legacy
# nutrient number), 2047 (Atwater general) and 2048 (Atwater specific).
NUTRIENT_IDS: tuple[tuple[NutrientKind, tuple[int, ...]], ...] = (
    (NutrientKind.CALORIES, (1008, 208, 2047, 2048)),
    (NutrientKind.PROTEIN, (1003, 203)),
    (NutrientKind.CARBS, (1005, 205)),
    (NutrientKind.FAT, (1004, 204)),
    (NutrientKind.FIBER, (1079, 291)),
    (NutrientKind.SUGAR, (2000, 1063, 269)),
)

ATWATER_PROTEIN = 4
ATWATER_CARBS = 4
ATWATER_FAT = 9


def _entry_matches(entry: dict[str, object], nutrient_id: int) -> bool:
    """Check the three places FDC records put a nutrient identifier."""
    if entry.get("nutrientId") == nutrient_id:
        return True
    nutrient_info = entry.get("nutrient")
    if isinstance(nutrient_info, dict) and nutrient_info.get("id") == nutrient_id:
        return True
    return entry.get("nutrientNumber") == str(nutrient_id)


def _entry_amount(entry: dict[str, object]) -> float:
    value = entry.get("value")
    if value is None:
        value = entry.get("amount")
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def find_nutrient(entries: list[dict[str, object]], ids: Iterable[int]) -> float:
    """Return the first strictly positive value found, probing ids in order."""
    for nutrient_id in ids:
        entry = next((e for e in entries if _entry_matches(e, nutrient_id)), None)
        if entry is None:
            continue
        amount = _entry_amount(entry)
        if amount > 0:
            return amount
    return 0.0


def reconcile_calories(direct: float, protein: float, carbs: float, fat: float) -> int:
    """Use direct energy if present, otherwise derive it from macros."""
    if direct > 0:
        return round_calories(direct)
    return round_calories(
        protein * ATWATER_PROTEIN + carbs * ATWATER_CARBS + fat * ATWATER_FAT
    )


def extract_nutrients(entries: list[dict[str, object]]) -> NutrientProfile:
    """Extract a per-100 g profile, rejecting records without core values.

    Calories are derived from unrounded macros; the returned macros are
    rounded to one decimal.
    """
    values = {kind: find_nutrient(entries, ids) for kind, ids in NUTRIENT_IDS}
    protein = values[NutrientKind.PROTEIN]
    carbs = values[NutrientKind.CARBS]
    fat = values[NutrientKind.FAT]
    calories = reconcile_calories(values[NutrientKind.CALORIES], protein, carbs, fat)
    protein, carbs, fat = round_grams(protein), round_grams(carbs), round_grams(fat)
    if calories == 0 and protein == 0 and carbs == 0 and fat == 0:
        raise LookupFailure(
            FailureReason.INCOMPLETE_NUTRIENTS, "no calories or macros in record"
        )
    return NutrientProfile(
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        fiber=round_grams(values[NutrientKind.FIBER]),
        sugar=round_grams(values[NutrientKind.SUGAR]),
    )
