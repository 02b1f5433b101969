"""Serving selection and per-serving scaling."""

import math

from food_lookup.domain.nutrition import DEFAULT_PORTION, NutrientProfile, Portion

_PREFERRED_PORTION_WORD = "medium"


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_calories(value: float) -> int:
    return int(round_half_up(value))


def round_grams(value: float) -> float:
    return round_half_up(value, 1)


def parse_portion(raw: dict[str, object]) -> Portion:
    """Build a portion from an FDC ``foodPortions`` entry."""
    amount = _positive_float(raw.get("amount")) or 1.0
    gram_weight = _positive_float(raw.get("gramWeight")) or 100.0
    measure_unit = raw.get("measureUnit")
    measure_name = measure_unit.get("name") if isinstance(measure_unit, dict) else None
    if measure_name == "undetermined":
        measure_name = None
    labels = tuple(
        str(raw[key]) for key in ("modifier", "portionDescription") if raw.get(key)
    )
    unit = labels[0] if labels else measure_name
    return Portion(
        amount=amount,
        unit=str(unit or "serving"),
        gram_weight=gram_weight,
        labels=labels,
    )


def _positive_float(value: object) -> float | None:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def select_portion(portions: list[Portion]) -> Portion:
    """Prefer a "medium" portion when there is a choice."""
    if not portions:
        return DEFAULT_PORTION
    if len(portions) > 1:
        for portion in portions:
            if any(
                _PREFERRED_PORTION_WORD in label.lower()
                for label in (portion.unit, *portion.labels)
            ):
                return portion
    return portions[0]


def scale_nutrients(per_100g: NutrientProfile, gram_weight: float) -> NutrientProfile:
    """Scale per-100 g values to a serving of ``gram_weight`` grams."""
    scale = gram_weight / 100
    return NutrientProfile(
        calories=round_calories(per_100g.calories * scale),
        protein=round_grams(per_100g.protein * scale),
        carbs=round_grams(per_100g.carbs * scale),
        fat=round_grams(per_100g.fat * scale),
        fiber=round_grams(per_100g.fiber * scale),
        sugar=round_grams(per_100g.sugar * scale),
    )
