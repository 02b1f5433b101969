"""Nutrition domain models."""

from dataclasses import dataclass, field
from enum import Enum


class NutrientKind(Enum):
    """Canonical nutrients tracked per food."""

    CALORIES = "calories"
    PROTEIN = "protein"
    CARBS = "carbs"
    FAT = "fat"
    FIBER = "fiber"
    SUGAR = "sugar"


class NutritionSource(Enum):
    """Tier that produced a resolved nutrition record."""

    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    TERTIARY = "Tertiary"


@dataclass(frozen=True)
class FoodQuery:
    """Raw food description and its search-friendly form."""

    raw: str
    enhanced: str


@dataclass(frozen=True)
class SearchCandidate:
    """Single row from a primary source text search."""

    fdc_id: int
    description: str
    data_type: str | None
    relevance_score: float | None = None


@dataclass(frozen=True)
class Portion:
    """Real-world serving with its mass in grams."""

    amount: float
    unit: str
    gram_weight: float
    labels: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        if self.gram_weight <= 0:
            raise ValueError("gram_weight must be positive")


DEFAULT_PORTION = Portion(amount=100, unit="g", gram_weight=100)
ESTIMATE_PORTION_WEIGHT_G = 100.0


@dataclass(frozen=True)
class NutrientProfile:
    """Calories and macros, either per 100 g or per serving.

    A value of zero means the nutrient could not be resolved.
    """

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float = 0.0
    sugar: float = 0.0

    def has_core_macros(self) -> bool:
        """Return True unless calories, protein and carbs are all zero."""
        return any(value > 0 for value in (self.calories, self.protein, self.carbs))

    def as_dict(self) -> dict[str, float]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "fat": self.fat,
            "fiber": self.fiber,
            "sugar": self.sugar,
        }


@dataclass(frozen=True)
class FoodDetail:
    """Full primary source record for one food."""

    fdc_id: int
    description: str
    data_type: str | None
    nutrients: list[dict[str, object]] = field(default_factory=list)
    portions: list[Portion] = field(default_factory=list)


@dataclass(frozen=True)
class ResolvedNutrition:
    """Terminal nutrition record for one food item.

    ``quantity`` is applied by the consumer; ``nutrients`` is per serving.
    """

    display_name: str
    quantity: float
    serving: Portion
    nutrients: NutrientProfile
    source: NutritionSource
    is_estimate: bool
    fdc_id: int | None = None
    matched_description: str | None = None
