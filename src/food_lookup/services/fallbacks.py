"""Secondary (search service) and tertiary (caller estimate) fallbacks."""

import json
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, Field, ValidationError

from food_lookup.domain.errors import SecondaryParseError, SecondaryUnavailableError
from food_lookup.domain.lookup import CallerEstimate
from food_lookup.domain.nutrition import (
    ESTIMATE_PORTION_WEIGHT_G,
    NutrientProfile,
    NutritionSource,
    Portion,
    ResolvedNutrition,
)
from food_lookup.services.portions import round_calories, round_grams

_logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_BARE_BLOCK = re.compile(r"\{[^{}]*\}", re.DOTALL)

SECONDARY_PROMPT = (
    'What are the nutrition facts for one typical serving of "{query}"? '
    "Answer briefly, then include exactly one JSON object with the keys "
    '"serving", "calories", "protein", "carbs", "fat", "fiber" and "sugar". '
    '"serving" is a short description of the serving size; the other values '
    "are numbers in kcal or grams for that serving."
)


class SearchClient(Protocol):
    """Interface for a general knowledge/search service."""

    async def ask(self, question: str) -> str:
        """Return a free-text answer to a natural-language question."""


class SecondaryNutritionBlock(BaseModel):
    """Structured nutrient fields embedded in a secondary answer."""

    serving: str | None = None
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    fiber: float = Field(default=0, ge=0)
    sugar: float = Field(default=0, ge=0)


def parse_nutrition_block(text: str) -> SecondaryNutritionBlock:
    """Locate and validate the JSON block inside a free-text answer."""
    candidates = [match.group(1) for match in _FENCED_BLOCK.finditer(text)]
    candidates.extend(match.group(0) for match in _BARE_BLOCK.finditer(text))
    for raw in candidates:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            continue
        if not isinstance(data, dict):
            continue
        try:
            return SecondaryNutritionBlock.model_validate(data)
        except ValidationError:
            continue
    raise SecondaryParseError("no nutrition block in secondary answer")


@dataclass
class SecondarySource:
    """Ask a search service for nutrition facts about the raw query."""

    client: SearchClient | None

    async def lookup(
        self, raw_query: str, display_name: str, quantity: float
    ) -> ResolvedNutrition:
        """Resolve nutrition from the search service or raise a tier failure."""
        if self.client is None:
            raise SecondaryUnavailableError("search client not configured")
        answer = await self.client.ask(SECONDARY_PROMPT.format(query=raw_query))
        block = parse_nutrition_block(answer or "")
        nutrients = NutrientProfile(
            calories=round_calories(block.calories),
            protein=round_grams(block.protein),
            carbs=round_grams(block.carbs),
            fat=round_grams(block.fat),
            fiber=round_grams(block.fiber),
            sugar=round_grams(block.sugar),
        )
        if not nutrients.has_core_macros():
            raise SecondaryParseError("secondary answer has no calories or macros")
        _logger.info(
            "Secondary answer: query=%s calories=%s serving=%s",
            raw_query,
            nutrients.calories,
            block.serving,
        )
        return ResolvedNutrition(
            display_name=display_name,
            quantity=quantity,
            serving=Portion(
                amount=1,
                unit=block.serving or "serving",
                gram_weight=ESTIMATE_PORTION_WEIGHT_G,
            ),
            nutrients=nutrients,
            source=NutritionSource.SECONDARY,
            is_estimate=True,
        )


def build_estimate_resolution(
    estimate: CallerEstimate, display_name: str, quantity: float
) -> ResolvedNutrition | None:
    """Turn caller-supplied macros into a resolution, if they are usable."""
    if not estimate.is_provided():
        return None
    nutrients = NutrientProfile(
        calories=round_calories(estimate.estimated_calories or 0),
        protein=round_grams(estimate.estimated_protein or 0),
        carbs=round_grams(estimate.estimated_carbs or 0),
        fat=round_grams(estimate.estimated_fat or 0),
        fiber=round_grams(estimate.estimated_fiber or 0),
        sugar=round_grams(estimate.estimated_sugar or 0),
    )
    if not nutrients.has_core_macros():
        return None
    return ResolvedNutrition(
        display_name=display_name,
        quantity=quantity,
        serving=Portion(
            amount=1, unit="serving", gram_weight=ESTIMATE_PORTION_WEIGHT_G
        ),
        nutrients=nutrients,
        source=NutritionSource.TERTIARY,
        is_estimate=True,
    )
