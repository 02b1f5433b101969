"""Pydantic models for the tool-style lookup request and its envelope."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CallerEstimate(_CamelModel):
    """Rough per-serving macros supplied alongside a lookup request."""

    estimated_calories: float | None = Field(default=None, ge=0)
    estimated_protein: float | None = Field(default=None, ge=0)
    estimated_carbs: float | None = Field(default=None, ge=0)
    estimated_fat: float | None = Field(default=None, ge=0)
    estimated_fiber: float | None = Field(default=None, ge=0)
    estimated_sugar: float | None = Field(default=None, ge=0)

    def is_provided(self) -> bool:
        """Return True if the caller supplied any estimate field."""
        return any(
            value is not None
            for value in (
                self.estimated_calories,
                self.estimated_protein,
                self.estimated_carbs,
                self.estimated_fat,
                self.estimated_fiber,
                self.estimated_sugar,
            )
        )


class LookupRequest(CallerEstimate):
    """Tool invocation: look up a food and prepare it for logging."""

    food_query: str = Field(min_length=1)
    display_name: str | None = None
    quantity: float = Field(default=1, gt=0)
    meal: MealType | None = None

    def caller_estimate(self) -> CallerEstimate:
        return CallerEstimate.model_validate(
            self.model_dump(include=set(CallerEstimate.model_fields))
        )


class ServingPayload(_CamelModel):
    amount: float
    unit: str
    gram_weight: float


class NutrientsPayload(BaseModel):
    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float
    sugar: float


class LookupEntry(_CamelModel):
    """Food entry awaiting user confirmation."""

    name: str
    quantity: float
    serving: ServingPayload
    nutrients: NutrientsPayload
    meal: MealType | None = None
    fdc_id: int | None = None
    estimated: bool


class LookupEnvelope(_CamelModel):
    """Uniform response shape shared by every tier."""

    success: bool
    entry: LookupEntry | None = None
    message: str
    source: str | None = None
    estimated: bool | None = None
    reason: str | None = None
    food_query: str | None = None
