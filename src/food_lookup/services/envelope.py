"""Build the uniform lookup response envelope."""

from food_lookup.domain.errors import ResolutionFailure
from food_lookup.domain.lookup import (
    LookupEntry,
    LookupEnvelope,
    LookupRequest,
    NutrientsPayload,
    ServingPayload,
)
from food_lookup.domain.nutrition import ResolvedNutrition


def build_envelope(
    request: LookupRequest,
    result: ResolvedNutrition | None,
    failure: ResolutionFailure | None = None,
) -> LookupEnvelope:
    """Wrap a resolution or failure into the envelope the chat layer renders."""
    if result is None:
        reason = failure.reason.value if failure else "AllSourcesExhausted"
        return LookupEnvelope(
            success=False,
            message=(
                f'Could not find nutrition data for "{request.food_query}". '
                "Please provide your best estimate for calories, protein, "
                "carbs, and fat."
            ),
            reason=reason,
            food_query=request.food_query,
        )

    entry = LookupEntry(
        name=result.display_name,
        quantity=result.quantity,
        serving=ServingPayload(
            amount=result.serving.amount,
            unit=result.serving.unit,
            gram_weight=result.serving.gram_weight,
        ),
        nutrients=NutrientsPayload(**result.nutrients.as_dict()),
        meal=request.meal,
        fdc_id=result.fdc_id,
        estimated=result.is_estimate,
    )
    return LookupEnvelope(
        success=True,
        entry=entry,
        message=_success_message(result),
        source=result.source.value,
        estimated=result.is_estimate,
        food_query=request.food_query,
    )


def _success_message(result: ResolvedNutrition) -> str:
    quantity = _format_number(result.quantity)
    if result.is_estimate:
        return (
            f"Logged {quantity} {result.display_name} "
            f"(estimated: {_format_number(result.nutrients.calories)} cal)"
        )
    calories = _format_number(round(result.nutrients.calories * result.quantity))
    protein = _format_number(round(result.nutrients.protein * result.quantity, 1))
    return (
        f"Logged {quantity} {result.serving.unit} {result.display_name} - "
        f"{calories} cal, {protein}g protein"
    )


def _format_number(value: float) -> str:
    """Render whole numbers without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
