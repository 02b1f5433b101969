"""Primary nutrition source: USDA FDC search and detail lookups."""

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from food_lookup.adapters.fdc_client import DEFAULT_DATA_TYPES, FdcClient
from food_lookup.domain.errors import FailureReason, LookupFailure
from food_lookup.domain.nutrition import FoodDetail, SearchCandidate
from food_lookup.services.portions import parse_portion

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class NutritionService:
    """Service for FDC lookups that maps transport errors to tier failures."""

    fdc_client: FdcClient
    data_types: tuple[str, ...] = DEFAULT_DATA_TYPES
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, text: str, max_results: int = 5) -> list[SearchCandidate]:
        """Search FDC foods; an empty list means no matches."""
        if max_results < 1:
            raise ValueError("max_results must be at least 1")
        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(
                text, page_size=max_results, data_types=self.data_types
            ),
            action="search",
        )
        _require_mapping(payload, action="search")
        candidates = [
            candidate
            for candidate in map(_candidate_from_row, _as_list(payload.get("foods")))
            if candidate is not None
        ]
        _logger.info("FDC search: query=%s results=%s", text, len(candidates))
        for index, candidate in enumerate(candidates, start=1):
            _logger.debug(
                "  %s. [%s] %s (score: %s)",
                index,
                candidate.data_type,
                candidate.description,
                candidate.relevance_score,
            )
        return candidates

    async def fetch_detail(self, fdc_id: int) -> FoodDetail:
        """Retrieve the nutrient list and portions for one food."""
        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        _require_mapping(payload, action=f"get_food:{fdc_id}")
        portions = [
            parse_portion(portion)
            for portion in _as_list(payload.get("foodPortions"))
            if isinstance(portion, dict)
        ]
        detail = FoodDetail(
            fdc_id=_as_int(payload.get("fdcId")) or fdc_id,
            description=str(payload.get("description") or ""),
            data_type=payload.get("dataType"),
            nutrients=[
                n for n in _as_list(payload.get("foodNutrients")) if isinstance(n, dict)
            ],
            portions=portions,
        )
        _logger.info("FDC food: fdc_id=%s description=%s", fdc_id, detail.description)
        return detail

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                _logger.warning(
                    "FDC %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    status_code,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise LookupFailure(
                        FailureReason.UPSTREAM_ERROR,
                        f"FDC {action} failed with status {status_code}",
                    ) from exc
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _require_mapping(payload: object, *, action: str) -> None:
    """Reject response bodies that are not JSON objects."""
    if not isinstance(payload, dict):
        raise LookupFailure(
            FailureReason.UPSTREAM_ERROR, f"FDC {action} returned a malformed body"
        )


def _as_list(value: object) -> list[object]:
    return value if isinstance(value, list) else []


def _as_int(value: object) -> int | None:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _candidate_from_row(food: object) -> SearchCandidate | None:
    """Map one search row, skipping rows without a usable FDC id."""
    if not isinstance(food, dict):
        return None
    fdc_id = _as_int(food.get("fdcId"))
    if fdc_id is None:
        _logger.warning("Skipping FDC search row without fdcId: %s", food)
        return None
    score = food.get("score")
    return SearchCandidate(
        fdc_id=fdc_id,
        description=str(food.get("description") or ""),
        data_type=food.get("dataType"),
        relevance_score=float(score) if isinstance(score, int | float) else None,
    )
