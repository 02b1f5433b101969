"""Tiered nutrition resolution.

Each lookup walks a small state machine, one tier at a time:

1. PRIMARY_SEARCH: FDC search, keyword match, detail fetch, extraction.
2. SECONDARY_SEARCH: general search service asked with the raw query.
3. TERTIARY_ESTIMATE: macros supplied by the caller.
4. LOW_CONFIDENCE_PRIMARY: the FDC candidate that matched no query words,
   tried only when both fallbacks failed.
5. EXHAUSTED: terminal failure.

Tiers never run in parallel within one lookup; independent lookups may run
concurrently through ``resolve_many``.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from food_lookup.domain.errors import FailureReason, LookupFailure, ResolutionFailure
from food_lookup.domain.lookup import CallerEstimate, LookupEnvelope, LookupRequest
from food_lookup.domain.nutrition import (
    FoodQuery,
    NutritionSource,
    ResolvedNutrition,
    SearchCandidate,
)
from food_lookup.services.envelope import build_envelope
from food_lookup.services.fallbacks import SecondarySource, build_estimate_resolution
from food_lookup.services.matching import select_candidate
from food_lookup.services.nutrients import extract_nutrients
from food_lookup.services.nutrition import NutritionService
from food_lookup.services.portions import scale_nutrients, select_portion
from food_lookup.services.query import build_query

_logger = logging.getLogger(__name__)


class ResolutionState(Enum):
    """States of a single lookup, in priority order."""

    PRIMARY_SEARCH = "primary_search"
    SECONDARY_SEARCH = "secondary_search"
    TERTIARY_ESTIMATE = "tertiary_estimate"
    LOW_CONFIDENCE_PRIMARY = "low_confidence_primary"
    EXHAUSTED = "exhausted"
    DONE = "done"


_TERMINAL_STATES = frozenset({ResolutionState.EXHAUSTED, ResolutionState.DONE})


@dataclass
class _ResolutionRun:
    """Mutable per-lookup state; never shared between lookups."""

    query: FoodQuery
    display_name: str
    quantity: float
    estimate: CallerEstimate
    state: ResolutionState = ResolutionState.PRIMARY_SEARCH
    result: ResolvedNutrition | None = None
    last_cause: FailureReason | None = None
    low_confidence_candidate: SearchCandidate | None = None
    visited: list[ResolutionState] = field(default_factory=list)

    def fail(self, cause: FailureReason, next_state: ResolutionState) -> None:
        _logger.info(
            "Lookup %s: %s failed (%s), moving to %s",
            self.query.raw,
            self.state.value,
            cause.value,
            next_state.value,
        )
        self.last_cause = cause
        self.state = next_state

    def succeed(self, result: ResolvedNutrition) -> None:
        _logger.info(
            "Lookup %s: resolved by %s (%s cal per %s)",
            self.query.raw,
            result.source.value,
            result.nutrients.calories,
            result.serving.unit,
        )
        self.result = result
        self.state = ResolutionState.DONE


@dataclass
class ResolutionOutcome:
    """Result of one lookup plus the states it passed through."""

    query: FoodQuery
    result: ResolvedNutrition | None
    failure: ResolutionFailure | None
    visited: list[ResolutionState]


@dataclass
class NutritionResolver:
    """Runs the tiered fallback policy for food lookups.

    ``nutrition_service`` is None when no FDC API key is configured.
    """

    nutrition_service: NutritionService | None
    secondary: SecondarySource
    max_results: int = 5

    async def resolve(self, request: LookupRequest) -> ResolutionOutcome:
        """Resolve one request to nutrition data or a terminal failure."""
        query = build_query(request.food_query)
        run = _ResolutionRun(
            query=query,
            display_name=request.display_name or request.food_query.strip(),
            quantity=request.quantity,
            estimate=request.caller_estimate(),
        )
        handlers = self._handlers()
        while run.state not in _TERMINAL_STATES:
            run.visited.append(run.state)
            await handlers[run.state](run)

        failure = None
        if run.result is None:
            _logger.warning(
                "Lookup %s: all sources exhausted (last cause: %s)",
                query.raw,
                run.last_cause.value if run.last_cause else "n/a",
            )
            failure = ResolutionFailure(query=query, last_cause=run.last_cause)
        return ResolutionOutcome(
            query=query, result=run.result, failure=failure, visited=run.visited
        )

    async def lookup(self, request: LookupRequest) -> LookupEnvelope:
        """Resolve a request and wrap it in the response envelope."""
        outcome = await self.resolve(request)
        return build_envelope(request, outcome.result, outcome.failure)

    async def resolve_many(self, requests: list[LookupRequest]) -> list[LookupEnvelope]:
        """Look up independent foods concurrently, preserving order."""
        return list(await asyncio.gather(*(self.lookup(r) for r in requests)))

    def _handlers(
        self,
    ) -> dict[ResolutionState, Callable[[_ResolutionRun], Awaitable[None]]]:
        return {
            ResolutionState.PRIMARY_SEARCH: self._primary_search,
            ResolutionState.SECONDARY_SEARCH: self._secondary_search,
            ResolutionState.TERTIARY_ESTIMATE: self._tertiary_estimate,
            ResolutionState.LOW_CONFIDENCE_PRIMARY: self._low_confidence_primary,
        }

    async def _primary_search(self, run: _ResolutionRun) -> None:
        if self.nutrition_service is None:
            run.fail(FailureReason.NO_API_KEY, ResolutionState.SECONDARY_SEARCH)
            return
        try:
            candidates = await self.nutrition_service.search(
                run.query.enhanced, max_results=self.max_results
            )
        except LookupFailure as exc:
            run.fail(exc.reason, ResolutionState.SECONDARY_SEARCH)
            return
        if not candidates:
            run.fail(FailureReason.NO_RESULTS, ResolutionState.SECONDARY_SEARCH)
            return

        match = select_candidate(run.query.enhanced, candidates)
        if not match.confident:
            run.low_confidence_candidate = match.candidate
            run.fail(FailureReason.NO_CONFIDENT_MATCH, ResolutionState.SECONDARY_SEARCH)
            return
        _logger.info(
            "Lookup %s: selected %s (fdc_id=%s, overlap=%s)",
            run.query.raw,
            match.candidate.description,
            match.candidate.fdc_id,
            match.overlap,
        )
        try:
            run.succeed(await self._resolve_candidate(run, match.candidate))
        except LookupFailure as exc:
            run.fail(exc.reason, ResolutionState.SECONDARY_SEARCH)

    async def _secondary_search(self, run: _ResolutionRun) -> None:
        try:
            result = await self.secondary.lookup(
                run.query.raw, run.display_name, run.quantity
            )
        except LookupFailure as exc:
            run.fail(exc.reason, ResolutionState.TERTIARY_ESTIMATE)
            return
        except Exception as exc:
            _logger.warning("Secondary lookup error for %s: %s", run.query.raw, exc)
            run.fail(FailureReason.UPSTREAM_ERROR, ResolutionState.TERTIARY_ESTIMATE)
            return
        run.succeed(result)

    async def _tertiary_estimate(self, run: _ResolutionRun) -> None:
        result = build_estimate_resolution(run.estimate, run.display_name, run.quantity)
        if result is not None:
            run.succeed(result)
            return
        # Keep the previous cause; a missing estimate is not a new failure.
        next_state = (
            ResolutionState.LOW_CONFIDENCE_PRIMARY
            if run.low_confidence_candidate is not None
            else ResolutionState.EXHAUSTED
        )
        _logger.info("Lookup %s: no usable caller estimate", run.query.raw)
        run.state = next_state

    async def _low_confidence_primary(self, run: _ResolutionRun) -> None:
        candidate = run.low_confidence_candidate
        if candidate is None:
            run.state = ResolutionState.EXHAUSTED
            return
        try:
            run.succeed(await self._resolve_candidate(run, candidate))
        except LookupFailure as exc:
            run.fail(exc.reason, ResolutionState.EXHAUSTED)

    async def _resolve_candidate(
        self, run: _ResolutionRun, candidate: SearchCandidate
    ) -> ResolvedNutrition:
        if self.nutrition_service is None:
            raise LookupFailure(FailureReason.NO_API_KEY)
        detail = await self.nutrition_service.fetch_detail(candidate.fdc_id)
        per_100g = extract_nutrients(detail.nutrients)
        serving = select_portion(detail.portions)
        nutrients = scale_nutrients(per_100g, serving.gram_weight)
        if not nutrients.has_core_macros():
            raise LookupFailure(
                FailureReason.INCOMPLETE_NUTRIENTS, "serving rounds to zero"
            )
        return ResolvedNutrition(
            display_name=run.display_name,
            quantity=run.quantity,
            serving=serving,
            nutrients=nutrients,
            source=NutritionSource.PRIMARY,
            is_estimate=False,
            fdc_id=detail.fdc_id,
            matched_description=detail.description,
        )
