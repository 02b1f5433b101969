"""Failure taxonomy for nutrition resolution."""

from dataclasses import dataclass
from enum import Enum

from food_lookup.domain.nutrition import FoodQuery


class FailureReason(Enum):
    """Why a tier (or the whole resolution) failed."""

    NO_API_KEY = "NoApiKey"
    UPSTREAM_ERROR = "UpstreamError"
    NO_RESULTS = "NoResults"
    NO_CONFIDENT_MATCH = "NoConfidentMatch"
    INCOMPLETE_NUTRIENTS = "IncompleteNutrients"
    SECONDARY_PARSE_FAILURE = "SecondaryParseFailure"
    ALL_SOURCES_EXHAUSTED = "AllSourcesExhausted"


class LookupFailure(Exception):
    """Raised when a single tier cannot produce a usable answer."""

    def __init__(self, reason: FailureReason, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail
        super().__init__(detail or reason.value)


class SecondaryParseError(LookupFailure):
    """Secondary response held no usable nutrition block."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(FailureReason.SECONDARY_PARSE_FAILURE, detail)


class SecondaryUnavailableError(LookupFailure):
    """Secondary client is not configured."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(FailureReason.NO_API_KEY, detail)


@dataclass(frozen=True)
class ResolutionFailure:
    """Terminal failure after every tier was tried."""

    query: FoodQuery
    reason: FailureReason = FailureReason.ALL_SOURCES_EXHAUSTED
    last_cause: FailureReason | None = None
