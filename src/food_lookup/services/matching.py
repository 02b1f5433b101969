"""Candidate selection by keyword overlap."""

from dataclasses import dataclass

from food_lookup.domain.nutrition import SearchCandidate

_MIN_TOKEN_LENGTH = 3


@dataclass(frozen=True)
class CandidateMatch:
    """Best candidate and how many query tokens it contains."""

    candidate: SearchCandidate
    overlap: int

    @property
    def confident(self) -> bool:
        return self.overlap > 0


def query_tokens(enhanced: str) -> list[str]:
    """Split a query into lowercase words longer than two characters."""
    return [word for word in enhanced.lower().split() if len(word) >= _MIN_TOKEN_LENGTH]


def overlap_count(tokens: list[str], description: str) -> int:
    """Count tokens that appear as substrings of a description."""
    lowered = description.lower()
    return sum(1 for token in tokens if token in lowered)


def select_candidate(
    enhanced: str, candidates: list[SearchCandidate]
) -> CandidateMatch:
    """Pick the candidate with the highest overlap; first seen wins ties."""
    if not candidates:
        raise ValueError("candidates must not be empty")
    tokens = query_tokens(enhanced)
    best = candidates[0]
    best_count = 0
    for candidate in candidates:
        count = overlap_count(tokens, candidate.description)
        if count > best_count:
            best = candidate
            best_count = count
    return CandidateMatch(candidate=best, overlap=best_count)
