"""Food query normalization."""

import re

from food_lookup.domain.nutrition import FoodQuery

_PREPARATION_PATTERN = re.compile(
    r"\b(raw|cooked|fried|baked|grilled|roasted|steamed|boiled)\b", re.IGNORECASE
)

# Whole foods that the database lists primarily in their raw form.
_RAW_BY_DEFAULT_PATTERN = re.compile(
    r"\b("
    r"banana|apple|orange|grape|strawberry|blueberry|mango|peach|pear|plum|cherry|"
    r"avocado|tomato|carrot|celery|cucumber|spinach|lettuce|broccoli|pepper|onion|"
    r"chicken|beef|pork|salmon|tuna|egg"
    r")\b",
    re.IGNORECASE,
)


def normalize_text(raw: str) -> str:
    """Lowercase, trim, and collapse whitespace."""
    return " ".join(raw.lower().split())


def enhance_query(text: str) -> str:
    """Append "raw" to whole foods that lack a preparation method."""
    normalized = normalize_text(text)
    if _PREPARATION_PATTERN.search(normalized):
        return normalized
    if _RAW_BY_DEFAULT_PATTERN.search(normalized):
        return f"{normalized} raw"
    return normalized


def build_query(raw: str) -> FoodQuery:
    """Create a query with its enhanced search text."""
    return FoodQuery(raw=raw, enhanced=enhance_query(raw))
