"""Shared test fixtures."""

from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx
import pytest

from food_lookup.adapters.fdc_client import DEFAULT_DATA_TYPES, FdcClient
from food_lookup.config import Settings
from food_lookup.containers import AppContainer
from food_lookup.services.fallbacks import SearchClient, SecondarySource
from food_lookup.services.nutrition import NutritionService
from food_lookup.services.resolver import NutritionResolver

BANANA_SEARCH = {
    "foods": [
        {
            "fdcId": 1103324,
            "description": "Plantains, cooked",
            "dataType": "Survey (FNDDS)",
            "score": 512.3,
        },
        {
            "fdcId": 1102653,
            "description": "Bananas, raw",
            "dataType": "SR Legacy",
            "score": 498.1,
        },
        {
            "fdcId": 2344720,
            "description": "Banana chips",
            "dataType": "Survey (FNDDS)",
            "score": 410.0,
        },
    ]
}

BANANA_DETAIL = {
    "fdcId": 1102653,
    "description": "Bananas, raw",
    "dataType": "SR Legacy",
    "foodNutrients": [
        {"nutrient": {"id": 1003, "number": "203"}, "amount": 1.09},
        {"nutrient": {"id": 1004, "number": "204"}, "amount": 0.33},
        {"nutrient": {"id": 1005, "number": "205"}, "amount": 22.84},
        {"nutrient": {"id": 1008, "number": "208"}, "amount": 89},
        {"nutrient": {"id": 1079, "number": "291"}, "amount": 2.6},
        {"nutrient": {"id": 2000, "number": "269"}, "amount": 12.23},
    ],
    "foodPortions": [
        {"amount": 1, "modifier": "cup, mashed", "gramWeight": 225},
        {"amount": 1, "modifier": "small (6\" to 6-7/8\" long)", "gramWeight": 101},
        {"amount": 1, "modifier": "medium (7\" to 7-7/8\" long)", "gramWeight": 118},
    ],
}

SECONDARY_ANSWER = (
    "A typical slice of pepperoni pizza has about 350 calories.\n"
    "```json\n"
    '{"serving": "1 slice", "calories": 350, "protein": 14, "carbs": 36,'
    ' "fat": 16, "fiber": 2.5, "sugar": 4}\n'
    "```\n"
    "Values vary by brand."
)


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses and call tracking."""

    search_payload: dict[str, object] = field(default_factory=lambda: BANANA_SEARCH)
    food_payload: dict[str, object] = field(default_factory=lambda: BANANA_DETAIL)
    search_status: int = 200
    food_status: int = 200
    search_queries: list[str] = field(default_factory=list)
    food_ids: list[int] = field(default_factory=list)

    async def search_foods(
        self,
        query: str,
        page_size: int = 5,
        data_types: Sequence[str] = DEFAULT_DATA_TYPES,
    ) -> dict[str, object]:
        self.search_queries.append(query)
        _raise_for(self.search_status, "/foods/search")
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_ids.append(fdc_id)
        _raise_for(self.food_status, f"/food/{fdc_id}")
        return self.food_payload


def _raise_for(status: int, path: str) -> None:
    if status < 400:
        return
    request = httpx.Request("GET", f"https://api.test{path}")
    response = httpx.Response(status, request=request)
    raise httpx.HTTPStatusError("upstream failure", request=request, response=response)


@dataclass
class FakeSearchClient(SearchClient):
    """Fake search client returning a fixed answer."""

    answer: str = SECONDARY_ANSWER
    questions: list[str] = field(default_factory=list)
    error: Exception | None = None

    async def ask(self, question: str) -> str:
        self.questions.append(question)
        if self.error is not None:
            raise self.error
        return self.answer


def make_resolver(
    fdc_client: FdcClient | None = None,
    search_client: SearchClient | None = None,
) -> NutritionResolver:
    """Build a resolver; a None client disables that tier."""
    nutrition_service = (
        NutritionService(fdc_client=fdc_client, retry_delay_seconds=0)
        if fdc_client is not None
        else None
    )
    return NutritionResolver(
        nutrition_service=nutrition_service,
        secondary=SecondarySource(client=search_client),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        fdc_api_key="fdc-key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def search_client() -> FakeSearchClient:
    return FakeSearchClient()


@pytest.fixture
def container(
    settings: Settings,
    fdc_client: FakeFdcClient,
    search_client: FakeSearchClient,
) -> AppContainer:
    resolver = make_resolver(fdc_client, search_client)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        nutrition_service=resolver.nutrition_service,
        resolver=resolver,
        close_resources=close_resources,
    )
