"""Tests for HTTP-based adapters."""

import asyncio

import httpx
import pytest

from food_lookup.adapters.fdc_client import HttpxFdcClient
from food_lookup.adapters.openai_search_client import OpenAISearchClient


class _FakeResponses:
    def __init__(self, output_text: str) -> None:
        self.output_text = output_text
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, output_text: str = '{"calories": 95}') -> None:
        self.responses = _FakeResponses(output_text)


def test_openai_search_client_returns_text_with_web_search() -> None:
    fake = _FakeOpenAI()
    client = OpenAISearchClient(client=fake, model="gpt-4.1-mini")

    answer = asyncio.run(client.ask("Nutrition facts for an apple?"))

    assert answer == '{"calories": 95}'
    assert fake.responses.last_payload is not None
    assert fake.responses.last_payload["input"] == "Nutrition facts for an apple?"
    assert fake.responses.last_payload["tools"] == [{"type": "web_search_preview"}]


def test_openai_search_client_rejects_empty_answer() -> None:
    client = OpenAISearchClient(
        client=_FakeOpenAI(output_text=""), model="gpt-4.1-mini", web_search=False
    )

    with pytest.raises(RuntimeError):
        asyncio.run(client.ask("Nutrition facts for an apple?"))


def test_fdc_client_search_and_get() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/foods/search"):
            return httpx.Response(200, json={"foods": []})
        return httpx.Response(200, json={"fdcId": 1, "foodNutrients": []})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=async_client,
    )

    search = asyncio.run(client.search_foods("banana raw", page_size=5))
    food = asyncio.run(client.get_food(1))

    assert search == {"foods": []}
    assert food["fdcId"] == 1
    params = seen[0].url.params
    assert params["query"] == "banana raw"
    assert params["pageSize"] == "5"
    assert params["dataType"] == "Survey (FNDDS),Foundation,SR Legacy"
    assert params["api_key"] == "key"
    assert seen[1].url.path == "/food/1"


def test_fdc_client_raises_on_error_status() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(429))
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.search_foods("banana"))
