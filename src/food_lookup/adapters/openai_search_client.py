"""OpenAI Responses API client used as a web-search fallback."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from food_lookup.services.fallbacks import SearchClient


@dataclass
class OpenAISearchClient(SearchClient):
    """Search client backed by OpenAI Responses API with web search."""

    client: AsyncOpenAI
    model: str
    store: bool = False
    web_search: bool = True

    @classmethod
    def create(
        cls, api_key: str, model: str, store: bool = False, web_search: bool = True
    ) -> "OpenAISearchClient":
        """Create an OpenAI search client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            store=store,
            web_search=web_search,
        )

    async def ask(self, question: str) -> str:
        """Ask a question and return the free-text answer."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "input": question,
            "store": self.store,
        }
        if self.web_search:
            request_payload["tools"] = [{"type": "web_search_preview"}]

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
