"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from food_lookup.adapters.fdc_client import HttpxFdcClient
from food_lookup.adapters.openai_search_client import OpenAISearchClient
from food_lookup.config import Settings, clean_api_key
from food_lookup.services.fallbacks import SecondarySource
from food_lookup.services.nutrition import NutritionService
from food_lookup.services.resolver import NutritionResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrition_service: NutritionService | None
    resolver: NutritionResolver
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    fdc_api_key = clean_api_key(resolved_settings.fdc_api_key)
    openai_api_key = clean_api_key(resolved_settings.openai_api_key)

    fdc_client = None
    nutrition_service = None
    if fdc_api_key:
        fdc_client = HttpxFdcClient.create(
            api_key=fdc_api_key,
            base_url=resolved_settings.fdc_base_url,
            timeout_seconds=resolved_settings.http_timeout_seconds,
        )
        nutrition_service = NutritionService(
            fdc_client=fdc_client,
            retry_attempts=resolved_settings.fdc_retry_attempts,
        )

    search_client = None
    if openai_api_key:
        search_client = OpenAISearchClient.create(
            api_key=openai_api_key,
            model=resolved_settings.openai_model,
            store=resolved_settings.openai_store,
            web_search=resolved_settings.openai_web_search,
        )

    resolver = NutritionResolver(
        nutrition_service=nutrition_service,
        secondary=SecondarySource(client=search_client),
        max_results=resolved_settings.fdc_page_size,
    )

    async def close_resources() -> None:
        if fdc_client is not None:
            await fdc_client.close()
        if search_client is not None:
            await search_client.close()

    return AppContainer(
        settings=resolved_settings,
        nutrition_service=nutrition_service,
        resolver=resolver,
        close_resources=close_resources,
    )
