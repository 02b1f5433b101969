"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from food_lookup.app_logging import configure_logging
from food_lookup.containers import AppContainer
from food_lookup.domain.lookup import LookupEnvelope, LookupRequest


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        logger.info(
            "Food lookup starting: primary=%s secondary=%s",
            state_container.nutrition_service is not None,
            state_container.resolver.secondary.client is not None,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post(
        "/foods/lookup", response_model=LookupEnvelope, response_model_by_alias=True
    )
    async def lookup_food(payload: LookupRequest, request: Request) -> LookupEnvelope:
        """Look up one food and return the envelope for confirmation."""
        state_container: AppContainer = request.app.state.container
        return await state_container.resolver.lookup(payload)

    @app.post(
        "/foods/lookup/batch",
        response_model=list[LookupEnvelope],
        response_model_by_alias=True,
    )
    async def lookup_foods(
        payloads: list[LookupRequest], request: Request
    ) -> list[LookupEnvelope]:
        """Look up several foods concurrently."""
        state_container: AppContainer = request.app.state.container
        return await state_container.resolver.resolve_many(payloads)

    return app
