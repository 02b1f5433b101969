"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    API keys are optional: a missing key disables the matching tier.
    """

    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_page_size: int = 5
    fdc_retry_attempts: int = 1
    http_timeout_seconds: float = 15
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_store: bool = False
    openai_web_search: bool = True
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def clean_api_key(raw: str | None) -> str | None:
    """Treat blank keys as missing."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
