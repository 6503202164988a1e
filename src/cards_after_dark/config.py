"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cards_after_dark.adapters.expo_push_client import EXPO_PUSH_URL

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str | None = None
    openai_store: bool = False
    openai_timeout_seconds: float = 30.0
    expo_push_url: str = EXPO_PUSH_URL
    push_notifications_enabled: bool = True
    max_card_draws_per_day: int = Field(default=3, ge=1)
    daily_cards_count: int = Field(default=7, ge=1)
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
