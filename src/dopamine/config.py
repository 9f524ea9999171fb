"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str | None = None
    environment: str = _ENVIRONMENT
    timezone: str = "UTC"
    timer_tick_seconds: float = 1.0
    timer_dismissal_seconds: float = 3.0
    checkout_clear_attempts: int = 3

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
