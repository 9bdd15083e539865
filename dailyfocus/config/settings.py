"""Application configuration settings."""
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Daily Focus"
    debug: bool = False

    # Database (remote store for favorites and activity logs)
    database_url: str = "sqlite+aiosqlite:///./dailyfocus.db"

    # OpenAI/LLM settings (used for AI scoring of daily recommendations)
    openai_api_key: str = ""  # Set via environment variable OPENAI_API_KEY
    openai_base_url: str = "https://api.openai.com/v1"  # Can be changed for OpenRouter, etc.
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 30.0  # seconds
    openai_temperature: float = 0.7
    openai_max_tokens: int = 800

    # LLM Provider
    llm_provider: Literal["openai", "anthropic"] = "openai"

    # Recommendation settings
    recommendation_default_count: int = 3
    recommendation_max_count: int = 10
    recommendation_timeout: float = 15.0  # seconds, bounds the AI scoring call
    recommendation_history_days: int = 14  # activity window sent to the AI scorer

    # Calendar-day scoping
    default_timezone: str = "UTC"

    # Fail loudly when configured fallback ids are missing from the catalog
    strict_catalog_validation: bool = False

    # Default user for header-less development calls
    default_user_id: str | None = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
