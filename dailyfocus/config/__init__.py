"""Application configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Database URL, LLM config, recommendation defaults, timezone
  - Loaded from .env file via pydantic-settings

- **daily_focus_config.yaml**: Domain configuration
  - Hour-of-day fallback buckets and completion-source records
  - Loaded and validated by DailyFocusConfigLoader
"""
from dailyfocus.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
