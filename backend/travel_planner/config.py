"""
Application configuration using Pydantic Settings.
All config is loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "travel-planner"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"  # comma-separated

    # ── Timezone Reasoning ───────────────────────────────
    HOME_TIMEZONE: str = "America/New_York"
    DEFAULT_DESTINATION_TIMEZONE: str = "Europe/London"  # used for unmapped cities
    BUSINESS_HOURS_START: str = "08:30"  # HH:MM
    BUSINESS_HOURS_END: str = "17:00"  # HH:MM, only the hour is compared
    EARLY_HOUR_THRESHOLD: int = 6  # destination hour < this = very early
    LATE_HOUR_THRESHOLD: int = 22  # destination hour > this = very late
    BUSINESS_HOURS_GOVERNED_BY: str = "home"  # home | destination

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance (singleton)."""
    return Settings()
