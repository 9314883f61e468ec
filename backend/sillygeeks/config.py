"""
Application configuration using Pydantic Settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "SillyGeeks"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False)
    environment: Literal["development", "staging", "production"] = "development"

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = "json"

    # Generative-text backends (absent keys => local fallback / demo mode)
    anthropic_api_key: str | None = Field(default=None)
    anthropic_model: str = Field(default="claude-3-haiku-20240307")
    openai_api_key: str | None = Field(default=None)
    openai_model: str = Field(default="gpt-4o")
    enrichment_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Upper bound for a single generative-text backend call",
    )
    enrichment_probe_interval_minutes: float = Field(
        default=15.0,
        ge=0,
        description="How long the backend stays marked unavailable before a retry probe",
    )

    # News feed (absent key => fixture data)
    newsapi_key: str | None = Field(default=None)
    newsapi_page_size: int = Field(default=20, ge=1, le=100)
    news_fetch_timeout_seconds: float = Field(default=15.0, gt=0)

    # Scheduler
    ingestion_interval_minutes: int = Field(
        default=60,
        ge=1,
        description="Interval between scheduled ingestion runs",
    )
    scheduler_enabled: bool = Field(default=True)
    run_ingestion_on_startup: bool = Field(default=True)

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
    )

    # Pagination / search
    default_page_size: int = Field(default=20, ge=1, le=100)
    max_page_size: int = Field(default=100, ge=1, le=500)
    search_max_length: int = Field(default=100, ge=1)

    @field_validator("anthropic_api_key", "openai_api_key", "newsapi_key")
    @classmethod
    def blank_key_is_missing(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def has_enrichment_backend(self) -> bool:
        return bool(self.anthropic_api_key or self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
