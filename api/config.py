"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict

# Hard ceiling on candidates enriched per request
MAX_ENTITIES_CEILING = 20

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/114.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    # Cache store
    redis_url: RedisDsn = RedisDsn("redis://localhost:6379/0")
    cache_backend: Literal["redis", "memory"] = "redis"
    cache_duration_seconds: int = 3600  # Page results: 1 hour
    entity_cache_ttl_seconds: int = 604800  # Entities: 7 days

    # LLM providers
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-1.5-flash"
    llm_timeout_seconds: float = 45.0

    # Knowledge sources
    google_kg_api_key: str | None = None

    # Enrichment guardrails
    rate_limit_delay_seconds: float = 0.5  # Pause between external lookup rounds
    max_entities: int = 20
    request_budget_seconds: float = 180.0  # Wall-clock ceiling per analysis

    # Page fetcher
    fetch_timeout_seconds: float = 45.0
    fetch_max_bytes: int = 5_000_000
    fetch_max_redirects: int = 10
    fetch_user_agent: str = DEFAULT_USER_AGENT

    # Sentry
    sentry_dsn: str | None = None

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def llm_enabled(self) -> bool:
        """Check if the entity/recommendation LLM path is available."""
        return bool(self.openai_api_key)

    @property
    def fanout_enabled(self) -> bool:
        """Check if fan-out analysis is available."""
        return bool(self.gemini_api_key)

    @property
    def effective_max_entities(self) -> int:
        """Configured entity cap, never above the hard ceiling."""
        return max(0, min(MAX_ENTITIES_CEILING, self.max_entities))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
