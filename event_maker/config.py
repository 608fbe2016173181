"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - Millisecond budgets are per attempt, never per retry sequence

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from event_maker.core.retry_policy import RetryPolicy


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://events:events@db:5432/events"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Generation (Anthropic)
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_timeout_seconds: int = 300
    generation_model: str = "claude-sonnet-4-5"
    generation_max_tokens: int = 8192

    # Retry policy for generation
    generation_max_retries: int = 3
    generation_initial_delay_ms: int = 1000
    generation_max_delay_ms: int = 10_000
    generation_backoff_multiplier: float = 3
    generation_attempt_timeout_ms: int = 120_000

    # Identity graph
    identity_graph_base_url: str = "http://localhost:8000"
    identity_graph_api_token: str | None = None
    identity_graph_owner_id: str = "event-maker-app"
    identity_search_timeout_ms: int = 3000
    identity_create_timeout_ms: int = 5000
    welcome_identity_id: str = "system-welcome"

    # Quota
    generation_quota: int = 10
    generation_quota_window_seconds: int = 3600

    # Background tasks
    shutdown_drain_timeout_seconds: float = 10.0

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.generation_max_retries,
            initial_delay_ms=self.generation_initial_delay_ms,
            max_delay_ms=self.generation_max_delay_ms,
            multiplier=self.generation_backoff_multiplier,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
