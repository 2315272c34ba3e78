"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore", # Allow extra env vars without failing
    )

    # App
    app_name: str = "TailorReach"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    tracing_enabled: bool = False  # OpenTelemetry console exporter (needs the "tracing" extra)

    # API
    api_prefix: str = "/api"
    # Default for local Next.js frontend; override via ALLOWED_ORIGINS env for cloud
    allowed_origins: list[str] = ["http://localhost:3000"]

    # Auth (tokens are issued by the identity provider and signed with the shared secret)
    # Secret key MUST be provided via environment (e.g. SECRET_KEY in .env)
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    auth_issuer: Optional[str] = None

    # Database
    database_url: str = "sqlite+aiosqlite:///./tailorreach.db"
    db_ssl_mode: str = "disable" # "require" for production
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_auto_create: bool = False

    # LLM provider: "openai" (any OpenAI-compatible endpoint) or "gemini"
    llm_provider: str = "openai"
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_completion_model: str = "gpt-3.5-turbo-instruct"
    openai_chat_model: str = "gpt-4o"
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    llm_timeout_seconds: float = 30.0
    llm_temperature: float = 0.7

    # Interest scoring
    scoring_max_concurrency: int = 10
    scoring_batch_timeout_seconds: float = 120.0
    scoring_strict_parsing: bool = False  # Unparseable model output -> error result instead of random score
    product_prompt_max_tokens: int = 100
    campaign_prompt_max_tokens: int = 200
    message_max_tokens: int = 500

    # Likelihood buckets (green >= high, yellow >= medium, red below)
    likelihood_high_threshold: float = 75.0
    likelihood_medium_threshold: float = 50.0


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
