"""Application configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    PROJECT_NAME: str = "Vocab Trainer"
    API_V1_STR: str = "/api/v1"
    LEARNER_ID: str = Field("user_default", description="Learner identity used in store keys")

    REDIS_URL: Optional[AnyUrl] = Field(
        None, description="Redis connection string for the progress store; memory store when unset"
    )

    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    DAILY_GOAL_CHOICES: Tuple[int, ...] = Field(
        (1, 2, 3, 5), description="Allowed values for the daily new-word goal"
    )
    DEFAULT_DAILY_GOAL: int = 1
    STRICT_FIRST_NEW_WORD: bool = Field(
        False,
        description="Fail the daily task when the first required new word cannot be fetched",
    )
    EXAMPLE_BACKFILL_LIMIT: int = Field(
        3, ge=0, description="Word source lookups per request for records missing an example"
    )

    TARGET_LANGUAGE: str = "Spanish"
    EXPLANATION_LANGUAGE: str = "Chinese"
    WORD_SELECTION_ATTEMPTS: int = Field(2, ge=1)

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_ORG_ID: Optional[str] = None
    ANTHROPIC_API_KEY: Optional[str] = None
    GEMINI_API_KEY: Optional[str] = None
    PRIMARY_LLM_PROVIDER: str = Field("gemini", description="Preferred LLM provider key")
    SECONDARY_LLM_PROVIDER: Optional[str] = Field(
        "openai", description="Fallback LLM provider key"
    )
    OPENAI_MODEL: str = Field("gpt-4o-mini", description="Default OpenAI chat model")
    OPENAI_API_BASE: Optional[AnyUrl] = Field(
        None, description="Override base URL for OpenAI-compatible endpoints"
    )
    ANTHROPIC_MODEL: str = Field("claude-3-5-sonnet", description="Default Anthropic model")
    ANTHROPIC_API_BASE: Optional[AnyUrl] = Field(
        None, description="Override base URL for Anthropic endpoints"
    )
    GEMINI_MODEL: str = Field("gemini-2.5-flash", description="Default Gemini model")
    GEMINI_API_BASE: Optional[AnyUrl] = Field(
        None, description="Override base URL for the Gemini API"
    )
    LLM_REQUEST_TIMEOUT_SECONDS: float = Field(25.0, description="Timeout for LLM HTTP calls")
    LLM_MAX_RETRIES: int = Field(3, description="Retry attempts for failed LLM calls")

    CRON_SECRET: Optional[str] = Field(None, description="Bearer token for scheduled triggers")
    BREVO_API_KEY: Optional[str] = None
    SENDER_EMAIL: Optional[str] = None
    RECIPIENT_EMAIL: Optional[str] = None
    PLATFORM_URL: str = "http://localhost:3000"

    CELERY_BROKER_URL: Optional[AnyUrl] = None
    CELERY_RESULT_BACKEND: Optional[AnyUrl] = None

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


settings = get_settings()
