import os
from pathlib import Path

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Get database URL, using absolute path for SQLite to avoid path resolution issues.

    SQLite is only meant for local development; production deployments point
    DATABASE_URL at PostgreSQL.
    """
    db_url = os.getenv("DATABASE_URL", "")
    if db_url:
        logger.info(f"Using DATABASE_URL from environment: {db_url}")
        return db_url

    db_path = Path(__file__).parent.parent.parent / "gym_planner.db"
    abs_path = db_path.resolve()
    db_url = f"sqlite:///{abs_path}"
    logger.warning(f"Using SQLite database (LOCAL DEV ONLY): {db_url}")
    return db_url


class Settings(BaseSettings):
    database_url: str = Field(
        default_factory=get_database_url,
        validation_alias="DATABASE_URL",
    )
    llm_provider: str = Field(default="openrouter", validation_alias="LLM_PROVIDER")
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openrouter_api_key: str = Field(default="", validation_alias="OPENROUTER_API_KEY")
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        validation_alias="OPENROUTER_BASE_URL",
    )
    llm_primary_model: str = Field(
        default="google/gemini-2.0-flash-exp:free",
        validation_alias="LLM_PRIMARY_MODEL",
        description="Model used for the first completion attempt",
    )
    llm_fallback_model: str = Field(
        default="openai/gpt-4o-mini",
        validation_alias="LLM_FALLBACK_MODEL",
        description="Model used for the single retry after a primary failure",
    )
    llm_temperature: float = Field(default=0.2, validation_alias="LLM_TEMPERATURE")
    llm_max_tokens: int = Field(default=4000, validation_alias="LLM_MAX_TOKENS")
    llm_attempt_timeout_seconds: float = Field(
        default=60.0,
        validation_alias="LLM_ATTEMPT_TIMEOUT_SECONDS",
        description="Timeout applied to each completion attempt",
    )
    generation_timeout_seconds: float = Field(
        default=150.0,
        validation_alias="GENERATION_TIMEOUT_SECONDS",
        description="Request-level timeout bounding primary + fallback attempts",
    )
    rate_limit_backend: str = Field(default="memory", validation_alias="RATE_LIMIT_BACKEND")
    rate_limit_max_requests: int = Field(default=10, validation_alias="RATE_LIMIT_MAX_REQUESTS")
    rate_limit_window_seconds: int = Field(default=3600, validation_alias="RATE_LIMIT_WINDOW_SECONDS")
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    audit_write_timeout_seconds: float = Field(default=5.0, validation_alias="AUDIT_WRITE_TIMEOUT_SECONDS")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str = Field(default="", validation_alias="LOG_FILE")
    log_json: bool = Field(default=False, validation_alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(valid_levels)}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("llm_provider")
    @classmethod
    def validate_llm_provider(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in {"openai", "openrouter"}:
            raise ValueError(f"LLM_PROVIDER must be 'openai' or 'openrouter', got: {value}")
        return lowered

    @field_validator("rate_limit_backend")
    @classmethod
    def validate_rate_limit_backend(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in {"memory", "redis"}:
            raise ValueError(f"RATE_LIMIT_BACKEND must be 'memory' or 'redis', got: {value}")
        if lowered == "memory":
            logger.debug("Using in-process rate limiter; counters reset on restart and are not shared between instances")
        return lowered

    @field_validator("rate_limit_max_requests", "rate_limit_window_seconds")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Rate limit settings must be positive")
        return value

    @field_validator("openrouter_api_key", "openai_api_key")
    @classmethod
    def warn_missing_key(cls, value: str) -> str:
        """Missing keys are allowed for local development and tests.

        Plan generation will fail until the key for the configured provider is set.
        """
        if not value:
            logger.debug("An LLM API key is not set. AI plan generation requires the key for LLM_PROVIDER.")
        return value


settings = Settings()
