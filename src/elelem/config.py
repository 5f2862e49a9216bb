"""
Configuration settings for Elelem.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "elelem"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === OpenAI ===
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_TIMEOUT: int = 60  # seconds

    # === Cohere ===
    COHERE_BASE_URL: str = "https://api.cohere.ai/v1"
    COHERE_API_KEY: Optional[str] = None
    COHERE_TIMEOUT: int = 60  # seconds

    # === Retry & Backoff ===
    # Applies to generate/action calls and the cache access inside them
    RETRY_MAX_ATTEMPTS: int = 3
    RETRY_STARTING_DELAY: float = 0.1  # seconds before the second attempt
    RETRY_TIME_MULTIPLE: float = 2.0  # exponential growth factor
    RETRY_MAX_DELAY: float = 10.0  # seconds
    RETRY_JITTER: float = 0.1  # max random seconds added to each delay

    # === Cache ===
    CACHE_BACKEND: Literal["none", "memory", "redis"] = "none"
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50
    CACHE_TTL_SECONDS: Optional[int] = None  # None = entries never expire
    CACHE_KEY_PREFIX: str = "elelem:"

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = False
    METRICS_PORT: int = 9090


# Global settings instance
settings = Settings()
