"""Application configuration with environment variable support."""

from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Priority: ENV > .env.local > .env > defaults
    .env.local is gitignored for local overrides
    """

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Service configuration
    PROJECT_NAME: str = "Infralith Core"
    ENV: str = "production"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 10000
    LOG_LEVEL: str = "INFO"

    # Worker pool
    MAX_CONCURRENCY: int = Field(default=50, ge=1)  # Pipelines executing at once
    MAX_QUEUED_PIPELINES: int = Field(default=0, ge=0)  # 0 = unbounded queue

    # Multiplies every simulated pipeline delay (0 disables waiting)
    STEP_DELAY_SCALE: float = Field(default=1.0, ge=0.0)

    # Security
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Declared for the gateway, not enforced by the core
    RATE_LIMIT_WINDOW_MS: int = 60000
    RATE_LIMIT_MAX: int = 1000


# Global settings instance
settings = Settings()
