"""Application configuration."""

import logging
import sys
from collections.abc import Callable
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import structlog
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Database
    DATABASE_URL: str = f"sqlite:///{PROJECT_ROOT / 'sessionrun.db'}"

    # API (constants, not from env)
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "sessionrun API"
    VERSION: str = "0.1.0"

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # Session runs
    AUTOSAVE_DEBOUNCE_SECONDS: float = 3.0
    RUN_PUBLIC_ID_LENGTH: int = 12

    # Connection pool for server databases; SQLite always uses one shared connection
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 5
    DATABASE_POOL_RECYCLE_SECONDS: int = 1800

    @field_validator("AUTOSAVE_DEBOUNCE_SECONDS", mode="after")
    @classmethod
    def validate_autosave_delay(cls, value: float) -> float:
        """Autosave must be deferred by a positive delay."""
        if value <= 0:
            msg = "AUTOSAVE_DEBOUNCE_SECONDS must be greater than 0"
            raise ValueError(msg)
        return value

    @field_validator("RUN_PUBLIC_ID_LENGTH", mode="after")
    @classmethod
    def validate_public_id_length(cls, value: int) -> int:
        """Public ids must stay within the accepted 6-32 character range."""
        if not 6 <= value <= 32:
            msg = "RUN_PUBLIC_ID_LENGTH must be between 6 and 32"
            raise ValueError(msg)
        return value

    @field_validator("DATABASE_POOL_SIZE", mode="after")
    @classmethod
    def validate_pool_size(cls, value: int) -> int:
        if value < 1:
            msg = "DATABASE_POOL_SIZE must be at least 1"
            raise ValueError(msg)
        return value

    @field_validator("DATABASE_MAX_OVERFLOW", "DATABASE_POOL_RECYCLE_SECONDS", mode="after")
    @classmethod
    def validate_non_negative(cls, value: int) -> int:
        if value < 0:
            msg = "Pool overflow and recycle settings cannot be negative"
            raise ValueError(msg)
        return value


def configure_logging(environment: str = "development") -> None:
    """Configure structured logging with structlog."""
    # Determine if we should use JSON output (production) or console output (dev)
    use_json = environment == "production"

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if environment == "development" else logging.INFO,
    )

    processors: list[Callable[..., Any]] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
