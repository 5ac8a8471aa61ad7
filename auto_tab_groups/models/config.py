"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from ATG_* environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="ATG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_path: str = "data/auto_tab_groups.db"
    log_level: str = "INFO"
    bulk_delay_ms: int = 10
    retry_max_attempts: int = 5
    retry_base_delay_ms: int = 25

    @field_validator("database_path")
    @classmethod
    def validate_database_path(cls, value: str) -> str:
        """Ensure parent directory exists, creating it if necessary."""
        if value != ":memory:":
            Path(value).parent.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("bulk_delay_ms", "retry_base_delay_ms")
    @classmethod
    def validate_delay(cls, value: int) -> int:
        if value < 0 or value > 10_000:
            msg = "delays must be between 0 and 10000 milliseconds"
            raise ValueError(msg)
        return value

    @field_validator("retry_max_attempts")
    @classmethod
    def validate_retry_max_attempts(cls, value: int) -> int:
        """Retry attempts must be between 0 and 10."""
        if value < 0 or value > 10:
            msg = "retry_max_attempts must be between 0 and 10"
            raise ValueError(msg)
        return value

    @property
    def bulk_delay_seconds(self) -> float:
        return self.bulk_delay_ms / 1000

    @property
    def retry_base_delay_seconds(self) -> float:
        return self.retry_base_delay_ms / 1000
