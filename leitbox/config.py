"""
Configuration settings for leitbox.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with LEITBOX_ (e.g. LEITBOX_LOG_LEVEL=DEBUG).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INTERVAL_DAYS = [1, 2, 4, 7, 14, 30, 60, 120, 240, 365]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LEITBOX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Leitner Intervals
    # ========================================
    interval_days: list[int] = Field(
        default_factory=lambda: list(DEFAULT_INTERVAL_DAYS),
        description="Days a card stays learned after reaching level 1, 2, 3, ...",
    )
    max_interval_days: int = Field(
        default=365,
        description="Upper bound for any interval, also used past the end of interval_days",
    )

    # ========================================
    # Learn Sessions
    # ========================================
    new_cards_per_session: int = Field(
        default=30,
        description="Maximum unlearned (level 0) cards per session",
    )
    max_due_cards: int = Field(
        default=100,
        description="Maximum expired cards per session",
    )

    # ========================================
    # Lessons
    # ========================================
    root_category_name: str = Field(
        default="All",
        description="Name of the root category of new lessons",
    )

    @field_validator("interval_days")
    @classmethod
    def _positive_intervals(cls, value: list[int]) -> list[int]:
        if not value or any(days <= 0 for days in value):
            raise ValueError("interval_days must be a non-empty list of positive day counts")
        return value

    @field_validator("max_interval_days", "new_cards_per_session", "max_due_cards")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
