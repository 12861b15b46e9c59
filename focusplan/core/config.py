"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    focusplan_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    focusplan_debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    focusplan_log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated daily)",
    )

    # Pomodoro unit
    focusplan_unit_work_minutes: int = Field(
        default=25,
        ge=1,
        le=180,
        description="Length of one focus unit in minutes",
    )
    focusplan_unit_break_minutes: int = Field(
        default=5,
        ge=0,
        le=60,
        description="Short break after each focus unit",
    )

    # Scheduling
    focusplan_decomposition_threshold: int = Field(
        default=4,
        ge=1,
        description="Tasks above this many units are split into subtasks",
    )
    focusplan_search_window_days: int = Field(
        default=14,
        ge=1,
        le=365,
        description="Days to search ahead when a task has no deadline",
    )
    focusplan_high_complexity_units: int = Field(
        default=15,
        ge=1,
        description="Unit count above which a task is flagged as a complexity risk",
    )
    focusplan_auto_schedule_priorities: list[str] = Field(
        default_factory=lambda: [
            "urgent_important",
            "important_not_urgent",
            "urgent_not_important",
        ],
        description="Priorities eligible for automatic scheduling",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.focusplan_unit_work_minutes
        25
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
