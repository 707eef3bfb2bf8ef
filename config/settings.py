"""Centralised configuration handling for the spending analytics engine."""

from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TIMEZONE = "UTC"
DEFAULT_LOOKBACK_MONTHS = 24
MIN_RECOGNITION_OCCURRENCES = 3


class Settings(BaseSettings):
    """Engine settings sourced from ``SPENDING_*`` environment variables."""

    timezone: str = DEFAULT_TIMEZONE
    first_weekday: int = Field(default=0, ge=0, le=6)
    lookback_months: int = Field(default=DEFAULT_LOOKBACK_MONTHS, ge=1)
    min_occurrences: int = Field(default=MIN_RECOGNITION_OCCURRENCES, ge=MIN_RECOGNITION_OCCURRENCES)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SPENDING_", extra="ignore")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value


@lru_cache
def get_settings() -> Settings:
    """Load and cache engine settings."""

    return Settings()
