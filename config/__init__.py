"""Engine configuration utilities."""

from .settings import (
    DEFAULT_LOOKBACK_MONTHS,
    DEFAULT_TIMEZONE,
    MIN_RECOGNITION_OCCURRENCES,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_LOOKBACK_MONTHS",
    "DEFAULT_TIMEZONE",
    "MIN_RECOGNITION_OCCURRENCES",
    "Settings",
    "get_settings",
]
