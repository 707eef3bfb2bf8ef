"""Exception types raised by the transaction analytics core."""

from __future__ import annotations

__all__ = ["InvalidPatternParameter", "CalendarConstructionError"]


class InvalidPatternParameter(ValueError):
    """Raised when a recurrence pattern is built with a nonsensical kind or interval."""


class CalendarConstructionError(ValueError):
    """Raised when a calendar date cannot be represented."""
