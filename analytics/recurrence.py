"""Recurrence patterns: occurrence predicates and next-occurrence projection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from numbers import Integral

import pandas as pd

from core.calendar_math import (
    DateLike,
    add_days,
    add_months,
    add_years,
    days_between,
    end_of_month,
    is_end_of_month,
    months_between,
    start_of_day,
    start_of_month,
    years_between,
)
from core.errors import CalendarConstructionError, InvalidPatternParameter
from core.logging_setup import get_logger

__all__ = [
    "RecurrenceKind",
    "RecurrencePattern",
    "advance",
    "elapsed_steps",
    "occurs_on",
    "recurs_on",
    "next_occurrence",
    "occurrences_between",
    "occurrence_days",
]

_logger = get_logger("spending.recurrence")


class RecurrenceKind(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


_UNIT_LABELS = {
    RecurrenceKind.DAILY: ("day", "days"),
    RecurrenceKind.MONTHLY: ("month", "months"),
    RecurrenceKind.YEARLY: ("year", "years"),
}


@dataclass(frozen=True)
class RecurrencePattern:
    """A cadence of ``interval`` days, months or years anchored at ``anchor``.

    Two patterns are equal when kind, interval and the anchor's calendar day
    match. The anchor is normalised to midnight on construction.
    """

    kind: RecurrenceKind
    interval: int
    anchor: pd.Timestamp

    def __post_init__(self) -> None:
        try:
            kind = RecurrenceKind(self.kind)
        except (TypeError, ValueError) as exc:
            raise InvalidPatternParameter(f"Unknown recurrence kind: {self.kind!r}") from exc
        if isinstance(self.interval, bool) or not isinstance(self.interval, Integral):
            raise InvalidPatternParameter(f"Interval must be an integer, got {self.interval!r}")
        if self.interval <= 0:
            raise InvalidPatternParameter(f"Interval must be positive, got {self.interval}")
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "interval", int(self.interval))
        object.__setattr__(self, "anchor", start_of_day(self.anchor))

    @property
    def anchored_at_month_end(self) -> bool:
        if self.kind is RecurrenceKind.DAILY:
            return False
        return is_end_of_month(self.anchor)

    def occurs_on(self, day: DateLike) -> bool:
        return occurs_on(self, day)

    def recurs_on(self, day: DateLike) -> bool:
        return recurs_on(self, day)

    def next_occurrence(self, after: DateLike) -> pd.Timestamp:
        return next_occurrence(self, after)

    def describe(self) -> str:
        singular, plural = _UNIT_LABELS[self.kind]
        unit = singular if self.interval == 1 else f"{self.interval} {plural}"
        return f"Every {unit} from {self.anchor.date().isoformat()}"


def advance(kind: RecurrenceKind, anchor: DateLike, steps: int, *, snap: bool = False) -> pd.Timestamp:
    """Project ``anchor`` forward by ``steps`` units of ``kind``."""

    if kind is RecurrenceKind.DAILY:
        return add_days(anchor, steps)
    if kind is RecurrenceKind.MONTHLY:
        return add_months(anchor, steps, snap_to_end_of_month=snap)
    return add_years(anchor, steps, snap_to_end_of_month=snap)


def elapsed_steps(kind: RecurrenceKind, start: DateLike, end: DateLike) -> int:
    """Return the calendar-aware count of whole ``kind`` units between two dates."""

    if kind is RecurrenceKind.DAILY:
        return days_between(start, end)
    if kind is RecurrenceKind.MONTHLY:
        return months_between(start, end)
    return years_between(start, end)


def occurs_on(pattern: RecurrencePattern, day: DateLike) -> bool:
    """Return ``True`` when ``pattern`` has an occurrence on ``day``; the anchor counts."""

    check = start_of_day(day)
    anchor = pattern.anchor
    if check < anchor:
        return False
    if check == anchor:
        return True

    try:
        steps = elapsed_steps(pattern.kind, anchor, check)
        if steps < pattern.interval or steps % pattern.interval != 0:
            return False
        # Month-end anchors match any month end the right number of units away.
        if pattern.anchored_at_month_end:
            return is_end_of_month(check)
        expected = advance(pattern.kind, anchor, steps)
    except CalendarConstructionError:
        _logger.warning("Could not evaluate %s on %s", pattern.describe(), check.date(), exc_info=True)
        return False
    return expected == check


def recurs_on(pattern: RecurrencePattern, day: DateLike) -> bool:
    """Like :func:`occurs_on` but excludes the anchor itself."""

    return start_of_day(day) != pattern.anchor and occurs_on(pattern, day)


def next_occurrence(pattern: RecurrencePattern, after: DateLike) -> pd.Timestamp:
    """Return the first occurrence strictly later than ``after``.

    Candidates are always projected from the anchor by ``k * interval`` steps,
    never chained from the previous candidate, so a Jan 30 monthly anchor
    yields Feb 29 then Mar 30 rather than drifting to Mar 29.
    """

    after_day = start_of_day(after)
    anchor = pattern.anchor
    if after_day < anchor:
        return anchor

    snap = pattern.anchored_at_month_end
    try:
        elapsed = elapsed_steps(pattern.kind, anchor, after_day)
        k = max(elapsed // pattern.interval, 0)
        candidate = advance(pattern.kind, anchor, k * pattern.interval, snap=snap)
        while candidate <= after_day:
            k += 1
            candidate = advance(pattern.kind, anchor, k * pattern.interval, snap=snap)
    except CalendarConstructionError:
        _logger.warning(
            "Could not project %s past %s; returning the input date",
            pattern.describe(),
            after_day.date(),
            exc_info=True,
        )
        return after_day
    return candidate


def occurrences_between(pattern: RecurrencePattern, start: DateLike, end: DateLike) -> list[pd.Timestamp]:
    """Return every occurrence in the inclusive range ``[start, end]``."""

    first, last = start_of_day(start), start_of_day(end)
    occurrences: list[pd.Timestamp] = []
    if last < first:
        return occurrences

    candidate = first if occurs_on(pattern, first) else next_occurrence(pattern, first)
    while first <= candidate <= last:
        occurrences.append(candidate)
        following = next_occurrence(pattern, candidate)
        if following <= candidate:
            break
        candidate = following
    return occurrences


def occurrence_days(pattern: RecurrencePattern, month: DateLike) -> list[int]:
    """Return the days of ``month`` on which ``pattern`` occurs."""

    return [day.day for day in occurrences_between(pattern, start_of_month(month), end_of_month(month))]
