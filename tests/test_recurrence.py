"""Tests for recurrence predicates and next-occurrence projection."""

from __future__ import annotations

import logging
from datetime import datetime

import pandas as pd
import pytest

from analytics.recurrence import (
    RecurrenceKind,
    RecurrencePattern,
    next_occurrence,
    occurrence_days,
    occurrences_between,
    occurs_on,
    recurs_on,
)
from core.errors import InvalidPatternParameter


def _pattern(kind: str, interval: int, anchor: str) -> RecurrencePattern:
    return RecurrencePattern(kind=RecurrenceKind(kind), interval=interval, anchor=pd.Timestamp(anchor))


@pytest.mark.parametrize(
    "pattern",
    [
        _pattern("daily", 3, "2024-01-01"),
        _pattern("monthly", 1, "2024-01-31"),
        _pattern("monthly", 2, "2024-01-30"),
        _pattern("yearly", 1, "2024-02-29"),
    ],
)
def test_anchor_always_occurs_but_never_recurs(pattern):
    assert occurs_on(pattern, pattern.anchor)
    assert not recurs_on(pattern, pattern.anchor)
    assert not occurs_on(pattern, pattern.anchor - pd.Timedelta(days=1))


def test_end_of_month_monthly_chain():
    pattern = _pattern("monthly", 1, "2024-01-31")

    for value in ("2024-02-29", "2024-03-31", "2024-04-30", "2024-05-31"):
        assert pattern.occurs_on(value), value
        assert pattern.recurs_on(value), value
    assert not pattern.occurs_on("2024-02-28")
    assert not pattern.occurs_on("2024-04-29")


def test_leap_day_yearly_chain():
    pattern = _pattern("yearly", 1, "2024-02-29")

    for value in ("2025-02-28", "2026-02-28", "2027-02-28", "2028-02-29"):
        assert pattern.occurs_on(value), value
    assert not pattern.occurs_on("2028-02-28")
    assert not pattern.occurs_on("2025-03-30")


def test_yearly_month_end_anchor_accepts_any_month_end_in_the_year():
    pattern = _pattern("yearly", 1, "2024-01-31")

    assert pattern.occurs_on("2025-03-31")
    assert pattern.occurs_on("2025-02-28")
    assert pattern.occurs_on("2026-01-31")
    assert not pattern.occurs_on("2025-03-30")
    assert not pattern.occurs_on("2024-12-31")


def test_standard_monthly_keeps_the_anchor_day():
    pattern = _pattern("monthly", 1, "2024-01-30")

    assert pattern.occurs_on("2024-02-29")
    assert pattern.occurs_on("2024-03-30")
    assert not pattern.occurs_on("2024-03-31")
    assert not pattern.occurs_on("2024-03-29")


def test_interval_must_divide_elapsed_steps():
    bimonthly = _pattern("monthly", 2, "2024-01-15")
    assert not bimonthly.occurs_on("2024-02-15")
    assert bimonthly.occurs_on("2024-03-15")

    every_third_day = _pattern("daily", 3, "2024-01-01")
    assert every_third_day.occurs_on("2024-01-10")
    assert not every_third_day.occurs_on("2024-01-11")


def test_time_of_day_is_ignored():
    pattern = _pattern("monthly", 1, "2024-01-15 08:00")
    assert pattern.anchor == pd.Timestamp("2024-01-15")
    assert pattern.occurs_on(pd.Timestamp("2024-02-15 23:59"))


def test_next_occurrence_end_of_month_and_leap_years():
    monthly = _pattern("monthly", 1, "2024-01-31")
    assert next_occurrence(monthly, "2024-01-31") == pd.Timestamp("2024-02-29")
    assert next_occurrence(monthly, "2024-03-01") == pd.Timestamp("2024-03-31")
    assert next_occurrence(monthly, "2024-04-30") == pd.Timestamp("2024-05-31")

    yearly = _pattern("yearly", 1, "2024-02-29")
    assert next_occurrence(yearly, "2024-03-01") == pd.Timestamp("2025-02-28")
    assert next_occurrence(yearly, "2027-02-28") == pd.Timestamp("2028-02-29")


def test_next_occurrence_does_not_drift_for_late_month_anchors():
    pattern = _pattern("monthly", 1, "2024-01-30")
    assert next_occurrence(pattern, "2024-02-29") == pd.Timestamp("2024-03-30")


def test_next_occurrence_before_anchor_returns_anchor():
    pattern = _pattern("daily", 7, "2024-05-01")
    assert next_occurrence(pattern, "2024-04-01") == pd.Timestamp("2024-05-01")
    assert next_occurrence(pattern, "2024-05-01") == pd.Timestamp("2024-05-08")


@pytest.mark.parametrize(
    ("pattern", "after"),
    [
        (_pattern("daily", 5, "2023-12-30"), "2024-03-03"),
        (_pattern("monthly", 3, "2023-11-30"), "2024-06-01"),
        (_pattern("monthly", 1, "2023-04-30"), "2024-02-29"),
        (_pattern("yearly", 2, "2020-02-29"), "2023-01-01"),
    ],
)
def test_next_occurrence_is_later_and_occurs(pattern, after):
    result = next_occurrence(pattern, after)
    assert result > pd.Timestamp(after)
    assert occurs_on(pattern, result)


def test_next_occurrence_recovers_from_calendar_overflow(caplog):
    pattern = RecurrencePattern(RecurrenceKind.YEARLY, 1, datetime(9990, 1, 15))

    with caplog.at_level(logging.WARNING, logger="spending.recurrence"):
        result = next_occurrence(pattern, datetime(9999, 3, 1))

    assert result == pd.Timestamp(datetime(9999, 3, 1))
    assert "Could not project" in caplog.text


def test_occurrences_between_and_month_days():
    pattern = _pattern("daily", 14, "2024-01-03")
    assert occurrences_between(pattern, "2024-01-01", "2024-01-31") == [
        pd.Timestamp("2024-01-03"),
        pd.Timestamp("2024-01-17"),
        pd.Timestamp("2024-01-31"),
    ]
    assert occurrence_days(pattern, "2024-02-10") == [14, 28]
    assert occurrence_days(_pattern("monthly", 1, "2024-01-31"), "2024-02-01") == [29]
    assert occurrences_between(pattern, "2024-02-01", "2024-01-01") == []


def test_patterns_compare_by_calendar_day():
    first = _pattern("monthly", 1, "2024-01-31 06:00")
    second = _pattern("monthly", 1, "2024-01-31 22:00")
    assert first == second
    assert hash(first) == hash(second)
    assert first != _pattern("monthly", 2, "2024-01-31")
    assert first.anchored_at_month_end
    assert not _pattern("daily", 1, "2024-01-31").anchored_at_month_end


def test_describe():
    assert _pattern("monthly", 1, "2024-01-31").describe() == "Every month from 2024-01-31"
    assert _pattern("daily", 3, "2024-01-01").describe() == "Every 3 days from 2024-01-01"


@pytest.mark.parametrize("interval", [0, -1, 1.5, True])
def test_invalid_intervals_fail_loudly(interval):
    with pytest.raises(InvalidPatternParameter):
        RecurrencePattern(kind=RecurrenceKind.DAILY, interval=interval, anchor=pd.Timestamp("2024-01-01"))


def test_unknown_kind_fails_loudly():
    with pytest.raises(InvalidPatternParameter):
        RecurrencePattern(kind="weekly", interval=1, anchor=pd.Timestamp("2024-01-01"))
