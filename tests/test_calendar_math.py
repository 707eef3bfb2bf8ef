"""Unit tests for the civil-date helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pandas as pd
import pytest

from core.calendar_math import (
    add_months,
    add_years,
    civil_date,
    days_between,
    end_of_month,
    is_end_of_month,
    months_between,
    start_of_month,
    start_of_week,
    start_of_year,
    years_between,
)
from core.errors import CalendarConstructionError


def test_civil_date_drops_time_of_day():
    assert civil_date("2024-03-05 17:45") == pd.Timestamp("2024-03-05")
    assert civil_date(date(2024, 3, 5)) == pd.Timestamp("2024-03-05")


def test_civil_date_converts_aware_timestamps_in_configured_zone(monkeypatch):
    monkeypatch.setenv("SPENDING_TIMEZONE", "Asia/Tokyo")
    moment = datetime(2024, 3, 5, 20, 0, tzinfo=timezone.utc)

    assert civil_date(moment) == pd.Timestamp("2024-03-06")
    assert civil_date(moment, timezone="UTC") == pd.Timestamp("2024-03-05")


def test_civil_date_rejects_missing_values():
    with pytest.raises(CalendarConstructionError):
        civil_date(None)


def test_period_starts():
    day = pd.Timestamp("2024-08-17 09:30")
    assert start_of_month(day) == pd.Timestamp("2024-08-01")
    assert start_of_year(day) == pd.Timestamp("2024-01-01")
    assert end_of_month(day) == pd.Timestamp("2024-08-31")


def test_start_of_week_honours_first_weekday(monkeypatch):
    # 2024-08-17 is a Saturday.
    assert start_of_week("2024-08-17", first_weekday=0) == pd.Timestamp("2024-08-12")
    assert start_of_week("2024-08-17", first_weekday=6) == pd.Timestamp("2024-08-11")

    monkeypatch.setenv("SPENDING_FIRST_WEEKDAY", "5")
    assert start_of_week("2024-08-17") == pd.Timestamp("2024-08-17")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-01-31", True),
        ("2024-02-29", True),
        ("2024-02-28", False),
        ("2023-02-28", True),
        ("2024-04-30", True),
        ("2024-04-29", False),
    ],
)
def test_is_end_of_month(value, expected):
    assert is_end_of_month(value) is expected


def test_add_months_clamps_to_shorter_months():
    assert add_months("2024-01-31", 1) == pd.Timestamp("2024-02-29")
    assert add_months("2024-01-31", 3) == pd.Timestamp("2024-04-30")
    assert add_months("2024-01-30", 2) == pd.Timestamp("2024-03-30")
    assert add_months("2024-03-31", -1) == pd.Timestamp("2024-02-29")


def test_add_months_snaps_to_end_of_month():
    chain = [add_months("2024-01-31", step, snap_to_end_of_month=True) for step in range(5)]
    assert chain == [
        pd.Timestamp("2024-01-31"),
        pd.Timestamp("2024-02-29"),
        pd.Timestamp("2024-03-31"),
        pd.Timestamp("2024-04-30"),
        pd.Timestamp("2024-05-31"),
    ]
    assert add_months("2024-02-29", 1, snap_to_end_of_month=True) == pd.Timestamp("2024-03-31")


def test_add_years_handles_leap_days():
    assert add_years("2024-02-29", 1) == pd.Timestamp("2025-02-28")
    assert add_years("2024-02-29", 4) == pd.Timestamp("2028-02-29")
    assert add_years("2025-02-28", 3, snap_to_end_of_month=True) == pd.Timestamp("2028-02-29")
    assert add_years("2025-02-28", 3) == pd.Timestamp("2028-02-28")


def test_add_months_out_of_range_raises_calendar_error():
    with pytest.raises(CalendarConstructionError):
        add_months("9999-11-01", 2)


def test_differences_are_calendar_aware():
    assert days_between("2024-02-01", "2024-03-01") == 29
    assert months_between("2024-01-31", "2024-02-29") == 1
    assert months_between("2024-01-31", "2024-02-28") == 0
    assert months_between("2024-01-15", "2025-01-14") == 11
    assert months_between("2024-03-31", "2024-01-31") == -2
    assert years_between("2024-02-29", "2025-02-28") == 1
    assert years_between("2024-03-01", "2025-02-28") == 0
    assert years_between("2020-06-30", "2024-06-30") == 4
