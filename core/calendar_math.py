"""Civil-date helpers shared by the recurrence and forecasting pipelines.

Every function works on day-granularity ``pd.Timestamp`` values: naive,
normalised to midnight, Gregorian. Timezone-aware inputs are converted to the
configured zone once, in :func:`civil_date`, and the zone is dropped.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

import pandas as pd

from config import get_settings
from core.errors import CalendarConstructionError

__all__ = [
    "DateLike",
    "civil_date",
    "start_of_day",
    "start_of_week",
    "start_of_month",
    "start_of_year",
    "end_of_month",
    "is_end_of_month",
    "add_days",
    "add_months",
    "add_years",
    "days_between",
    "months_between",
    "years_between",
]

DateLike = Union[str, date, datetime, pd.Timestamp]


def civil_date(value: DateLike, timezone: str | None = None) -> pd.Timestamp:
    """Return ``value`` as a naive midnight timestamp.

    Parameters
    ----------
    value:
        Anything ``pd.Timestamp`` accepts.
    timezone:
        Zone used to read timezone-aware inputs. Defaults to
        ``Settings.timezone``; ignored for naive inputs.

    Raises
    ------
    CalendarConstructionError
        If the value is missing or outside the representable range.
    """

    try:
        ts = pd.Timestamp(value)
    except (OverflowError, ValueError, TypeError) as exc:
        raise CalendarConstructionError(f"Cannot build a calendar date from {value!r}") from exc
    if pd.isna(ts):
        raise CalendarConstructionError(f"Cannot build a calendar date from {value!r}")

    if ts.tzinfo is not None:
        ts = ts.tz_convert(timezone or get_settings().timezone).tz_localize(None)
    return ts.normalize()


def start_of_day(value: DateLike) -> pd.Timestamp:
    return civil_date(value)


def start_of_week(value: DateLike, first_weekday: int | None = None) -> pd.Timestamp:
    """Return the first day of the week containing ``value`` (Monday is 0)."""

    day = civil_date(value)
    if first_weekday is None:
        first_weekday = get_settings().first_weekday
    offset = (day.weekday() - first_weekday) % 7
    return day - pd.Timedelta(days=offset)


def start_of_month(value: DateLike) -> pd.Timestamp:
    return civil_date(value).replace(day=1)


def start_of_year(value: DateLike) -> pd.Timestamp:
    return civil_date(value).replace(month=1, day=1)


def end_of_month(value: DateLike) -> pd.Timestamp:
    day = civil_date(value)
    return day.replace(day=day.days_in_month)


def is_end_of_month(value: DateLike) -> bool:
    """Return ``True`` when ``value`` is the last day of its month (Feb 28/29, Apr 30, ...)."""

    day = civil_date(value)
    return day == start_of_month(day) + pd.DateOffset(months=1) - pd.Timedelta(days=1)


def add_days(value: DateLike, days: int) -> pd.Timestamp:
    day = civil_date(value)
    try:
        return day + pd.Timedelta(days=days)
    except (OverflowError, ValueError) as exc:
        raise CalendarConstructionError(f"Cannot add {days} days to {day.date()}") from exc


def add_months(value: DateLike, months: int, snap_to_end_of_month: bool = False) -> pd.Timestamp:
    """Add calendar months, clamping to the target month's last day.

    With ``snap_to_end_of_month`` the result is always the last day of the
    target month, so Jan 31 -> Feb 29 -> Mar 31 -> Apr 30 keeps its
    end-of-month membership.
    """

    day = civil_date(value)
    try:
        shifted = day + pd.DateOffset(months=months)
        if snap_to_end_of_month:
            shifted = shifted.replace(day=shifted.days_in_month)
    except (OverflowError, ValueError) as exc:
        raise CalendarConstructionError(f"Cannot add {months} months to {day.date()}") from exc
    return shifted.normalize()


def add_years(value: DateLike, years: int, snap_to_end_of_month: bool = False) -> pd.Timestamp:
    """Add calendar years; Feb 29 lands on Feb 28 in non-leap target years."""

    day = civil_date(value)
    try:
        shifted = day + pd.DateOffset(years=years)
        if snap_to_end_of_month:
            shifted = shifted.replace(day=shifted.days_in_month)
    except (OverflowError, ValueError) as exc:
        raise CalendarConstructionError(f"Cannot add {years} years to {day.date()}") from exc
    return shifted.normalize()


def days_between(start: DateLike, end: DateLike) -> int:
    return int((civil_date(end) - civil_date(start)).days)


def months_between(start: DateLike, end: DateLike) -> int:
    """Return the number of whole calendar months from ``start`` to ``end``.

    A month counts once ``add_months(start, n)`` has been reached, so
    Jan 31 -> Feb 29 is one month and Jan 31 -> Feb 28 (2024) is zero.
    """

    first, last = civil_date(start), civil_date(end)
    months = (last.year - first.year) * 12 + (last.month - first.month)
    if months > 0 and add_months(first, months) > last:
        months -= 1
    elif months < 0 and add_months(first, months) < last:
        months += 1
    return months


def years_between(start: DateLike, end: DateLike) -> int:
    """Return the number of whole calendar years from ``start`` to ``end``."""

    first, last = civil_date(start), civil_date(end)
    years = last.year - first.year
    if years > 0 and add_years(first, years) > last:
        years -= 1
    elif years < 0 and add_years(first, years) < last:
        years += 1
    return years
