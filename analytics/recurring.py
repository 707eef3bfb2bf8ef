"""Recurring transaction detection: infer a cadence for each name/category series."""

from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from analytics.recurrence import (
    RecurrenceKind,
    RecurrencePattern,
    advance,
    elapsed_steps,
    next_occurrence,
    occurs_on,
)
from config import MIN_RECOGNITION_OCCURRENCES, get_settings
from core.calendar_math import DateLike, add_days, is_end_of_month, start_of_day
from core.data_loader import transactions_to_frame
from core.errors import CalendarConstructionError
from core.logging_setup import get_logger
from core.models import RecurringEntry, Transaction, TransactionGroupKey

__all__ = [
    "infer_pattern",
    "group_transactions",
    "infer_recurring_patterns",
    "detect_recurring_transactions",
    "filter_out_saved",
    "match_occurrence",
]

_logger = get_logger("spending.recurring")

# Coarser cadences first; each candidate is still verified date by date.
_INFERENCE_ORDER = (RecurrenceKind.YEARLY, RecurrenceKind.MONTHLY, RecurrenceKind.DAILY)


def infer_pattern(dates: Iterable[DateLike]) -> Optional[RecurrencePattern]:
    """Return the single cadence that explains every date, or ``None``.

    Parameters
    ----------
    dates:
        Occurrence dates of one series, in any order. Same-day duplicates are
        collapsed before inference.

    Returns
    -------
    RecurrencePattern | None
        Pattern anchored at the earliest date, or ``None`` when fewer than three
        distinct dates are given or no yearly, monthly or daily cadence fits.
    """

    days = sorted({start_of_day(value) for value in dates})
    if len(days) < MIN_RECOGNITION_OCCURRENCES:
        return None

    for kind in _INFERENCE_ORDER:
        interval = _verify_cadence(days, kind)
        if interval is not None:
            return RecurrencePattern(kind=kind, interval=interval, anchor=days[0])
    return None


def _verify_cadence(days: list[pd.Timestamp], kind: RecurrenceKind) -> Optional[int]:
    """Return the interval when every date sits ``i`` intervals after ``days[0]``.

    In month-end mode a date qualifies when it is a month end the right number
    of whole units away; otherwise it must equal the exact projection.
    """

    first, second = days[0], days[1]
    try:
        interval = elapsed_steps(kind, first, second)
        if interval <= 0:
            return None

        # Fixed from the first two dates only and never re-evaluated.
        eom_mode = kind is not RecurrenceKind.DAILY and is_end_of_month(first) and is_end_of_month(second)
        for i, target in enumerate(days[1:], start=1):
            if eom_mode:
                if not is_end_of_month(target) or elapsed_steps(kind, first, target) != interval * i:
                    return None
            elif advance(kind, first, interval * i) != target:
                return None
    except CalendarConstructionError:
        _logger.warning("Calendar failure while checking a %s cadence", kind.value, exc_info=True)
        return None
    return interval


def group_transactions(
    transactions: Iterable[Transaction],
    min_occurrences: int | None = None,
) -> dict[TransactionGroupKey, list[Transaction]]:
    """Cluster transactions by name and category, keeping groups of ``min_occurrences`` or more."""

    if min_occurrences is None:
        min_occurrences = get_settings().min_occurrences

    groups: dict[TransactionGroupKey, list[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.group_key, []).append(txn)
    return {
        key: sorted(members, key=lambda txn: (txn.date, txn.id))
        for key, members in sorted(groups.items())
        if len(members) >= min_occurrences
    }


def infer_recurring_patterns(
    transactions: Iterable[Transaction],
    min_occurrences: int | None = None,
) -> list[tuple[TransactionGroupKey, RecurrencePattern]]:
    """Return ``(key, pattern)`` for every series whose dates verify as recurring."""

    groups = group_transactions(transactions, min_occurrences)
    results: list[tuple[TransactionGroupKey, RecurrencePattern]] = []
    for key, members in groups.items():
        pattern = infer_pattern(txn.date for txn in members)
        if pattern is None:
            _logger.debug("No cadence for %s/%s (%d transactions)", key.name, key.category.value, len(members))
            continue
        _logger.debug("%s/%s recurs: %s", key.name, key.category.value, pattern.describe())
        results.append((key, pattern))

    _logger.info("Recognised %d recurring series out of %d candidate groups", len(results), len(groups))
    return results


def detect_recurring_transactions(
    transactions: Iterable[Transaction],
    today: DateLike,
    *,
    min_occurrences: int | None = None,
) -> list[RecurringEntry]:
    """Identify recurring series and describe when each is next due.

    Parameters
    ----------
    transactions:
        Snapshot of transactions in any order (a ``TransactionIndex`` works too).
    today:
        Reference date for the next due date and ``days_until_due``.
    min_occurrences:
        Minimum series size; defaults to ``Settings.min_occurrences``.

    Returns
    -------
    list[RecurringEntry]
        Sorted by due date, then by descending average amount.
    """

    today = start_of_day(today)

    entries: list[RecurringEntry] = []
    for key, members in group_transactions(transactions, min_occurrences).items():
        pattern = infer_pattern(txn.date for txn in members)
        if pattern is None:
            continue

        group_df = transactions_to_frame(members)
        amounts = group_df["amount"].astype(float)
        last_row = group_df.iloc[-1]
        last_date = pd.Timestamp(last_row["date"])
        next_date = next_occurrence(pattern, max(last_date, add_days(today, -1)))

        entries.append(
            {
                "key": key,
                "name": key.name,
                "category": key.category,
                "pattern": pattern,
                "interval_label": pattern.describe(),
                "occurrences": int(group_df["date"].nunique()),
                "average_amount": float(amounts.mean()),
                "last_amount": float(last_row["amount"]),
                "last_date": last_date,
                "next_date": next_date,
                "days_until_due": int((next_date - today).days),
            }
        )

    entries.sort(key=lambda row: (row["days_until_due"], -row["average_amount"]))
    return entries


def filter_out_saved(
    found: Iterable[tuple[TransactionGroupKey, RecurrencePattern]],
    saved: Iterable[tuple[TransactionGroupKey, RecurrencePattern]],
) -> list[tuple[TransactionGroupKey, RecurrencePattern]]:
    """Drop inferred series the caller has already persisted."""

    known = set(saved)
    return [item for item in found if item not in known]


def match_occurrence(
    key: TransactionGroupKey,
    pattern: RecurrencePattern,
    transactions: Iterable[Transaction],
    day: DateLike,
) -> Optional[Transaction]:
    """Return the series transaction recorded on ``day`` if the pattern occurs there."""

    check = start_of_day(day)
    if not occurs_on(pattern, check):
        return None
    for txn in transactions:
        if txn.date == check and txn.group_key == key:
            return txn
    return None
