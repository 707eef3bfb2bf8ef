"""Synthetic ledger generator for the transaction analytics engine.

Produces deterministic (seeded) ledgers for development and testing: a handful
of genuinely recurring series covering the awkward calendar cases (an
end-of-month rent, a fortnightly pass, a yearly fee, a mid-month subscription)
plus uniquely named everyday spend that must never be mistaken for a series.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from analytics.recurrence import RecurrenceKind, RecurrencePattern, occurrences_between
from core.calendar_math import add_days, add_months, end_of_month, start_of_month
from core.data_loader import transactions_to_frame
from core.models import Category, Transaction

T = TypeVar("T")


@dataclass(frozen=True)
class SeriesProfile:
    """A recurring payment emitted on every occurrence of its pattern."""

    name: str
    category: Category
    kind: RecurrenceKind
    interval: int
    base_amount: float
    drift_pct: float = 0.0
    anchor_day: Optional[int] = None  # ``None`` anchors on the first month's last day


RECURRING_SERIES: Sequence[SeriesProfile] = (
    SeriesProfile("Oakwood Rent", Category.OTHER, RecurrenceKind.MONTHLY, 1, 950.0),
    SeriesProfile("Metro Pass", Category.COMMUTE, RecurrenceKind.DAILY, 14, 55.0, anchor_day=3),
    SeriesProfile("Language School", Category.EDUCATION, RecurrenceKind.YEARLY, 1, 420.0, anchor_day=10),
    SeriesProfile("Streaming Plus", Category.ENTERTAINMENT, RecurrenceKind.MONTHLY, 1, 12.99, 0.02, anchor_day=8),
)

NOISE_MERCHANTS: Sequence[Tuple[str, Category, Tuple[int, int], Tuple[float, float]]] = (
    ("Corner Cafe", Category.FOOD, (6, 12), (3.5, 18.0)),
    ("Fresh Market", Category.FOOD, (3, 6), (25.0, 90.0)),
    ("Thread & Co", Category.CLOTHING, (0, 2), (20.0, 120.0)),
    ("Cinema House", Category.ENTERTAINMENT, (0, 3), (9.0, 30.0)),
    ("City Cabs", Category.COMMUTE, (1, 4), (8.0, 35.0)),
)


def generate_transactions(
    start_date: date | datetime | str,
    months: int,
    *,
    seed: Optional[int] = None,
) -> List[Transaction]:
    """Generate ``months`` complete months of transactions starting at ``start_date``'s month."""

    if months <= 0:
        raise ValueError("months must be a positive integer")

    rng = np.random.default_rng(seed)
    period_start = start_of_month(start_date)
    period_end = add_days(add_months(period_start, months), -1)

    transactions: List[Transaction] = []
    txn_counter = itertools.count(1)

    def append_transaction(day: pd.Timestamp, name: str, category: Category, amount: float) -> None:
        if day < period_start or day > period_end:
            return
        transactions.append(
            Transaction(
                id=f"txn_{next(txn_counter):06d}",
                date=day,
                name=name,
                amount=Decimal(f"{abs(amount):.2f}"),
                category=category,
            )
        )

    for profile in RECURRING_SERIES:
        if profile.anchor_day is None:
            anchor = end_of_month(period_start)
        else:
            anchor = add_days(period_start, profile.anchor_day - 1)
        pattern = RecurrencePattern(kind=profile.kind, interval=profile.interval, anchor=anchor)
        for day in occurrences_between(pattern, period_start, period_end):
            amount = profile.base_amount * (1 + rng.normal(0, profile.drift_pct))
            append_transaction(day, profile.name, profile.category, amount)

    noise_counter = itertools.count(1)
    for offset in range(months):
        month_start = add_months(period_start, offset)
        month_days = pd.date_range(month_start, end_of_month(month_start), freq="D")
        for merchant, category, count_bounds, amount_bounds in NOISE_MERCHANTS:
            count = int(rng.integers(count_bounds[0], count_bounds[1] + 1))
            for _ in range(count):
                day = _rng_choice(month_days, rng)
                amount = rng.uniform(*amount_bounds)
                append_transaction(day, f"{merchant} #{next(noise_counter)}", category, amount)

    transactions.sort(key=lambda txn: (txn.date, txn.id))
    return transactions


def write_transactions_csv(
    path: str | Path,
    start_date: date | datetime | str,
    months: int,
    *,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate synthetic data and persist it to ``path`` in the loader's column layout."""

    df = transactions_to_frame(generate_transactions(start_date, months, seed=seed))
    df["date"] = df["date"].dt.strftime("%Y-%m-%d")
    df["category"] = df["category"].map(lambda category: category.value)
    df["amount"] = df["amount"].map(str)
    df.to_csv(path, index=False)
    return df


def _rng_choice(options: Sequence[T], rng: np.random.Generator) -> T:
    if len(options) == 0:
        raise ValueError("Cannot choose from an empty sequence")
    idx = int(rng.integers(0, len(options)))
    return options[idx]
