"""Spending history and category share aggregation helpers."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

import pandas as pd

from core.calendar_math import DateLike, add_months, start_of_month
from core.data_loader import transactions_to_frame
from core.models import Category, CategoryShare, HistoryPoint, Timestep, Transaction

__all__ = ["build_spending_history", "build_category_shares"]

_ZERO = Decimal("0")


def _decimal_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, _ZERO)


def _month_range_frame(
    transactions: Iterable[Transaction],
    start_month: DateLike,
    end_month: DateLike,
) -> pd.DataFrame:
    """Return transactions dated within the inclusive month range, swapping inverted bounds."""

    first, last = start_of_month(start_month), start_of_month(end_month)
    if first > last:
        first, last = last, first

    frame = transactions_to_frame(transactions)
    mask = (frame["date"] >= first) & (frame["date"] < add_months(last, 1))
    return frame.loc[mask]


def build_spending_history(
    transactions: Iterable[Transaction],
    start_month: DateLike,
    end_month: DateLike,
    timestep: Timestep | str = Timestep.MONTHS,
) -> list[HistoryPoint]:
    """Total spend per month or per year across ``[start_month, end_month]``.

    Only periods with at least one transaction are returned, oldest first.
    """

    frame = _month_range_frame(transactions, start_month, end_month)
    if frame.empty:
        return []

    freq = "Y" if Timestep(timestep) is Timestep.YEARS else "M"
    periods = frame["date"].dt.to_period(freq)
    totals = frame.groupby(periods)["amount"].agg(_decimal_sum)
    return [HistoryPoint(period_start=period.to_timestamp(), total=total) for period, total in totals.items()]


def build_category_shares(
    transactions: Iterable[Transaction],
    start_month: DateLike,
    end_month: DateLike,
    categories: Optional[Iterable[Category | str]] = None,
) -> list[CategoryShare]:
    """Return each selected category's total and share of the overall spend.

    An empty or missing selection means every category. Categories without
    positive spend are dropped; the rest are sorted by descending total.
    """

    selected = {Category.parse(category) for category in categories or ()} or set(Category)

    frame = _month_range_frame(transactions, start_month, end_month)
    frame = frame[frame["category"].isin(list(selected))]
    if frame.empty:
        return []

    totals = frame.groupby("category")["amount"].agg(_decimal_sum)
    positive = {Category.parse(category): total for category, total in totals.items() if total > 0}
    overall = _decimal_sum(positive.values())
    if overall <= 0:
        return []

    shares = [
        CategoryShare(category=category, total=total, share=float(total / overall))
        for category, total in positive.items()
    ]
    shares.sort(key=lambda row: (-row.total, row.category.value))
    return shares
