"""Shared data model definitions for the transaction analytics engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, TypedDict

import pandas as pd

from core.calendar_math import civil_date

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from analytics.recurrence import RecurrencePattern


class Category(str, Enum):
    CLOTHING = "clothing"
    COMMUTE = "commute"
    EDUCATION = "education"
    ENTERTAINMENT = "entertainment"
    FOOD = "food"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: object) -> "Category":
        """Match ``raw`` case-insensitively against the enumeration, defaulting to ``other``."""

        if isinstance(raw, cls):
            return raw
        normalized = str(raw or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.OTHER


class Timestep(str, Enum):
    MONTHS = "months"
    YEARS = "years"


def _as_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Transaction:
    """A dated spend record as handed over by the external store.

    ``date`` is reduced to a civil date on construction and ``amount`` to a
    ``Decimal``; the core never mutates a transaction afterwards.
    """

    id: str
    date: pd.Timestamp
    name: str
    amount: Decimal
    category: Category = Category.OTHER

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "date", civil_date(self.date))
        object.__setattr__(self, "amount", _as_decimal(self.amount))
        object.__setattr__(self, "category", Category.parse(self.category))

    @property
    def group_key(self) -> "TransactionGroupKey":
        return TransactionGroupKey(self.name, self.category)


class TransactionGroupKey(NamedTuple):
    """Transactions sharing name and category form one recurring series candidate."""

    name: str
    category: Category


@dataclass(frozen=True)
class MonthlyAggregate:
    month_start: pd.Timestamp
    total: Decimal


@dataclass(frozen=True)
class ForecastResult:
    actual_this_month: Decimal
    predicted: Decimal


@dataclass(frozen=True)
class HistoryPoint:
    period_start: pd.Timestamp
    total: Decimal


@dataclass(frozen=True)
class CategoryShare:
    category: Category
    total: Decimal
    share: float = field(default=0.0)


class RecurringEntry(TypedDict):
    """Metadata describing a detected recurring transaction series."""

    key: TransactionGroupKey
    name: str
    category: Category
    pattern: "RecurrencePattern"
    interval_label: str
    occurrences: int
    average_amount: float
    last_amount: float
    last_date: pd.Timestamp
    next_date: pd.Timestamp
    days_until_due: int


class AnalyticsSummary(TypedDict):
    generated_at: pd.Timestamp
    transaction_count: int
    recurring_entries: list[RecurringEntry]
    forecasts: dict[Category, ForecastResult]


__all__ = [
    "Category",
    "Timestep",
    "Transaction",
    "TransactionGroupKey",
    "MonthlyAggregate",
    "ForecastResult",
    "HistoryPoint",
    "CategoryShare",
    "RecurringEntry",
    "AnalyticsSummary",
]
