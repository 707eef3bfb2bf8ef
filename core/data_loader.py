"""Snapshot loading utilities for the analytics pipeline."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Final, Iterable

import pandas as pd

from core.models import Category, Transaction

__all__ = ["load_transactions", "transactions_to_frame", "REQUIRED_COLUMNS"]


_CACHE_SIZE: Final[int] = 8
REQUIRED_COLUMNS: Final[tuple[str, ...]] = ("id", "date", "name", "amount", "category")


def load_transactions(csv_path: str | Path) -> tuple[Transaction, ...]:
    """Return the transactions stored in ``csv_path`` as an immutable snapshot.

    Results are cached per path and file stamp, so re-running the analytics on
    an unchanged export does not re-read it while a rewritten export is picked
    up on the next call. Amounts are read as text and converted to ``Decimal``
    to keep cents exact.
    """

    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    stat = path.stat()
    return _read_snapshot(path, stat.st_mtime_ns, stat.st_size)


@lru_cache(maxsize=_CACHE_SIZE)
def _read_snapshot(path: Path, mtime_ns: int, size: int) -> tuple[Transaction, ...]:
    df = pd.read_csv(path, dtype={"id": str, "name": str, "amount": str, "category": str})
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"CSV is missing required columns: {', '.join(missing)}")

    df = df.dropna(subset=["date", "amount"])
    df["name"] = df["name"].fillna("").str.strip()
    df["category"] = df["category"].fillna(Category.OTHER.value)

    return tuple(
        Transaction(
            id=row.id,
            date=row.date,
            name=row.name,
            amount=row.amount.strip(),
            category=Category.parse(row.category),
        )
        for row in df.itertuples(index=False)
    )


def transactions_to_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Return a dataframe with one row per transaction and ``Decimal`` amounts."""

    records = [
        {
            "id": txn.id,
            "date": txn.date,
            "name": txn.name,
            "amount": txn.amount,
            "category": txn.category,
        }
        for txn in transactions
    ]
    frame = pd.DataFrame(records, columns=list(REQUIRED_COLUMNS))
    frame["date"] = pd.to_datetime(frame["date"])
    return frame
