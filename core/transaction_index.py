"""Date-ordered view over a transaction snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import numpy as np
import pandas as pd

from core.calendar_math import DateLike, civil_date
from core.data_loader import transactions_to_frame
from core.logging_setup import get_logger
from core.models import Transaction

__all__ = ["TransactionIndex"]

_logger = get_logger("spending.transaction_index")


@dataclass(frozen=True)
class _IndexState:
    transactions: tuple[Transaction, ...]
    keys: np.ndarray


def _build_state(transactions: Iterable[Transaction]) -> _IndexState:
    ordered = tuple(sorted(transactions, key=lambda txn: (txn.date, txn.id)))
    keys = np.array([txn.date.to_datetime64() for txn in ordered], dtype="datetime64[ns]")
    return _IndexState(transactions=ordered, keys=keys)


class TransactionIndex:
    """Caller-owned, date-sorted cache of transactions.

    The index keeps a sorted tuple plus a parallel ``datetime64`` key array and
    answers range queries with ``np.searchsorted``. :meth:`rebuild` builds the
    replacement state first and swaps a single reference, so concurrent readers
    see either the previous snapshot or the new one in full.
    """

    def __init__(self, transactions: Iterable[Transaction] = ()) -> None:
        self._state = _build_state(transactions)

    def rebuild(self, transactions: Iterable[Transaction]) -> None:
        state = _build_state(transactions)
        self._state = state
        _logger.debug("Rebuilt transaction index with %d transactions", len(state.transactions))

    def __len__(self) -> int:
        return len(self._state.transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self._state.transactions)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._state.transactions

    def first(self) -> Optional[Transaction]:
        transactions = self._state.transactions
        return transactions[0] if transactions else None

    def last(self) -> Optional[Transaction]:
        transactions = self._state.transactions
        return transactions[-1] if transactions else None

    def between(
        self,
        start: DateLike | None = None,
        end: DateLike | None = None,
        *,
        inclusive_end: bool = False,
    ) -> tuple[Transaction, ...]:
        """Return transactions dated in ``[start, end)`` (or ``[start, end]``)."""

        state = self._state
        lo = 0
        hi = len(state.transactions)
        if start is not None:
            lo = int(np.searchsorted(state.keys, civil_date(start).to_datetime64(), side="left"))
        if end is not None:
            side = "right" if inclusive_end else "left"
            hi = int(np.searchsorted(state.keys, civil_date(end).to_datetime64(), side=side))
        return state.transactions[lo:hi] if lo < hi else ()

    def on(self, day: DateLike) -> tuple[Transaction, ...]:
        return self.between(day, day, inclusive_end=True)

    def to_frame(self) -> pd.DataFrame:
        return transactions_to_frame(self._state.transactions)
