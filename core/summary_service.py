"""Core logic for assembling an analytics refresh from a transaction snapshot."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from analytics.forecasting import forecast_spending
from analytics.recurring import detect_recurring_transactions
from core.calendar_math import DateLike, start_of_day
from core.data_loader import load_transactions
from core.logging_setup import get_logger
from core.models import AnalyticsSummary, Transaction
from core.transaction_index import TransactionIndex

__all__ = ["prepare_analytics_summary"]

_logger = get_logger("spending.summary_service")


def prepare_analytics_summary(
    source: str | Path | Iterable[Transaction],
    now: DateLike,
    *,
    lookback_months: Optional[int] = None,
    index: Optional[TransactionIndex] = None,
) -> AnalyticsSummary:
    """Recompute recurring series and forecasts for one snapshot.

    ``source`` is either a CSV export path, re-read whenever the file changes,
    or an in-memory snapshot. When the caller passes its own ``index`` it is
    rebuilt in place from the snapshot so later queries share the refreshed
    ordering.
    """

    if isinstance(source, (str, Path)):
        snapshot: tuple[Transaction, ...] = load_transactions(source)
    else:
        snapshot = tuple(source)

    if index is None:
        index = TransactionIndex(snapshot)
    else:
        index.rebuild(snapshot)

    generated_at = start_of_day(now)
    recurring_entries = detect_recurring_transactions(index, generated_at)
    forecasts = forecast_spending(index, lookback_months, now)

    _logger.info(
        "Refreshed analytics for %d transactions: %d recurring series",
        len(index),
        len(recurring_entries),
    )
    return {
        "generated_at": generated_at,
        "transaction_count": len(index),
        "recurring_entries": recurring_entries,
        "forecasts": forecasts,
    }
