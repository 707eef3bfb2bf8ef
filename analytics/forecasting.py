"""Monthly per-category spending forecasts with additive Holt-Winters smoothing."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from config import get_settings
from core.calendar_math import DateLike, add_months, months_between, start_of_day, start_of_month
from core.data_loader import transactions_to_frame
from core.logging_setup import get_logger
from core.models import Category, ForecastResult, MonthlyAggregate, Transaction
from core.transaction_index import TransactionIndex

__all__ = [
    "SEASON_LENGTH",
    "MIN_SEASONAL_POINTS",
    "aggregate_monthly",
    "impute_monthly",
    "holt_winters_predict",
    "forecast_horizon",
    "compute_current_month_actuals",
    "forecast_spending",
]

_logger = get_logger("spending.forecasting")

SEASON_LENGTH = 12
MIN_SEASONAL_POINTS = 2 * SEASON_LENGTH

ALPHA = 0.3  # level
BETA = 0.1  # trend
GAMMA = 0.1  # seasonality

_ZERO = Decimal("0")
_CENT = Decimal("0.01")


def _decimal_sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, _ZERO)


def _to_cents(value: float) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def aggregate_monthly(transactions: Iterable[Transaction]) -> list[MonthlyAggregate]:
    """Sum amounts per calendar month, one entry per observed month in order."""

    frame = transactions_to_frame(transactions)
    if frame.empty:
        return []

    months = frame["date"].dt.to_period("M")
    totals = frame.groupby(months)["amount"].agg(_decimal_sum)
    return [MonthlyAggregate(month_start=period.to_timestamp(), total=total) for period, total in totals.items()]


def impute_monthly(aggregates: Sequence[MonthlyAggregate]) -> list[MonthlyAggregate]:
    """Fill missing months between the first and last aggregate with the last known total.

    Without a gap-free series the ``t mod 12`` seasonal indexing drifts out of
    phase with the calendar.
    """

    if not aggregates:
        return []

    index = pd.PeriodIndex([aggregate.month_start for aggregate in aggregates], freq="M")
    series = pd.Series([aggregate.total for aggregate in aggregates], index=index, dtype=object).sort_index()
    full_range = pd.period_range(series.index.min(), series.index.max(), freq="M")
    filled = series.reindex(full_range).ffill()
    return [MonthlyAggregate(month_start=period.to_timestamp(), total=total) for period, total in filled.items()]


def holt_winters_predict(values: Sequence[float], horizon: int = 1) -> float:
    """Predict the value ``horizon`` steps after the last observation.

    Parameters
    ----------
    values:
        Gap-free monthly series, oldest first.
    horizon:
        Steps ahead of the last observation; values below one are treated as one.

    Returns
    -------
    float
        Additive Holt-Winters forecast (season length 12, alpha 0.3, beta 0.1,
        gamma 0.1), or the plain mean when fewer than two seasons are
        available. Never negative.
    """

    data = np.asarray(values, dtype=float)
    n = len(data)
    if n == 0:
        return 0.0
    if n < MIN_SEASONAL_POINTS:
        return max(float(data.mean()), 0.0)

    horizon = max(int(horizon), 1)

    level = float(data[:SEASON_LENGTH].mean())
    trend = float(np.mean((data[SEASON_LENGTH:MIN_SEASONAL_POINTS] - data[:SEASON_LENGTH]) / SEASON_LENGTH))
    seasonal = data[:SEASON_LENGTH] - level

    for t in range(SEASON_LENGTH, n):
        y_t = data[t]
        s_prev = seasonal[t % SEASON_LENGTH]
        next_level = ALPHA * (y_t - s_prev) + (1 - ALPHA) * (level + trend)
        trend = BETA * (next_level - level) + (1 - BETA) * trend
        seasonal[t % SEASON_LENGTH] = GAMMA * (y_t - next_level) + (1 - GAMMA) * s_prev
        level = next_level

    prediction = level + horizon * trend + seasonal[(n + horizon - 1) % SEASON_LENGTH]
    return max(float(prediction), 0.0)


def forecast_horizon(last_month: DateLike, current_month: DateLike) -> int:
    """Whole months from the last observed month to the current one, at least one."""

    return max(months_between(start_of_month(last_month), start_of_month(current_month)), 1)


def compute_current_month_actuals(transactions: Iterable[Transaction], now: DateLike) -> dict[Category, Decimal]:
    """Return the unsmoothed spend per category for the month containing ``now``."""

    month_start = start_of_month(now)
    month_end = add_months(month_start, 1)

    frame = transactions_to_frame(transactions)
    mask = (frame["date"] >= month_start) & (frame["date"] < month_end)
    sums = frame.loc[mask].groupby("category")["amount"].agg(_decimal_sum)
    observed = {Category.parse(category): total for category, total in sums.items()}
    return {category: observed.get(category, _ZERO) for category in Category}


def forecast_spending(
    transactions: Iterable[Transaction] | TransactionIndex,
    lookback_months: int | None,
    now: DateLike,
) -> dict[Category, ForecastResult]:
    """Forecast this month's spend for every category.

    Parameters
    ----------
    transactions:
        Snapshot of transactions in any order, or a ``TransactionIndex``.
    lookback_months:
        History window in months; ``None`` uses ``Settings.lookback_months``.
    now:
        Reference instant. The month containing it is excluded from the model
        because it is still incomplete.

    Returns
    -------
    dict[Category, ForecastResult]
        One entry per category with the month-to-date actual and the forecast.
    """

    if lookback_months is None:
        lookback_months = get_settings().lookback_months

    today = start_of_day(now)
    current_month = start_of_month(today)
    window_start = add_months(today, -lookback_months)

    if isinstance(transactions, TransactionIndex):
        snapshot = transactions.transactions
        window = transactions.between(window_start, current_month)
    else:
        snapshot = tuple(transactions)
        window = tuple(txn for txn in snapshot if window_start <= txn.date < current_month)

    actuals = compute_current_month_actuals(snapshot, today)

    results: dict[Category, ForecastResult] = {}
    for category in Category:
        series = impute_monthly(aggregate_monthly(txn for txn in window if txn.category is category))
        values = [float(point.total) for point in series]
        horizon = forecast_horizon(series[-1].month_start, current_month) if series else 1
        predicted = holt_winters_predict(values, horizon)
        _logger.debug(
            "%s: %d monthly points, horizon %d, %s model",
            category.value,
            len(values),
            horizon,
            "seasonal" if len(values) >= MIN_SEASONAL_POINTS else "mean",
        )
        results[category] = ForecastResult(actual_this_month=actuals[category], predicted=_to_cents(predicted))
    return results
