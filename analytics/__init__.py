"""Analytics helpers built on the transaction analytics core."""

from analytics.forecasting import (
    aggregate_monthly,
    compute_current_month_actuals,
    forecast_horizon,
    forecast_spending,
    holt_winters_predict,
    impute_monthly,
)
from analytics.history import build_category_shares, build_spending_history
from analytics.recurrence import (
    RecurrenceKind,
    RecurrencePattern,
    next_occurrence,
    occurrence_days,
    occurrences_between,
    occurs_on,
    recurs_on,
)
from analytics.recurring import (
    detect_recurring_transactions,
    filter_out_saved,
    group_transactions,
    infer_pattern,
    infer_recurring_patterns,
    match_occurrence,
)

__all__ = [
    "RecurrenceKind",
    "RecurrencePattern",
    "occurs_on",
    "recurs_on",
    "next_occurrence",
    "occurrences_between",
    "occurrence_days",
    "infer_pattern",
    "group_transactions",
    "infer_recurring_patterns",
    "detect_recurring_transactions",
    "filter_out_saved",
    "match_occurrence",
    "aggregate_monthly",
    "impute_monthly",
    "holt_winters_predict",
    "forecast_horizon",
    "compute_current_month_actuals",
    "forecast_spending",
    "build_spending_history",
    "build_category_shares",
]
