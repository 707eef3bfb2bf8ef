"""Core domain package for the transaction analytics engine."""

from .errors import CalendarConstructionError, InvalidPatternParameter
from .models import (
    AnalyticsSummary,
    Category,
    CategoryShare,
    ForecastResult,
    HistoryPoint,
    MonthlyAggregate,
    RecurringEntry,
    Timestep,
    Transaction,
    TransactionGroupKey,
)
from .data_loader import load_transactions, transactions_to_frame
from .transaction_index import TransactionIndex
from .logging_setup import configure_logging, get_logger

__all__ = [
    "AnalyticsSummary",
    "CalendarConstructionError",
    "Category",
    "CategoryShare",
    "ForecastResult",
    "HistoryPoint",
    "InvalidPatternParameter",
    "MonthlyAggregate",
    "RecurringEntry",
    "Timestep",
    "Transaction",
    "TransactionGroupKey",
    "TransactionIndex",
    "configure_logging",
    "get_logger",
    "load_transactions",
    "transactions_to_frame",
]
