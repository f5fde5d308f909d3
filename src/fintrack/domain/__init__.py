"""Domain layer - pure business models with no external dependencies."""

from fintrack.domain.models import (
    Currency,
    OperationKind,
    Position,
    ValuationSnapshot,
    Operation,
    RecordedOperation,
    ExchangeRate,
    Expense,
    Income,
    GrossIncome,
)

__all__ = [
    "Currency",
    "OperationKind",
    "Position",
    "ValuationSnapshot",
    "Operation",
    "RecordedOperation",
    "ExchangeRate",
    "Expense",
    "Income",
    "GrossIncome",
]
