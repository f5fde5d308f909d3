"""Domain models package."""

from fintrack.domain.models.enums import Currency, OperationKind, CENTS_SCALED_TYPES
from fintrack.domain.models.position import Position
from fintrack.domain.models.valuation import ValuationSnapshot
from fintrack.domain.models.operation import Operation, RecordedOperation
from fintrack.domain.models.exchange_rate import ExchangeRate
from fintrack.domain.models.ledger import Expense, Income, GrossIncome

__all__ = [
    "Currency",
    "OperationKind",
    "CENTS_SCALED_TYPES",
    "Position",
    "ValuationSnapshot",
    "Operation",
    "RecordedOperation",
    "ExchangeRate",
    "Expense",
    "Income",
    "GrossIncome",
]
