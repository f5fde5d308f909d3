"""View models for service outputs."""

from fintrack.domain.views.portfolio import (
    BrokerPosition,
    InstrumentInfo,
    SymbolFailure,
    PositionsPull,
    OperationsPull,
    ReconciliationReport,
    OperationOutcome,
    OperationSyncReport,
    PerformanceView,
)
from fintrack.domain.views.ledger import ExpenseSummary, IncomeSummary

__all__ = [
    "BrokerPosition",
    "InstrumentInfo",
    "SymbolFailure",
    "PositionsPull",
    "OperationsPull",
    "ReconciliationReport",
    "OperationOutcome",
    "OperationSyncReport",
    "PerformanceView",
    "ExpenseSummary",
    "IncomeSummary",
]
