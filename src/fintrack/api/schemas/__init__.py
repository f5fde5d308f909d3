"""Pydantic schemas for API request/response."""

from fintrack.api.schemas.auth import (
    LoginRequest,
    SessionResponse,
    ExchangeRateResponse,
)
from fintrack.api.schemas.portfolio import (
    PositionResponse,
    PositionListResponse,
    ValuationResponse,
    ValuationListResponse,
    SymbolFailureResponse,
    ReconciliationResponse,
    OperationSyncRequest,
    OperationOutcomeResponse,
    OperationSyncResponse,
    PerformanceResponse,
)
from fintrack.api.schemas.ledger import (
    EntryCreate,
    EntryResponse,
    ExpenseSummaryResponse,
    IncomeSummaryResponse,
    GrossIncomeRequest,
    GrossIncomeResponse,
)

__all__ = [
    "LoginRequest",
    "SessionResponse",
    "ExchangeRateResponse",
    "PositionResponse",
    "PositionListResponse",
    "ValuationResponse",
    "ValuationListResponse",
    "SymbolFailureResponse",
    "ReconciliationResponse",
    "OperationSyncRequest",
    "OperationOutcomeResponse",
    "OperationSyncResponse",
    "PerformanceResponse",
    "EntryCreate",
    "EntryResponse",
    "ExpenseSummaryResponse",
    "IncomeSummaryResponse",
    "GrossIncomeRequest",
    "GrossIncomeResponse",
]
