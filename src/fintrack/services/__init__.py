"""Service layer - business logic orchestration."""

from fintrack.services.exchange_rate_service import ExchangeRateService
from fintrack.services.symbol_locks import SymbolLockRegistry, get_symbol_locks
from fintrack.services.reconciliation_engine import ReconciliationEngine
from fintrack.services.portfolio_queries import PortfolioQueryService
from fintrack.services.ledger_service import LedgerService

__all__ = [
    "ExchangeRateService",
    "SymbolLockRegistry",
    "get_symbol_locks",
    "ReconciliationEngine",
    "PortfolioQueryService",
    "LedgerService",
]
