"""API routers package."""

from fintrack.api.routers.auth import router as auth_router
from fintrack.api.routers.exchange_rate import router as exchange_rate_router
from fintrack.api.routers.portfolio import router as portfolio_router
from fintrack.api.routers.ledger import router as ledger_router

__all__ = [
    "auth_router",
    "exchange_rate_router",
    "portfolio_router",
    "ledger_router",
]
