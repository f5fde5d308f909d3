"""Repository layer - data access abstractions and implementations."""

from fintrack.repositories.protocols import (
    PositionRepository,
    ValuationRepository,
    OperationRepository,
    LedgerRepository,
    CredentialStore,
    UnitOfWork,
)

__all__ = [
    "PositionRepository",
    "ValuationRepository",
    "OperationRepository",
    "LedgerRepository",
    "CredentialStore",
    "UnitOfWork",
]
