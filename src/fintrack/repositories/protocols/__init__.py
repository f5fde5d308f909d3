"""Repository protocol definitions (interfaces)."""

from fintrack.repositories.protocols.position_repo import PositionRepository
from fintrack.repositories.protocols.valuation_repo import ValuationRepository
from fintrack.repositories.protocols.operation_repo import OperationRepository
from fintrack.repositories.protocols.ledger_repo import LedgerRepository
from fintrack.repositories.protocols.credential_store import CredentialStore
from fintrack.repositories.protocols.unit_of_work import UnitOfWork

__all__ = [
    "PositionRepository",
    "ValuationRepository",
    "OperationRepository",
    "LedgerRepository",
    "CredentialStore",
    "UnitOfWork",
]
