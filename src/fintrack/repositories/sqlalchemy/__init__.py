"""SQLAlchemy repository implementations."""

from fintrack.repositories.sqlalchemy.database import (
    build_engine,
    get_engine,
    get_session_factory,
    get_db,
    get_session,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from fintrack.repositories.sqlalchemy.position_repo import SqlAlchemyPositionRepository
from fintrack.repositories.sqlalchemy.valuation_repo import SqlAlchemyValuationRepository
from fintrack.repositories.sqlalchemy.operation_repo import SqlAlchemyOperationRepository
from fintrack.repositories.sqlalchemy.ledger_repo import SqlAlchemyLedgerRepository
from fintrack.repositories.sqlalchemy.credential_store import EncryptedCredentialStore
from fintrack.repositories.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

__all__ = [
    "build_engine",
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyPositionRepository",
    "SqlAlchemyValuationRepository",
    "SqlAlchemyOperationRepository",
    "SqlAlchemyLedgerRepository",
    "EncryptedCredentialStore",
    "SqlAlchemyUnitOfWork",
]
