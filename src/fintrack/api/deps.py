"""Dependency injection for FastAPI."""

from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from fintrack.config.settings import get_settings
from fintrack.providers import BrokerGateway, DolarApiRateProvider
from fintrack.repositories.memory import InMemoryCredentialStore
from fintrack.repositories.protocols import CredentialStore
from fintrack.repositories.sqlalchemy.database import get_db, get_session_factory
from fintrack.repositories.sqlalchemy import (
    EncryptedCredentialStore,
    SqlAlchemyLedgerRepository,
    SqlAlchemyOperationRepository,
    SqlAlchemyPositionRepository,
    SqlAlchemyUnitOfWork,
    SqlAlchemyValuationRepository,
)
from fintrack.services import (
    ExchangeRateService,
    LedgerService,
    PortfolioQueryService,
    ReconciliationEngine,
    get_symbol_locks,
)

# Process-wide: the rate cache and the broker session outlive a request
_rate_provider: Optional[DolarApiRateProvider] = None
_rate_service: Optional[ExchangeRateService] = None
_broker_gateway: Optional[BrokerGateway] = None


def get_exchange_rate_service() -> ExchangeRateService:
    """Provide the shared ExchangeRateService."""
    global _rate_provider, _rate_service
    if _rate_service is None:
        settings = get_settings()
        _rate_provider = DolarApiRateProvider(
            url=settings.rate_provider_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
        _rate_service = ExchangeRateService(
            provider=_rate_provider,
            max_age_seconds=settings.exchange_rate_max_age_seconds,
        )
    return _rate_service


def build_credential_store() -> CredentialStore:
    """Encrypted store when a secret is configured, otherwise tokens live in memory."""
    secret = get_settings().token_encryption_secret
    if secret:
        return EncryptedCredentialStore(get_session_factory(), secret)
    return InMemoryCredentialStore()


def get_broker_gateway() -> BrokerGateway:
    """Provide the shared BrokerGateway."""
    global _broker_gateway
    if _broker_gateway is None:
        settings = get_settings()
        _broker_gateway = BrokerGateway(
            credential_store=build_credential_store(),
            rates=get_exchange_rate_service(),
            base_url=settings.broker_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
    return _broker_gateway


def close_clients() -> None:
    """Close HTTP clients and drop the shared instances."""
    global _rate_provider, _rate_service, _broker_gateway
    if _broker_gateway is not None:
        _broker_gateway.close()
    if _rate_provider is not None:
        _rate_provider.close()
    _rate_provider = None
    _rate_service = None
    _broker_gateway = None


def get_position_repo(db: Session = Depends(get_db)) -> SqlAlchemyPositionRepository:
    """Provide PositionRepository instance."""
    return SqlAlchemyPositionRepository(db)


def get_valuation_repo(db: Session = Depends(get_db)) -> SqlAlchemyValuationRepository:
    """Provide ValuationRepository instance."""
    return SqlAlchemyValuationRepository(db)


def get_operation_repo(db: Session = Depends(get_db)) -> SqlAlchemyOperationRepository:
    """Provide OperationRepository instance."""
    return SqlAlchemyOperationRepository(db)


def get_unit_of_work(db: Session = Depends(get_db)) -> SqlAlchemyUnitOfWork:
    """Provide the transaction boundary over the request session."""
    return SqlAlchemyUnitOfWork(db)


def get_ledger_repo(db: Session = Depends(get_db)) -> SqlAlchemyLedgerRepository:
    """Provide LedgerRepository instance."""
    return SqlAlchemyLedgerRepository(db)


def get_reconciliation_engine(
    position_repo: SqlAlchemyPositionRepository = Depends(get_position_repo),
    valuation_repo: SqlAlchemyValuationRepository = Depends(get_valuation_repo),
    operation_repo: SqlAlchemyOperationRepository = Depends(get_operation_repo),
    unit_of_work: SqlAlchemyUnitOfWork = Depends(get_unit_of_work),
    broker: BrokerGateway = Depends(get_broker_gateway),
    rates: ExchangeRateService = Depends(get_exchange_rate_service),
) -> ReconciliationEngine:
    """Provide ReconciliationEngine instance."""
    settings = get_settings()
    return ReconciliationEngine(
        position_repo=position_repo,
        valuation_repo=valuation_repo,
        operation_repo=operation_repo,
        unit_of_work=unit_of_work,
        broker=broker,
        rates=rates,
        locks=get_symbol_locks(),
        oversell_policy=settings.oversell_policy,
        refresh_rate_each_pass=settings.exchange_rate_refresh_each_pass,
    )


def get_portfolio_queries(
    position_repo: SqlAlchemyPositionRepository = Depends(get_position_repo),
    valuation_repo: SqlAlchemyValuationRepository = Depends(get_valuation_repo),
) -> PortfolioQueryService:
    """Provide PortfolioQueryService instance."""
    return PortfolioQueryService(position_repo=position_repo, valuation_repo=valuation_repo)


def get_ledger_service(
    ledger_repo: SqlAlchemyLedgerRepository = Depends(get_ledger_repo),
    rates: ExchangeRateService = Depends(get_exchange_rate_service),
) -> LedgerService:
    """Provide LedgerService instance."""
    return LedgerService(ledger_repo=ledger_repo, rates=rates)
