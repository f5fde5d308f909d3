"""Application context for in-process service management.

Provides access to all services without HTTP, for scripts and scheduled
refreshes that run next to (or instead of) the API.
"""

import logging
from pathlib import Path
from typing import Optional

from fintrack.config.settings import Settings, set_settings, get_settings
from fintrack.core.exceptions import AppError, AuthenticationFailed
from fintrack.domain.views import OperationSyncReport, ReconciliationReport, SymbolFailure
from fintrack.providers import BrokerGateway, DolarApiRateProvider
from fintrack.repositories.memory import InMemoryCredentialStore
from fintrack.repositories.protocols import CredentialStore
from fintrack.repositories.sqlalchemy.database import (
    init_db_with_path,
    get_session,
    get_session_factory,
)
from fintrack.repositories.sqlalchemy import (
    EncryptedCredentialStore,
    SqlAlchemyPositionRepository,
    SqlAlchemyValuationRepository,
    SqlAlchemyOperationRepository,
    SqlAlchemyLedgerRepository,
    SqlAlchemyUnitOfWork,
)
from fintrack.services import (
    ExchangeRateService,
    LedgerService,
    PortfolioQueryService,
    ReconciliationEngine,
    get_symbol_locks,
)

logger = logging.getLogger(__name__)


class AppContext:
    """
    Application context providing in-process access to all services.

    The rate cache and the broker session live as long as the context;
    repositories and the services built on them share one session that
    `refresh_session()` replaces.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        self._data_dir = data_dir
        self._session = None
        self._initialized = False

        self._rate_provider: Optional[DolarApiRateProvider] = None
        self._rates: Optional[ExchangeRateService] = None
        self._broker: Optional[BrokerGateway] = None
        self._engine: Optional[ReconciliationEngine] = None
        self._queries: Optional[PortfolioQueryService] = None
        self._ledger_service: Optional[LedgerService] = None

    def initialize(self, data_dir: Optional[Path] = None, settings: Optional[Settings] = None) -> None:
        """
        Initialize or reinitialize the application with a data directory.

        Args:
            data_dir: Data directory path. Uses default if not provided.
            settings: Full settings to install instead of the defaults.
        """
        if data_dir:
            self._data_dir = data_dir

        settings = settings or Settings(data_dir=self._data_dir)
        set_settings(settings)

        init_db_with_path(settings.database_path)

        self.close()
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def data_dir(self) -> Path:
        """Get the current data directory."""
        return get_settings().get_data_dir()

    def _get_session(self):
        if self._session is None:
            self._session = get_session()
        return self._session

    def refresh_session(self) -> None:
        """Replace the database session (call after external changes)."""
        if self._session:
            self._session.close()
        self._session = get_session()
        self._engine = None
        self._queries = None
        self._ledger_service = None

    def _build_credential_store(self) -> CredentialStore:
        secret = get_settings().token_encryption_secret
        if secret:
            return EncryptedCredentialStore(get_session_factory(), secret)
        return InMemoryCredentialStore()

    # Long-lived services

    @property
    def rates(self) -> ExchangeRateService:
        """Get the ExchangeRateService instance."""
        if self._rates is None:
            settings = get_settings()
            self._rate_provider = DolarApiRateProvider(
                url=settings.rate_provider_url,
                timeout_seconds=settings.http_timeout_seconds,
            )
            self._rates = ExchangeRateService(
                provider=self._rate_provider,
                max_age_seconds=settings.exchange_rate_max_age_seconds,
            )
        return self._rates

    @property
    def broker(self) -> BrokerGateway:
        """Get the BrokerGateway instance."""
        if self._broker is None:
            settings = get_settings()
            self._broker = BrokerGateway(
                credential_store=self._build_credential_store(),
                rates=self.rates,
                base_url=settings.broker_base_url,
                timeout_seconds=settings.http_timeout_seconds,
            )
        return self._broker

    # Session-bound services

    @property
    def engine(self) -> ReconciliationEngine:
        """Get the ReconciliationEngine instance."""
        if self._engine is None:
            settings = get_settings()
            session = self._get_session()
            self._engine = ReconciliationEngine(
                position_repo=SqlAlchemyPositionRepository(session),
                valuation_repo=SqlAlchemyValuationRepository(session),
                operation_repo=SqlAlchemyOperationRepository(session),
                unit_of_work=SqlAlchemyUnitOfWork(session),
                broker=self.broker,
                rates=self.rates,
                locks=get_symbol_locks(),
                oversell_policy=settings.oversell_policy,
                refresh_rate_each_pass=settings.exchange_rate_refresh_each_pass,
            )
        return self._engine

    @property
    def queries(self) -> PortfolioQueryService:
        """Get the PortfolioQueryService instance."""
        if self._queries is None:
            session = self._get_session()
            self._queries = PortfolioQueryService(
                position_repo=SqlAlchemyPositionRepository(session),
                valuation_repo=SqlAlchemyValuationRepository(session),
            )
        return self._queries

    @property
    def ledger(self) -> LedgerService:
        """Get the LedgerService instance."""
        if self._ledger_service is None:
            self._ledger_service = LedgerService(
                ledger_repo=SqlAlchemyLedgerRepository(self._get_session()),
                rates=self.rates,
            )
        return self._ledger_service

    def refresh_portfolio(self, sync_operations: bool = True) -> ReconciliationReport:
        """
        One refresh cycle as run by a timer.

        Replays new broker operations first (when asked), then reconciles
        prices and appends a snapshot. A failed operations request is logged
        and reported in `report.operations`; prices and the snapshot still
        run. Authentication failures propagate.
        """
        operations: Optional[OperationSyncReport] = None
        if sync_operations:
            try:
                operations = self.engine.sync_operations()
            except AuthenticationFailed:
                raise
            except AppError as exc:
                logger.warning(
                    "Operation sync failed, reconciling prices anyway: [%s] %s",
                    exc.code,
                    exc.message,
                )
                operations = OperationSyncReport()
                # The whole request failed, not one symbol
                operations.failures.append(
                    SymbolFailure(symbol="*", code=exc.code, message=f"operations sync: {exc.message}")
                )

        report = self.engine.reconcile()
        report.operations = operations
        return report

    def close(self) -> None:
        """Clean up resources."""
        if self._session:
            self._session.close()
            self._session = None
        if self._broker is not None:
            self._broker.close()
        if self._rate_provider is not None:
            self._rate_provider.close()
        self._rate_provider = None
        self._rates = None
        self._broker = None
        self._engine = None
        self._queries = None
        self._ledger_service = None


# Global application context
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: AppContext) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
