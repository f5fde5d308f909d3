"""
Pytest configuration and fixtures for the finance tracker tests.

This module provides:
- In-memory SQLite database fixtures
- A fixed clock and Buenos Aires time helpers
- Fake exchange rate provider and fake broker gateway
- Factory helpers for broker positions and operations
- Service and repository fixtures
- A FastAPI test client with overridden dependencies
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from fintrack.main import app
from fintrack.api import deps
from fintrack.config.settings import Settings, set_settings, reset_settings
from fintrack.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from fintrack.repositories.sqlalchemy import orm_models  # noqa: F401
from fintrack.repositories.sqlalchemy import (
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
    SymbolLockRegistry,
)
from fintrack.domain.models import Currency, ExchangeRate, Operation
from fintrack.domain.views import (
    BrokerPosition,
    InstrumentInfo,
    OperationsPull,
    PositionsPull,
    SymbolFailure,
)
from fintrack.core.exceptions import AuthenticationFailed, BrokerRequestFailed
from fintrack.core.timezone import LOCAL_TZ


# =============================================================================
# TIME HELPERS
# =============================================================================


def local_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in Buenos Aires time."""
    return LOCAL_TZ.localize(datetime(year, month, day, hour, minute, second))


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now' timestamp for deterministic tests."""
    return local_datetime(2024, 6, 15, 14, 30, 0)


@pytest.fixture
def clock(fixed_now) -> FixedClock:
    return FixedClock(fixed_now)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def test_session(session_factory) -> Session:
    """Create test database session."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# REPOSITORY FIXTURES
# =============================================================================


@pytest.fixture
def position_repo(test_session) -> SqlAlchemyPositionRepository:
    return SqlAlchemyPositionRepository(test_session)


@pytest.fixture
def valuation_repo(test_session) -> SqlAlchemyValuationRepository:
    return SqlAlchemyValuationRepository(test_session)


@pytest.fixture
def operation_repo(test_session) -> SqlAlchemyOperationRepository:
    return SqlAlchemyOperationRepository(test_session)


@pytest.fixture
def ledger_repo(test_session) -> SqlAlchemyLedgerRepository:
    return SqlAlchemyLedgerRepository(test_session)


@pytest.fixture
def unit_of_work(test_session) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(test_session)


# =============================================================================
# EXCHANGE RATE FIXTURES
# =============================================================================


def make_rate(
    buy: str = "1000",
    sell: str = "1050",
    updated_at: Optional[datetime] = None,
) -> ExchangeRate:
    """Build an ExchangeRate from string amounts."""
    return ExchangeRate(
        buy_rate=Decimal(buy),
        sell_rate=Decimal(sell),
        updated_at=updated_at or local_datetime(2024, 6, 15, 11, 0, 0),
    )


class FakeRateProvider:
    """
    Rate provider returning a configurable rate.

    Counts calls so tests can assert on cache hits. Set `error` to make
    every fetch fail.
    """

    def __init__(self, rate: Optional[ExchangeRate] = None, error: Optional[Exception] = None):
        self.rate = rate or make_rate()
        self.error = error
        self.calls = 0

    def fetch_rate(self) -> ExchangeRate:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.rate


@pytest.fixture
def rate_provider() -> FakeRateProvider:
    return FakeRateProvider()


@pytest.fixture
def rate_service(rate_provider, clock) -> ExchangeRateService:
    return ExchangeRateService(provider=rate_provider, clock=clock)


# =============================================================================
# BROKER FIXTURES
# =============================================================================


def broker_position(
    symbol: str,
    quantity: str,
    last_ars: str,
    last_usd: str,
    cost_ars: Optional[str] = None,
    cost_usd: Optional[str] = None,
    currency: Currency = Currency.LOCAL,
    instrument_type: str = "ACCIONES",
    description: str = "",
) -> BrokerPosition:
    """Build a broker-side position already mirrored into both currencies."""
    return BrokerPosition(
        symbol=symbol,
        description=description or symbol,
        type=instrument_type,
        currency=currency,
        quantity=Decimal(quantity),
        avg_cost_ars=Decimal(cost_ars or last_ars),
        avg_cost_usd=Decimal(cost_usd or last_usd),
        last_price_ars=Decimal(last_ars),
        last_price_usd=Decimal(last_usd),
    )


def make_operation(
    operation_id: str,
    tag: str,
    symbol: str,
    quantity: str,
    price: str,
    date: Optional[datetime] = None,
) -> Operation:
    """Build a broker operation with a raw broker tag (e.g. "Compra")."""
    return Operation(
        operation_id=operation_id,
        date=date or local_datetime(2024, 6, 14),
        type=tag,
        symbol=symbol,
        quantity=Decimal(quantity),
        operated_price=Decimal(price),
    )


class FakeBrokerGateway:
    """
    In-memory broker.

    Tests set `positions`, `failures`, `operations`, `operation_failures`
    and `instruments` directly; `pull_error` and `operations_error` make
    the positions or operations request itself fail.
    """

    def __init__(self):
        self.positions: list[BrokerPosition] = []
        self.failures: list[SymbolFailure] = []
        self.operations: list[Operation] = []
        self.operation_failures: list[SymbolFailure] = []
        self.instruments: dict[str, InstrumentInfo] = {}
        self.pull_error: Optional[Exception] = None
        self.operations_error: Optional[Exception] = None
        self.since_requests: list[Optional[datetime]] = []
        self.instrument_requests: list[str] = []
        self.authenticated = False
        self.valid_credentials = ("user", "secret")

    def get_positions(self) -> PositionsPull:
        if self.pull_error is not None:
            raise self.pull_error
        return PositionsPull(positions=list(self.positions), failures=list(self.failures))

    def get_operations(self, since: Optional[datetime] = None) -> OperationsPull:
        self.since_requests.append(since)
        if self.operations_error is not None:
            raise self.operations_error
        return OperationsPull(operations=list(self.operations), failures=list(self.operation_failures))

    def get_instrument_info(self, symbol: str) -> InstrumentInfo:
        self.instrument_requests.append(symbol)
        if symbol not in self.instruments:
            raise BrokerRequestFailed(f"Unknown instrument {symbol}", symbol=symbol)
        return self.instruments[symbol]

    def authenticate(self, username: str, password: str) -> None:
        if (username, password) != self.valid_credentials:
            raise AuthenticationFailed("Token request rejected with HTTP 400")
        self.authenticated = True

    def logout(self) -> None:
        self.authenticated = False

    def has_session(self) -> bool:
        return self.authenticated

    def close(self) -> None:
        pass


@pytest.fixture
def fake_broker() -> FakeBrokerGateway:
    return FakeBrokerGateway()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def symbol_locks() -> SymbolLockRegistry:
    return SymbolLockRegistry()


@pytest.fixture
def engine(
    position_repo,
    valuation_repo,
    operation_repo,
    unit_of_work,
    fake_broker,
    rate_service,
    symbol_locks,
    clock,
) -> ReconciliationEngine:
    """Provide a ReconciliationEngine with the clamp oversell policy."""
    return ReconciliationEngine(
        position_repo=position_repo,
        valuation_repo=valuation_repo,
        operation_repo=operation_repo,
        unit_of_work=unit_of_work,
        broker=fake_broker,
        rates=rate_service,
        locks=symbol_locks,
        clock=clock,
    )


@pytest.fixture
def queries(position_repo, valuation_repo, clock) -> PortfolioQueryService:
    return PortfolioQueryService(
        position_repo=position_repo,
        valuation_repo=valuation_repo,
        clock=clock,
    )


@pytest.fixture
def ledger_service(ledger_repo, rate_service, clock) -> LedgerService:
    return LedgerService(ledger_repo=ledger_repo, rates=rate_service, clock=clock)


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(session_factory, rate_service, fake_broker, tmp_path) -> TestClient:
    """Provide FastAPI test client with test database, fake broker and fake rates."""
    # Startup runs init_db against the settings' database; keep it in tmp_path
    set_settings(Settings(data_dir=tmp_path))
    reset_database()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_exchange_rate_service] = lambda: rate_service
    app.dependency_overrides[deps.get_broker_gateway] = lambda: fake_broker
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()
    reset_settings()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.0000001"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(actual - expected)
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"
