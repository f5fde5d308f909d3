"""View models for broker data, reconciliation results and reports."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fintrack.domain.models import Currency, Operation, OperationKind, Position, ValuationSnapshot


@dataclass
class BrokerPosition:
    """Broker's view of one holding, already mirrored into both currencies."""

    symbol: str
    description: str
    type: str
    currency: Currency
    quantity: Decimal
    avg_cost_ars: Decimal
    avg_cost_usd: Decimal
    last_price_ars: Decimal
    last_price_usd: Decimal


@dataclass
class InstrumentInfo:
    """Instrument metadata used to price operations."""

    symbol: str
    currency: Currency
    type: str = ""
    description: str = ""


@dataclass
class SymbolFailure:
    """A per-symbol error contained during a reconciliation pass."""

    symbol: str
    code: str
    message: str


@dataclass
class PositionsPull:
    """Result of one broker positions request."""

    positions: list[BrokerPosition] = field(default_factory=list)
    failures: list[SymbolFailure] = field(default_factory=list)


@dataclass
class OperationsPull:
    """Result of one broker operations request; unparseable entries land in failures."""

    operations: list[Operation] = field(default_factory=list)
    failures: list[SymbolFailure] = field(default_factory=list)


@dataclass
class ReconciliationReport:
    """Aggregate outcome of a position sync (and optional snapshot)."""

    started_at: datetime
    inserted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    closed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    skipped_stale: list[str] = field(default_factory=list)
    failures: list[SymbolFailure] = field(default_factory=list)
    snapshot: Optional[ValuationSnapshot] = None
    operations: Optional["OperationSyncReport"] = None

    @property
    def is_partial(self) -> bool:
        """True when at least one symbol or operation could not be reconciled."""
        return bool(self.failures) or bool(self.operations and self.operations.failures)


@dataclass
class OperationOutcome:
    """Effect of applying one operation."""

    operation_id: str
    symbol: str
    kind: OperationKind
    position: Optional[Position] = None
    oversold: bool = False


@dataclass
class OperationSyncReport:
    """Aggregate outcome of replaying broker operations."""

    applied: list[OperationOutcome] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failures: list[SymbolFailure] = field(default_factory=list)

    @property
    def oversold(self) -> list[str]:
        return [o.operation_id for o in self.applied if o.oversold]


@dataclass
class PerformanceView:
    """Latest vs previous valuation comparison."""

    latest: Optional[ValuationSnapshot] = None
    previous: Optional[ValuationSnapshot] = None
    delta_ars: Optional[Decimal] = None
    delta_usd: Optional[Decimal] = None
    percent_ars: Optional[Decimal] = None
    percent_usd: Optional[Decimal] = None
