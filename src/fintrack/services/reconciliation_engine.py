"""Reconciliation engine: merges broker state into the local portfolio store."""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, Literal, Optional

from fintrack.core.exceptions import (
    AppError,
    AuthenticationFailed,
    OversellDetected,
    ValidationError,
)
from fintrack.core.timezone import now_local
from fintrack.domain.conversion import descale_cents, mirror_trade_price, to_storage_scale
from fintrack.domain.models import (
    Operation,
    OperationKind,
    Position,
    RecordedOperation,
    ValuationSnapshot,
)
from fintrack.domain.views import (
    BrokerPosition,
    InstrumentInfo,
    OperationOutcome,
    OperationSyncReport,
    ReconciliationReport,
    SymbolFailure,
)
from fintrack.providers.broker_gateway import BrokerSource
from fintrack.repositories.protocols import (
    OperationRepository,
    PositionRepository,
    UnitOfWork,
    ValuationRepository,
)
from fintrack.services.exchange_rate_service import ExchangeRateService
from fintrack.services.symbol_locks import SymbolLockRegistry, get_symbol_locks

logger = logging.getLogger(__name__)

OversellPolicy = Literal["clamp", "reject"]

_ZERO = Decimal("0")


class ReconciliationEngine:
    """
    Engine that keeps the local portfolio in step with the broker.

    Phase 1 (`refresh_positions`) merges broker-reported holdings into the
    position store; `apply_operation` folds individual trades into the cost
    basis; Phase 2 (`snapshot_value`) appends a valuation snapshot.
    `reconcile` runs a full cycle.

    Broker data only ever overwrites last prices. Quantity and average cost
    change through operations alone, and average cost only on buys.
    """

    def __init__(
        self,
        position_repo: PositionRepository,
        valuation_repo: ValuationRepository,
        operation_repo: OperationRepository,
        unit_of_work: UnitOfWork,
        broker: BrokerSource,
        rates: ExchangeRateService,
        locks: Optional[SymbolLockRegistry] = None,
        oversell_policy: OversellPolicy = "clamp",
        refresh_rate_each_pass: bool = True,
        clock: Callable[[], datetime] = now_local,
    ):
        if oversell_policy not in ("clamp", "reject"):
            raise ValueError(f"Unknown oversell policy: {oversell_policy}")
        self._positions = position_repo
        self._valuations = valuation_repo
        self._operations = operation_repo
        self._unit_of_work = unit_of_work
        self._broker = broker
        self._rates = rates
        self._locks = locks or get_symbol_locks()
        self._oversell_policy = oversell_policy
        self._refresh_rate_each_pass = refresh_rate_each_pass
        self._clock = clock

    # Full cycle

    def reconcile(self, take_snapshot: bool = True) -> ReconciliationReport:
        """Refresh the rate (if configured), sync positions, then snapshot."""
        if self._refresh_rate_each_pass:
            self._rates.invalidate()

        report = self.refresh_positions()
        if take_snapshot:
            report.snapshot = self.snapshot_value()

        logger.info(
            "Reconciliation done: %d inserted, %d updated, %d closed, %d unchanged, "
            "%d stale, %d failed",
            len(report.inserted),
            len(report.updated),
            len(report.closed),
            len(report.unchanged),
            len(report.skipped_stale),
            len(report.failures),
        )
        return report

    # Phase 1

    def refresh_positions(self) -> ReconciliationReport:
        """
        Merge the broker's current holdings into the position store.

        New symbols are inserted with the broker's quantity and cost; known
        symbols get their last prices overwritten and are marked open; local
        symbols the broker no longer reports are marked closed. A failing
        broker pull raises, since nothing can be merged.
        """
        report = ReconciliationReport(started_at=self._clock())
        pull = self._broker.get_positions()
        report.failures.extend(pull.failures)

        reported: set[str] = set()
        for broker_pos in pull.positions:
            reported.add(broker_pos.symbol)
            self._contain(report, broker_pos.symbol, self._merge_one, broker_pos, report)

        # A symbol that failed to parse was reported, just not usable
        failed = {f.symbol for f in pull.failures}
        for position in self._positions.list_all():
            if position.symbol in reported or position.symbol in failed:
                continue
            self._contain(report, position.symbol, self._close_one, position.symbol, report)

        return report

    def _merge_one(self, broker_pos: BrokerPosition, report: ReconciliationReport) -> None:
        symbol = broker_pos.symbol
        last_ars = to_storage_scale(broker_pos.last_price_ars)
        last_usd = to_storage_scale(broker_pos.last_price_usd)

        with self._locks.hold(symbol):
            existing = self._positions.get(symbol)
            if existing is None:
                self._positions.add(
                    Position(
                        symbol=symbol,
                        description=broker_pos.description,
                        type=broker_pos.type,
                        quantity=to_storage_scale(broker_pos.quantity),
                        avg_cost_ars=to_storage_scale(broker_pos.avg_cost_ars),
                        avg_cost_usd=to_storage_scale(broker_pos.avg_cost_usd),
                        last_price_ars=last_ars,
                        last_price_usd=last_usd,
                        open_position=True,
                        date=self._clock(),
                    )
                )
                report.inserted.append(symbol)
                return

            if self._is_stale(existing, report.started_at):
                logger.info("Skipping stale price write for %s", symbol)
                report.skipped_stale.append(symbol)
                return

            updated = replace(
                existing,
                last_price_ars=last_ars,
                last_price_usd=last_usd,
                open_position=True,
                description=existing.description or broker_pos.description,
                type=existing.type or broker_pos.type,
            )
            if updated == existing:
                report.unchanged.append(symbol)
                return

            updated.date = self._clock()
            self._positions.update(updated)
            report.updated.append(symbol)

    def _close_one(self, symbol: str, report: ReconciliationReport) -> None:
        with self._locks.hold(symbol):
            existing = self._positions.get(symbol)
            if existing is None or not existing.open_position:
                report.unchanged.append(symbol)
                return
            if self._is_stale(existing, report.started_at):
                report.skipped_stale.append(symbol)
                return
            self._positions.update(replace(existing, open_position=False, date=self._clock()))
            report.closed.append(symbol)
            logger.info("Position %s no longer reported by broker, marked closed", symbol)

    @staticmethod
    def _is_stale(position: Position, started_at: datetime) -> bool:
        # Someone wrote the row after this pass started; their write wins
        return position.date is not None and position.date > started_at

    @staticmethod
    def _contain(report: ReconciliationReport, symbol: str, fn, *args) -> None:
        try:
            fn(*args)
        except AuthenticationFailed:
            raise
        except AppError as exc:
            logger.warning("Reconciliation of %s failed: [%s] %s", symbol, exc.code, exc.message)
            report.failures.append(SymbolFailure(symbol=symbol, code=exc.code, message=exc.message))

    # Phase 1b

    def apply_operation(
        self,
        operation: Operation,
        price_ars: Decimal,
        price_usd: Decimal,
    ) -> OperationOutcome:
        """
        Fold one executed operation into its position and record it.

        Buys recompute the weighted-average cost in both currencies and set
        the last price to the trade price. Sells reduce quantity (never below
        zero) and leave average cost and last price as they are. Other
        operation kinds only reach the operations ledger.

        The ledger row and the position write commit together: if either
        fails neither is kept, so a later sync retries the operation.
        """
        kind = operation.kind
        if kind is not OperationKind.OTHER and operation.quantity <= 0:
            raise ValidationError(
                f"Operation {operation.operation_id} has non-positive quantity {operation.quantity}"
            )
        if price_ars < 0 or price_usd < 0:
            raise ValidationError(f"Operation {operation.operation_id} has a negative price")

        price_ars = to_storage_scale(price_ars)
        price_usd = to_storage_scale(price_usd)
        outcome = OperationOutcome(
            operation_id=operation.operation_id,
            symbol=operation.symbol,
            kind=kind,
        )

        with self._locks.hold(operation.symbol):
            existing = self._positions.get(operation.symbol)
            new_position: Optional[Position] = None

            if kind is OperationKind.BUY:
                new_position = self._bought(existing, operation, price_ars, price_usd)
            elif kind is OperationKind.SELL:
                if existing is None:
                    logger.info(
                        "Sell %s for untracked symbol %s, position unchanged",
                        operation.operation_id,
                        operation.symbol,
                    )
                else:
                    new_position, outcome.oversold = self._sold(existing, operation)

            with self._unit_of_work.atomic(f"apply operation {operation.operation_id}"):
                # Ledger first: its unique operation_id keeps a replay from applying twice
                self._operations.record(
                    RecordedOperation(
                        operation_id=operation.operation_id,
                        date=operation.date,
                        type=operation.type,
                        symbol=operation.symbol,
                        quantity=operation.quantity,
                        price_ars=price_ars,
                        price_usd=price_usd,
                    ),
                    commit=False,
                )
                if new_position is not None:
                    if existing is None:
                        outcome.position = self._positions.add(new_position, commit=False)
                    else:
                        outcome.position = self._positions.update(new_position, commit=False)

        logger.info(
            "Applied %s %s %s x %s",
            kind.value,
            operation.operation_id,
            operation.symbol,
            operation.quantity,
        )
        return outcome

    def _bought(
        self,
        existing: Optional[Position],
        operation: Operation,
        price_ars: Decimal,
        price_usd: Decimal,
    ) -> Position:
        dq = operation.quantity
        if existing is None:
            return Position(
                symbol=operation.symbol,
                quantity=dq,
                avg_cost_ars=price_ars,
                avg_cost_usd=price_usd,
                last_price_ars=price_ars,
                last_price_usd=price_usd,
                open_position=True,
                date=self._clock(),
            )

        q = existing.quantity
        total = q + dq
        return replace(
            existing,
            quantity=total,
            avg_cost_ars=to_storage_scale((q * existing.avg_cost_ars + dq * price_ars) / total),
            avg_cost_usd=to_storage_scale((q * existing.avg_cost_usd + dq * price_usd) / total),
            last_price_ars=price_ars,
            last_price_usd=price_usd,
            open_position=True,
            date=self._clock(),
        )

    def _sold(self, existing: Position, operation: Operation) -> tuple[Position, bool]:
        dq = operation.quantity
        oversold = dq > existing.quantity
        if oversold:
            if self._oversell_policy == "reject":
                raise OversellDetected(operation.symbol, str(dq), str(existing.quantity))
            logger.warning(
                "Oversell in %s: selling %s of %s held, clamping to zero",
                operation.operation_id,
                dq,
                existing.quantity,
            )
        remaining = max(_ZERO, existing.quantity - dq)
        return replace(existing, quantity=remaining, date=self._clock()), oversold

    def resolve_operation_prices(
        self,
        operation: Operation,
        info: Optional[InstrumentInfo] = None,
    ) -> tuple[Decimal, Decimal]:
        """Price an operation in (ARS, USD) from its instrument's trading currency."""
        if info is None:
            info = self._broker.get_instrument_info(operation.symbol)
        rate = self._rates.get_rate()
        price = descale_cents(operation.operated_price, info.type, info.currency)
        return mirror_trade_price(price, info.currency, rate)

    def sync_operations(self, since: Optional[datetime] = None) -> OperationSyncReport:
        """
        Replay finished broker operations not yet in the operations ledger.

        Defaults to operations since the newest recorded one. Already recorded
        operations are skipped, the rest are applied oldest first; a failure
        on one operation is logged and reported without stopping the others.
        Operations the broker sent but that could not be parsed are reported
        as failures too.
        """
        if since is None:
            since = self._operations.latest_date()
        pull = self._broker.get_operations(since)

        report = OperationSyncReport()
        report.failures.extend(pull.failures)
        instruments: dict[str, InstrumentInfo] = {}
        for operation in sorted(pull.operations, key=lambda o: (o.date, o.operation_id)):
            if self._operations.exists(operation.operation_id):
                report.skipped.append(operation.operation_id)
                continue
            try:
                info = instruments.get(operation.symbol)
                if info is None:
                    info = self._broker.get_instrument_info(operation.symbol)
                    instruments[operation.symbol] = info
                price_ars, price_usd = self.resolve_operation_prices(operation, info)
                report.applied.append(self.apply_operation(operation, price_ars, price_usd))
            except AuthenticationFailed:
                raise
            except AppError as exc:
                logger.warning(
                    "Operation %s (%s) failed: [%s] %s",
                    operation.operation_id,
                    operation.symbol,
                    exc.code,
                    exc.message,
                )
                report.failures.append(
                    SymbolFailure(
                        symbol=operation.symbol,
                        code=exc.code,
                        message=f"operation {operation.operation_id}: {exc.message}",
                    )
                )

        logger.info(
            "Operation sync: %d applied, %d skipped, %d failed",
            len(report.applied),
            len(report.skipped),
            len(report.failures),
        )
        return report

    # Phase 2

    def snapshot_value(self) -> ValuationSnapshot:
        """
        Append a snapshot of the whole portfolio's value.

        Sums quantity x last price over every position, open or closed. A
        write failure raises StoreWriteFailed.
        """
        snapshot = self._valuations.append(
            ValuationSnapshot.from_positions(self._positions.list_all(), self._clock())
        )
        logger.info(
            "Valuation snapshot: ARS %s / USD %s",
            snapshot.total_value_ars,
            snapshot.total_value_usd,
        )
        return snapshot
