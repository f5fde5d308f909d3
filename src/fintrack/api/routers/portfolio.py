"""Portfolio reconciliation and valuation endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from fintrack.api.deps import get_portfolio_queries, get_reconciliation_engine
from fintrack.api.schemas import (
    OperationSyncRequest,
    OperationSyncResponse,
    PerformanceResponse,
    PositionListResponse,
    PositionResponse,
    ReconciliationResponse,
    ValuationListResponse,
    ValuationResponse,
)
from fintrack.core.exceptions import NotFoundError
from fintrack.services import PortfolioQueryService, ReconciliationEngine

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("/positions", response_model=PositionListResponse)
def list_positions(
    queries: PortfolioQueryService = Depends(get_portfolio_queries),
) -> PositionListResponse:
    """All tracked positions, open and closed, ordered by symbol."""
    positions = queries.get_all_positions()
    return PositionListResponse(
        positions=[PositionResponse.model_validate(p) for p in positions],
        count=len(positions),
    )


@router.post("/refresh", response_model=ReconciliationResponse)
def refresh_portfolio(
    snapshot: bool = Query(True, description="Append a valuation snapshot after the sync"),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> ReconciliationResponse:
    """
    Run a reconciliation pass against the broker.

    Per-symbol failures are reported in `failures` (and `is_partial`);
    a failing broker pull or an expired session fails the whole request.
    """
    report = engine.reconcile(take_snapshot=snapshot)
    return ReconciliationResponse.model_validate(report)


@router.post("/operations/sync", response_model=OperationSyncResponse)
def sync_operations(
    data: Optional[OperationSyncRequest] = None,
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> OperationSyncResponse:
    """Replay finished broker operations not yet recorded."""
    since = data.since if data else None
    return OperationSyncResponse.model_validate(engine.sync_operations(since=since))


@router.post("/snapshots", response_model=ValuationResponse, status_code=201)
def create_snapshot(
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> ValuationResponse:
    """Append a valuation snapshot of the positions as they are now."""
    return ValuationResponse.model_validate(engine.snapshot_value())


@router.get("/valuations/latest", response_model=ValuationResponse)
def get_latest_valuation(
    queries: PortfolioQueryService = Depends(get_portfolio_queries),
) -> ValuationResponse:
    latest = queries.get_latest_valuation()
    if latest is None:
        raise NotFoundError("Valuation", "latest")
    return ValuationResponse.model_validate(latest)


@router.get("/valuations/previous", response_model=ValuationResponse)
def get_previous_valuation(
    queries: PortfolioQueryService = Depends(get_portfolio_queries),
) -> ValuationResponse:
    previous = queries.get_previous_valuation()
    if previous is None:
        raise NotFoundError("Valuation", "previous")
    return ValuationResponse.model_validate(previous)


@router.get("/valuations/history", response_model=ValuationListResponse)
def list_valuations(
    limit: int = Query(30, ge=1, le=1000),
    queries: PortfolioQueryService = Depends(get_portfolio_queries),
) -> ValuationListResponse:
    """Valuation history, newest first."""
    valuations = queries.list_valuations(limit=limit)
    return ValuationListResponse(
        valuations=[ValuationResponse.model_validate(v) for v in valuations],
        count=len(valuations),
    )


@router.get("/performance", response_model=PerformanceResponse)
def get_performance(
    queries: PortfolioQueryService = Depends(get_portfolio_queries),
) -> PerformanceResponse:
    """Change between the latest and previous valuation in both currencies."""
    return PerformanceResponse.model_validate(queries.get_performance())
