"""Pydantic schemas for portfolio endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from fintrack.domain.models.enums import OperationKind


class PositionResponse(BaseModel):
    """Response schema for a single tracked position."""

    model_config = {"from_attributes": True}

    symbol: str
    description: str
    type: str
    quantity: Decimal
    avg_cost_ars: Decimal
    avg_cost_usd: Decimal
    last_price_ars: Decimal
    last_price_usd: Decimal
    market_value_ars: Decimal
    market_value_usd: Decimal
    open_position: bool
    date: Optional[datetime] = None


class PositionListResponse(BaseModel):
    """Response schema for listing positions."""

    positions: list[PositionResponse]
    count: int


class ValuationResponse(BaseModel):
    """Response schema for a valuation snapshot."""

    model_config = {"from_attributes": True}

    id: Optional[int] = None
    total_value_ars: Decimal
    total_value_usd: Decimal
    date: datetime


class ValuationListResponse(BaseModel):
    valuations: list[ValuationResponse]
    count: int


class SymbolFailureResponse(BaseModel):
    """A symbol (or operation) that could not be processed."""

    model_config = {"from_attributes": True}

    symbol: str
    code: str
    message: str


class ReconciliationResponse(BaseModel):
    """Outcome of a refresh pass."""

    model_config = {"from_attributes": True}

    started_at: datetime
    inserted: list[str]
    updated: list[str]
    closed: list[str]
    unchanged: list[str]
    skipped_stale: list[str]
    failures: list[SymbolFailureResponse]
    snapshot: Optional[ValuationResponse] = None
    is_partial: bool


class OperationSyncRequest(BaseModel):
    """Request schema for replaying broker operations."""

    since: Optional[datetime] = Field(
        default=None,
        description="Only operations from this date on (default: newest recorded)",
    )


class OperationOutcomeResponse(BaseModel):
    model_config = {"from_attributes": True}

    operation_id: str
    symbol: str
    kind: OperationKind
    oversold: bool
    position: Optional[PositionResponse] = None


class OperationSyncResponse(BaseModel):
    """Outcome of an operations replay."""

    model_config = {"from_attributes": True}

    applied: list[OperationOutcomeResponse]
    skipped: list[str]
    failures: list[SymbolFailureResponse]
    oversold: list[str]


class PerformanceResponse(BaseModel):
    """Latest vs previous valuation."""

    model_config = {"from_attributes": True}

    latest: Optional[ValuationResponse] = None
    previous: Optional[ValuationResponse] = None
    delta_ars: Optional[Decimal] = None
    delta_usd: Optional[Decimal] = None
    percent_ars: Optional[Decimal] = None
    percent_usd: Optional[Decimal] = None
