"""Valuation snapshot domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from fintrack.domain.models.position import Position


@dataclass(frozen=True)
class ValuationSnapshot:
    """Point-in-time total portfolio value. Immutable once written."""

    total_value_ars: Decimal
    total_value_usd: Decimal
    date: datetime
    id: Optional[int] = field(default=None)

    @classmethod
    def from_positions(cls, positions: Iterable[Position], date: datetime) -> "ValuationSnapshot":
        """Sum quantity x last price over the given positions, open or closed."""
        total_ars = Decimal("0")
        total_usd = Decimal("0")
        for position in positions:
            total_ars += position.market_value_ars
            total_usd += position.market_value_usd
        return cls(total_value_ars=total_ars, total_value_usd=total_usd, date=date)
