"""Position domain model."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Position:
    """
    Locally tracked holding of one symbol.

    Average costs are only recomputed on buys; sells and price syncs
    leave them untouched. Closed positions (no longer reported by the
    broker) are retained with their last quantity and cost.
    """

    symbol: str
    quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    avg_cost_ars: Decimal = field(default_factory=lambda: Decimal("0"))
    avg_cost_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    last_price_ars: Decimal = field(default_factory=lambda: Decimal("0"))
    last_price_usd: Decimal = field(default_factory=lambda: Decimal("0"))
    description: str = ""
    type: str = ""
    open_position: bool = True
    date: Optional[datetime] = field(default=None)

    @property
    def market_value_ars(self) -> Decimal:
        return self.quantity * self.last_price_ars

    @property
    def market_value_usd(self) -> Decimal:
        return self.quantity * self.last_price_usd
