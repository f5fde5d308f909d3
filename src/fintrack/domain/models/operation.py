"""Broker operation and operations-ledger models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fintrack.domain.models.enums import OperationKind


@dataclass
class Operation:
    """
    Trade event sourced from the broker's history.

    `operated_price` is denominated in the instrument's trading currency;
    resolve it to both currencies before applying it to a position.
    """

    operation_id: str
    date: datetime
    type: str
    symbol: str
    quantity: Decimal
    operated_price: Decimal

    @property
    def kind(self) -> OperationKind:
        return OperationKind.from_broker_tag(self.type)


@dataclass
class RecordedOperation:
    """Immutable audit entry of an applied operation, priced in both currencies."""

    operation_id: str
    date: datetime
    type: str
    symbol: str
    quantity: Decimal
    price_ars: Decimal
    price_usd: Decimal
    id: Optional[int] = field(default=None)
