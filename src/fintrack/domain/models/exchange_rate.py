"""Exchange rate value object."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class ExchangeRate:
    """
    Buy/sell quote of the reference currency in local currency units.

    Never persisted; lives in the ExchangeRateService cache.
    """

    buy_rate: Decimal
    sell_rate: Decimal
    updated_at: datetime
