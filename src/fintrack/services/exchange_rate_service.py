"""Exchange rate service: single-slot, single-flight cache over a rate provider."""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from fintrack.core.timezone import now_local
from fintrack.domain.models import ExchangeRate
from fintrack.providers.rate_provider import RateProvider

logger = logging.getLogger(__name__)


class ExchangeRateService:
    """
    Service for the buy/sell exchange rate.

    The first call fetches from the provider and caches the result; later
    calls are served from the cache until `invalidate()` is called or, when
    `max_age_seconds` is set, the cached value gets too old. A failed fetch
    leaves the cache empty so the next call retries.
    """

    def __init__(
        self,
        provider: RateProvider,
        max_age_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._provider = provider
        self._max_age = max_age_seconds
        self._clock = clock
        self._rate: Optional[ExchangeRate] = None
        self._fetched_at: Optional[datetime] = None
        self._lock = threading.Lock()

    def get_rate(self) -> ExchangeRate:
        """Return the cached rate, fetching it first if needed. Raises RateFetchFailed."""
        rate = self._cached()
        if rate is not None:
            return rate

        with self._lock:
            # Another caller may have populated the slot while we waited
            rate = self._cached()
            if rate is not None:
                return rate

            rate = self._provider.fetch_rate()
            self._rate = rate
            self._fetched_at = self._clock()
            logger.info(
                "Exchange rate cached: buy=%s sell=%s (updated %s)",
                rate.buy_rate,
                rate.sell_rate,
                rate.updated_at.isoformat(),
            )
            return rate

    def peek(self) -> Optional[ExchangeRate]:
        """Return the cached rate without fetching."""
        return self._cached()

    def invalidate(self) -> None:
        """Drop the cached rate; the next `get_rate()` fetches again."""
        with self._lock:
            self._rate = None
            self._fetched_at = None

    def _cached(self) -> Optional[ExchangeRate]:
        rate, fetched_at = self._rate, self._fetched_at
        if rate is None:
            return None
        if self._max_age is not None and fetched_at is not None:
            if (self._clock() - fetched_at).total_seconds() >= self._max_age:
                return None
        return rate
