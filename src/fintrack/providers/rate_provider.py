"""Exchange rate provider protocol and the dolarapi.com implementation."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Protocol

import httpx

from fintrack.core.exceptions import RateFetchFailed
from fintrack.core.timezone import parse_datetime_local
from fintrack.domain.models import ExchangeRate

logger = logging.getLogger(__name__)


class RateProvider(Protocol):
    """
    Protocol for exchange rate providers.

    Implementations perform one network round trip per call and raise
    RateFetchFailed on any failure; caching is the caller's concern.
    """

    def fetch_rate(self) -> ExchangeRate:
        ...


def _positive_decimal(payload: dict[str, Any], key: str) -> Decimal:
    raw = payload.get(key)
    if raw is None:
        raise RateFetchFailed(f"Rate provider response missing '{key}'")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise RateFetchFailed(f"Rate provider returned non-numeric '{key}': {raw!r}") from exc
    if not value.is_finite() or value <= 0:
        raise RateFetchFailed(f"Rate provider returned non-positive '{key}': {raw!r}")
    return value


def parse_rate_payload(payload: Any) -> ExchangeRate:
    """Map a `{compra, venta, fechaActualizacion}` document to an ExchangeRate."""
    if not isinstance(payload, dict):
        raise RateFetchFailed("Rate provider response is not an object")

    updated_raw = payload.get("fechaActualizacion")
    if not updated_raw:
        raise RateFetchFailed("Rate provider response missing 'fechaActualizacion'")
    try:
        updated_at = parse_datetime_local(str(updated_raw))
    except (ValueError, OverflowError) as exc:
        raise RateFetchFailed(f"Unparseable rate timestamp: {updated_raw!r}") from exc

    return ExchangeRate(
        buy_rate=_positive_decimal(payload, "compra"),
        sell_rate=_positive_decimal(payload, "venta"),
        updated_at=updated_at,
    )


class DolarApiRateProvider:
    """Fetches the MEP ("bolsa") dollar quote from dolarapi.com."""

    def __init__(
        self,
        url: str = "https://dolarapi.com/v1/dolares/bolsa",
        timeout_seconds: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self._url = url
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def fetch_rate(self) -> ExchangeRate:
        try:
            response = self._client.get(self._url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            logger.error("Error fetching exchange rate from %s: %s", self._url, exc)
            raise RateFetchFailed(f"Exchange rate request failed: {exc}") from exc
        except ValueError as exc:
            raise RateFetchFailed("Exchange rate response is not JSON") from exc

        rate = parse_rate_payload(payload)
        logger.debug("Fetched exchange rate buy=%s sell=%s", rate.buy_rate, rate.sell_rate)
        return rate

    def close(self) -> None:
        self._client.close()
