"""Brokerage API gateway (InvertirOnline REST API)."""

import logging
import threading
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Protocol

import httpx

from fintrack.core.exceptions import AuthenticationFailed, BrokerRequestFailed
from fintrack.core.timezone import parse_datetime_local, to_local
from fintrack.domain.conversion import descale_cents, mirror_quote
from fintrack.domain.models import Currency, ExchangeRate, Operation
from fintrack.domain.views import (
    BrokerPosition,
    InstrumentInfo,
    OperationsPull,
    PositionsPull,
    SymbolFailure,
)
from fintrack.repositories.protocols import CredentialStore

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "broker.access_token"
REFRESH_TOKEN_KEY = "broker.refresh_token"

PORTFOLIO_PATH = "/api/v2/portafolio/argentina"
OPERATIONS_PATH = "/api/v2/operaciones"
INSTRUMENT_PATH = "/api/v2/bCBA/Titulos/{symbol}"
TOKEN_PATH = "/token"


class RateSource(Protocol):
    """Anything that can hand out the current exchange rate."""

    def get_rate(self) -> ExchangeRate:
        ...


class BrokerSource(Protocol):
    """Read side of the brokerage consumed by the reconciliation engine."""

    def get_positions(self) -> PositionsPull:
        ...

    def get_operations(self, since: Optional[datetime] = None) -> OperationsPull:
        ...

    def get_instrument_info(self, symbol: str) -> InstrumentInfo:
        ...


def _dec(value: Any, field_name: str) -> Decimal:
    if value is None:
        raise ValueError(f"missing '{field_name}'")
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"non-numeric '{field_name}': {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"non-finite '{field_name}'")
    return result


class BrokerGateway:
    """
    Authenticated read access to the brokerage.

    Keeps a bearer token in memory and the access/refresh pair in the
    credential store. Every authenticated call first refreshes an expired
    access token with the stored refresh token; a missing refresh token or a
    rejected refresh raises AuthenticationFailed and is not retried.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        rates: RateSource,
        base_url: str = "https://api.invertironline.com",
        timeout_seconds: float = 10.0,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._store = credential_store
        self._rates = rates
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout_seconds)
        self._clock = clock
        self._access_token: Optional[str] = None
        self._access_token_expiry: float = 0.0
        self._token_lock = threading.Lock()

    # Session management

    def authenticate(self, username: str, password: str) -> None:
        """Exchange credentials for a token pair. Credentials are not stored."""
        payload = self._request_token(
            {"username": username, "password": password, "grant_type": "password"}
        )
        with self._token_lock:
            self._set_token_data(payload)
        logger.info("Authenticated against broker")

    def logout(self) -> None:
        """Forget the session and delete stored tokens."""
        with self._token_lock:
            self._access_token = None
            self._access_token_expiry = 0.0
            self._store.delete(ACCESS_TOKEN_KEY)
            self._store.delete(REFRESH_TOKEN_KEY)
        logger.info("Logged out from broker")

    def has_session(self) -> bool:
        """True if a refresh token is available (possibly from a previous run)."""
        return bool(self._access_token) or bool(self._store.get(REFRESH_TOKEN_KEY))

    def close(self) -> None:
        self._client.close()

    # Read operations

    def get_positions(self) -> PositionsPull:
        """
        Fetch current holdings mirrored into both currencies.

        Holdings that fail to parse or convert are reported in
        `PositionsPull.failures` instead of aborting the whole pull.
        """
        payload = self._get(PORTFOLIO_PATH)
        if not isinstance(payload, dict) or not isinstance(payload.get("activos"), list):
            raise BrokerRequestFailed("Portfolio response missing 'activos'")

        rate = self._rates.get_rate()
        pull = PositionsPull()
        for activo in payload["activos"]:
            symbol = self._symbol_of(activo)
            try:
                pull.positions.append(self._parse_holding(activo, rate))
            except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
                logger.warning("Skipping malformed holding %s: %s", symbol, exc)
                pull.failures.append(
                    SymbolFailure(symbol=symbol, code="BROKER_PAYLOAD_INVALID", message=str(exc))
                )
        return pull

    def get_operations(self, since: Optional[datetime] = None) -> OperationsPull:
        """
        Fetch finished operations, optionally only those from `since` on.

        Entries that fail to parse are reported in `OperationsPull.failures`
        with their operation number, so they are not lost silently.
        """
        params = {"filtro.estado": "terminadas", "filtro.pais": "argentina"}
        if since is not None:
            params["filtro.fechaDesde"] = to_local(since).strftime("%Y-%m-%d")

        payload = self._get(OPERATIONS_PATH, params=params)
        if isinstance(payload, dict):
            payload = payload.get("operaciones")
        if not isinstance(payload, list):
            raise BrokerRequestFailed("Operations response is not a list")

        pull = OperationsPull()
        for raw in payload:
            try:
                pull.operations.append(self._parse_operation(raw))
            except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
                number = raw.get("numero", "?") if isinstance(raw, dict) else "?"
                logger.warning("Skipping malformed operation %s: %s", number, exc)
                pull.failures.append(
                    SymbolFailure(
                        symbol=self._operation_symbol_of(raw),
                        code="BROKER_PAYLOAD_INVALID",
                        message=f"operation {number}: {exc}",
                    )
                )
        return pull

    def get_instrument_info(self, symbol: str) -> InstrumentInfo:
        """Fetch instrument metadata (trading currency, type)."""
        payload = self._get(INSTRUMENT_PATH.format(symbol=symbol), symbol=symbol)
        if not isinstance(payload, dict) or not payload.get("moneda"):
            raise BrokerRequestFailed(f"Instrument info for {symbol} has no currency", symbol=symbol)
        return InstrumentInfo(
            symbol=symbol,
            currency=Currency.from_broker_tag(payload["moneda"]),
            type=payload.get("tipo") or "",
            description=payload.get("descripcion") or "",
        )

    # Parsing

    @staticmethod
    def _symbol_of(activo: Any) -> str:
        try:
            return str(activo["titulo"]["simbolo"])
        except (KeyError, TypeError):
            return "?"

    @staticmethod
    def _operation_symbol_of(raw: Any) -> str:
        if not isinstance(raw, dict):
            return "?"
        symbol = raw.get("simbolo")
        if not symbol and isinstance(raw.get("titulo"), dict):
            symbol = raw["titulo"].get("simbolo")
        return str(symbol) if symbol else "?"

    @staticmethod
    def _parse_holding(activo: dict[str, Any], rate: ExchangeRate) -> BrokerPosition:
        titulo = activo["titulo"]
        currency = Currency.from_broker_tag(titulo["moneda"])
        instrument_type = titulo.get("tipo") or ""

        cost = descale_cents(_dec(activo.get("ppc"), "ppc"), instrument_type, currency)
        last = descale_cents(_dec(activo.get("ultimoPrecio"), "ultimoPrecio"), instrument_type, currency)
        cost_ars, cost_usd = mirror_quote(cost, currency, rate)
        last_ars, last_usd = mirror_quote(last, currency, rate)

        return BrokerPosition(
            symbol=str(titulo["simbolo"]),
            description=titulo.get("descripcion") or "",
            type=instrument_type,
            currency=currency,
            quantity=_dec(activo.get("cantidad"), "cantidad"),
            avg_cost_ars=cost_ars,
            avg_cost_usd=cost_usd,
            last_price_ars=last_ars,
            last_price_usd=last_usd,
        )

    @classmethod
    def _parse_operation(cls, raw: dict[str, Any]) -> Operation:
        symbol = cls._operation_symbol_of(raw)
        if symbol == "?":
            raise ValueError("missing 'simbolo'")

        # Executed fields win over the order fields
        date_raw = raw.get("fechaOperada") or raw.get("fechaOrden")
        if not date_raw:
            raise ValueError("missing operation date")
        quantity = raw.get("cantidadOperada")
        if quantity is None:
            quantity = raw.get("cantidad")
        price = raw.get("precioOperado")
        if price is None:
            price = raw.get("precio")

        return Operation(
            operation_id=str(raw["numero"]),
            date=parse_datetime_local(str(date_raw)),
            type=str(raw.get("tipo") or ""),
            symbol=str(symbol),
            quantity=_dec(quantity, "cantidadOperada"),
            operated_price=_dec(price, "precioOperado"),
        )

    # HTTP plumbing

    def _get(self, path: str, params: Optional[dict[str, str]] = None, symbol: Optional[str] = None) -> Any:
        token = self._ensure_token()
        try:
            response = self._client.get(
                path,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Broker request %s failed: %s", path, exc)
            raise BrokerRequestFailed(f"Request to {path} failed: {exc}", symbol=symbol) from exc

        if response.status_code == 401:
            raise AuthenticationFailed(f"Broker rejected the session on {path}")
        if response.status_code >= 400:
            raise BrokerRequestFailed(
                f"Request to {path} returned HTTP {response.status_code}",
                symbol=symbol,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise BrokerRequestFailed(f"Response from {path} is not JSON", symbol=symbol) from exc

    def _ensure_token(self) -> str:
        with self._token_lock:
            if self._access_token and self._clock() < self._access_token_expiry:
                return self._access_token
            self._refresh()
            return self._access_token

    def _refresh(self) -> None:
        refresh_token = self._store.get(REFRESH_TOKEN_KEY)
        if not refresh_token:
            raise AuthenticationFailed("No refresh token stored; please log in")
        logger.info("Access token expired, refreshing")
        payload = self._request_token(
            {"refresh_token": refresh_token, "grant_type": "refresh_token"}
        )
        self._set_token_data(payload)

    def _request_token(self, form: dict[str, str]) -> dict[str, Any]:
        try:
            response = self._client.post(TOKEN_PATH, data=form)
        except httpx.HTTPError as exc:
            logger.error("Token request failed: %s", exc)
            raise AuthenticationFailed(f"Token request failed: {exc}") from exc
        if response.status_code >= 400:
            raise AuthenticationFailed(f"Token request rejected with HTTP {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise AuthenticationFailed("Token response is not JSON") from exc
        if not isinstance(payload, dict) or not payload.get("access_token") or not payload.get("refresh_token"):
            raise AuthenticationFailed("Token response missing tokens")
        return payload

    def _set_token_data(self, payload: dict[str, Any]) -> None:
        try:
            expires_in = float(payload.get("expires_in") or 0)
        except (TypeError, ValueError):
            expires_in = 0.0
        self._access_token = payload["access_token"]
        self._access_token_expiry = self._clock() + expires_in
        self._store.set(ACCESS_TOKEN_KEY, payload["access_token"])
        self._store.set(REFRESH_TOKEN_KEY, payload["refresh_token"])
