"""Currency mirroring rules between the local (ARS) and reference (USD) currency."""

from decimal import Decimal

from fintrack.domain.models import Currency, ExchangeRate, CENTS_SCALED_TYPES

_HUNDRED = Decimal("100")


def descale_cents(value: Decimal, instrument_type: str, currency: Currency) -> Decimal:
    """Undo the per-100-nominal quoting of peso bonds, notes and letters."""
    if currency is Currency.LOCAL and instrument_type in CENTS_SCALED_TYPES:
        return value / _HUNDRED
    return value


def mirror_quote(value: Decimal, currency: Currency, rate: ExchangeRate) -> tuple[Decimal, Decimal]:
    """
    Mirror a broker-reported cost or price into (ARS, USD).

    Local amounts are divided by the buy rate; reference amounts are
    multiplied by the sell rate.
    """
    if currency is Currency.LOCAL:
        return value, value / rate.buy_rate
    return value * rate.sell_rate, value


def mirror_trade_price(value: Decimal, currency: Currency, rate: ExchangeRate) -> tuple[Decimal, Decimal]:
    """Mirror an executed operation price into (ARS, USD) using the sell rate both ways."""
    if currency is Currency.LOCAL:
        return value, value / rate.sell_rate
    return value * rate.sell_rate, value


# Positions and operations are kept at ten decimal places
STORAGE_QUANTUM = Decimal("0.0000000001")


def to_storage_scale(value: Decimal) -> Decimal:
    """Round to the fixed scale positions are kept at, so averaging does not grow digits."""
    return value.quantize(STORAGE_QUANTUM)
