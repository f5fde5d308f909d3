"""Enumerations for domain models."""

import unicodedata
from enum import Enum


def _fold(tag: str) -> str:
    """Lower-case a broker tag and strip accents ("Suscripción" -> "suscripcion")."""
    decomposed = unicodedata.normalize("NFKD", tag or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).strip().lower()


class Currency(str, Enum):
    """Currency an instrument trades in."""

    LOCAL = "LOCAL"  # ARS
    REFERENCE = "REFERENCE"  # USD

    @classmethod
    def from_broker_tag(cls, tag: str) -> "Currency":
        """Resolve the broker's currency label (e.g. "peso_Argentino")."""
        return cls.LOCAL if "peso" in _fold(tag) else cls.REFERENCE


class OperationKind(str, Enum):
    """Effect of a broker operation on a position."""

    BUY = "BUY"
    SELL = "SELL"
    OTHER = "OTHER"  # dividends, coupons, etc. (ledger only)

    @classmethod
    def from_broker_tag(cls, tag: str) -> "OperationKind":
        folded = _fold(tag)
        if folded in _BUY_TAGS:
            return cls.BUY
        if folded in _SELL_TAGS:
            return cls.SELL
        return cls.OTHER


_BUY_TAGS = frozenset({"compra", "suscripcion fci", "suscripcion otc"})
_SELL_TAGS = frozenset({"venta", "rescate fci", "rescate fci otc"})

# Instrument types the broker quotes per 100 nominal when traded in pesos
CENTS_SCALED_TYPES = frozenset({"ObligacionesNegociables", "TitulosPublicos", "Letras"})
