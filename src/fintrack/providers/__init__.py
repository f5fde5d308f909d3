"""External data providers: exchange rate and brokerage."""

from fintrack.providers.rate_provider import RateProvider, DolarApiRateProvider
from fintrack.providers.broker_gateway import BrokerGateway, BrokerSource, RateSource

__all__ = [
    "RateProvider",
    "DolarApiRateProvider",
    "BrokerGateway",
    "BrokerSource",
    "RateSource",
]
