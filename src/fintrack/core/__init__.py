"""Core utilities and shared functionality."""

from fintrack.core.timezone import (
    now_local,
    to_local,
    parse_datetime_local,
    month_key,
    LOCAL_TZ,
)
from fintrack.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    RateFetchFailed,
    AuthenticationFailed,
    BrokerRequestFailed,
    StoreWriteFailed,
    DeserializationFailed,
    OversellDetected,
)

__all__ = [
    "now_local",
    "to_local",
    "parse_datetime_local",
    "month_key",
    "LOCAL_TZ",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "RateFetchFailed",
    "AuthenticationFailed",
    "BrokerRequestFailed",
    "StoreWriteFailed",
    "DeserializationFailed",
    "OversellDetected",
]
