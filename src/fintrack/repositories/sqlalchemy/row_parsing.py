"""Validate-on-read helpers shared by the SQLAlchemy repositories."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from fintrack.core.exceptions import DeserializationFailed
from fintrack.core.timezone import to_local


def read_decimal(
    value: Any,
    table: str,
    identifier: Any,
    column: str,
    non_negative: bool = False,
) -> Decimal:
    """Convert a stored numeric column to Decimal, rejecting NULL and garbage."""
    if value is None:
        raise DeserializationFailed(table, str(identifier), f"{column} is NULL")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise DeserializationFailed(table, str(identifier), f"{column}={value!r}") from exc
    if not result.is_finite():
        raise DeserializationFailed(table, str(identifier), f"{column} is not finite")
    if non_negative and result < 0:
        raise DeserializationFailed(table, str(identifier), f"{column} is negative")
    return result


def read_datetime(value: Any, table: str, identifier: Any, column: str = "date") -> datetime:
    """Return a stored timestamp as an aware local datetime."""
    if not isinstance(value, datetime):
        raise DeserializationFailed(table, str(identifier), f"{column}={value!r}")
    return to_local(value)


def write_datetime(value: datetime) -> datetime:
    """Normalize a timestamp to naive local wall time for SQLite storage."""
    return to_local(value).replace(tzinfo=None)
