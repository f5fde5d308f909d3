"""Timezone utilities for Buenos Aires local time."""

from datetime import datetime
from typing import Optional

import pytz
from dateutil import parser as date_parser

LOCAL_TZ = pytz.timezone("America/Argentina/Buenos_Aires")


def now_local() -> datetime:
    """Return current time in the local (Buenos Aires) timezone."""
    return datetime.now(LOCAL_TZ)


def to_local(dt: datetime) -> datetime:
    """Convert a datetime to the local timezone."""
    if dt.tzinfo is None:
        # Naive values coming back from SQLite are local wall time
        return LOCAL_TZ.localize(dt)
    return dt.astimezone(LOCAL_TZ)


def parse_datetime_local(value: str, default_tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Parse a datetime string and return it in the local timezone.

    If no timezone is provided in the string, assumes local time.
    """
    dt = date_parser.parse(value)
    if dt.tzinfo is None:
        tz = default_tz or LOCAL_TZ
        dt = tz.localize(dt)
    return to_local(dt)


def month_key(dt: datetime) -> str:
    """Return the YYYY-MM bucket of a datetime in local time."""
    return to_local(dt).strftime("%Y-%m")
