"""
Date parsing utilities for feed timestamps
"""

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as dateparser

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# RFC 822 zone names as fixed offsets (seconds east of UTC)
RFC822_TZINFOS = {
    "UT": 0, "GMT": 0, "Z": 0,
    "EST": -5 * 3600, "EDT": -4 * 3600,
    "CST": -6 * 3600, "CDT": -5 * 3600,
    "MST": -7 * 3600, "MDT": -6 * 3600,
    "PST": -8 * 3600, "PDT": -7 * 3600,
}


def ensure_utc(dt: datetime) -> datetime:
    """Return a tz-aware UTC datetime (naive values are taken as UTC)"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_dt(value: Any) -> Optional[datetime]:
    """
    Parse RFC 822 / ISO 8601 strings, epoch seconds or datetimes.
    Returns None for anything that cannot be read as a timestamp.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return ensure_utc(value)

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    try:
        dt = dateparser.parse(value, tzinfos=RFC822_TZINFOS)
    except (ValueError, OverflowError, TypeError):
        return None

    if dt is None:
        return None
    return ensure_utc(dt)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hours_between(earlier: datetime, later: datetime) -> float:
    """Signed number of hours from `earlier` to `later`"""
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 3600
