"""Calendar-day helpers that avoid UTC day shifts."""

from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Optional, Union
from zoneinfo import ZoneInfo

from supplier_reports.config import get_settings

_DATE_ONLY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
# Backend encodes pure dates as UTC midnight; those are calendar days, not instants.
_UTC_MIDNIGHT = re.compile(r"^(\d{4}-\d{2}-\d{2})T00:00:00(?:\.0+)?Z$")

DateLike = Union[date, datetime, str, None]


def local_timezone() -> ZoneInfo:
    """Return the configured local timezone."""

    return ZoneInfo(get_settings().timezone)


def _date_from_parts(text: str) -> Optional[date]:
    match = _DATE_ONLY.match(text)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_local_date(value: DateLike) -> Optional[date]:
    """Parse a calendar day, ignoring any time-of-day suffix.

    Returns None for empty or malformed input instead of raising.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_date(value)
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    return _date_from_parts(value.strip().split("T", 1)[0])


def parse_payment_datetime(value: DateLike) -> Optional[datetime]:
    """Parse a payment timestamp; day-only values become local midnight."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str):
        return None

    text = value.strip()
    midnight = _UTC_MIDNIGHT.match(text)
    if midnight:
        text = midnight.group(1)
    day = _date_from_parts(text)
    if day is not None:
        return datetime.combine(day, time.min)

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None


def to_local_date(value: Union[date, datetime, None], tz: Optional[ZoneInfo] = None) -> Optional[date]:
    """Truncate a date or datetime to the local calendar day.

    Naive datetimes are taken to be local already.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(tz or local_timezone()).date()
        return value.date()
    return value


def format_local_date(value: Union[date, datetime]) -> str:
    """Format as ``YYYY-MM-DD`` from local calendar fields."""

    day = to_local_date(value)
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"
