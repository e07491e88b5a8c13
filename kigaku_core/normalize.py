from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytz

logger = logging.getLogger(__name__)


def reference_zone(name: str) -> Optional[ZoneInfo]:
    """ZoneInfo for the reference zone, or None if it cannot be constructed."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError) as exc:
        logger.warning("reference_zone_unavailable", extra={"tz": name, "error": str(exc)})
        return None


def to_reference(value: dt.datetime, tz: dt.tzinfo) -> dt.datetime:
    """Anchor an instant in the reference zone; naive values are read as wall-clock time there."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def start_of_day(value: dt.datetime) -> dt.datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_iso_datetime(value: Any, tz: Optional[dt.tzinfo] = None) -> Optional[dt.datetime]:
    """Parse 'YYYY-MM-DD' or an ISO-8601 timestamp; naive results get ``tz`` (UTC if omitted)."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    default_tz = tz or pytz.UTC

    try:
        if len(s) == 10 and s[4] == "-" and s[7] == "-":
            d = dt.date.fromisoformat(s)
            return dt.datetime.combine(d, dt.time.min).replace(tzinfo=default_tz)
    except ValueError:
        return None

    try:
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        parsed = dt.datetime.fromisoformat(s)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=default_tz)
    return parsed


def parse_time_of_day(value: Optional[str]) -> dt.time:
    """'HH:MM' or 'HH:MM:SS'; empty means midnight."""
    if not value or not str(value).strip():
        return dt.time(0, 0)
    parts = [int(x) for x in str(value).strip().split(":")]
    if len(parts) == 2:
        h, m = parts
        s = 0
    elif len(parts) == 3:
        h, m, s = parts
    else:
        raise ValueError("time must be 'HH:MM' or 'HH:MM:SS'")
    return dt.time(h, m, s)


def parse_birth_datetime(date_of_birth: str, time_of_birth: Optional[str], tz_name: str) -> dt.datetime:
    """Combine caller-supplied date, time and IANA zone into an aware datetime.

    Raises ValueError for unparsable input; pytz.UnknownTimeZoneError for an unknown zone.
    """
    d = dt.date.fromisoformat(str(date_of_birth).strip())
    t = parse_time_of_day(time_of_birth)
    zone = pytz.timezone(tz_name)
    return zone.localize(dt.datetime.combine(d, t))
