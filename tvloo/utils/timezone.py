"""
Date and Time utilities

This module handles XMLTV timestamp parsing and the wall-clock formatting
used in channel descriptions. All datetimes leaving this module are
timezone-aware.
"""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re


logger = logging.getLogger(__name__)

# YYYYMMDDHHMMSS optionally followed by a +HHMM / -HHMM offset
_XMLTV_TIME_RE = re.compile(
    r"(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(?:\s*([+-])(\d{2})(\d{2}))?"
)


class DateFormatError(ValueError):
    """Raised when a guide timestamp cannot be parsed"""
    pass


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def parse_xmltv_time_strict(time_str: str) -> datetime:
    """
    Convert an XMLTV timestamp to an aware UTC datetime

    The first 14-digit ``YYYYMMDDHHMMSS`` group found in the string is read as
    a naive time. When a signed ``HHMM`` offset follows, the stated local time
    is converted to UTC by subtracting the offset.

    Args:
        time_str: XMLTV time like '20240115183000 +0100'

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        DateFormatError: If no timestamp is found or its fields are out of range
    """
    match = _XMLTV_TIME_RE.search(time_str or "")
    if not match:
        raise DateFormatError(f"Invalid XMLTV time: '{time_str}'")

    year, month, day, hour, minute, second, sign, tz_hours, tz_mins = match.groups()
    try:
        dt = datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second),
            tzinfo=timezone.utc,
        )
        if sign:
            offset = timedelta(hours=int(tz_hours), minutes=int(tz_mins))
            dt = dt - offset if sign == "+" else dt + offset
    except (ValueError, OverflowError) as e:
        raise DateFormatError(f"Invalid XMLTV time: '{time_str}'") from e

    return dt


def parse_xmltv_time(time_str: str, now: datetime | None = None) -> datetime:
    """
    Lenient variant of :func:`parse_xmltv_time_strict`

    Unparseable timestamps fall back to ``now`` (the current UTC time by
    default) instead of raising, so a single bad attribute never aborts a
    guide parse.
    """
    try:
        return parse_xmltv_time_strict(time_str)
    except DateFormatError:
        logger.debug("Unparseable XMLTV time %r, using current time", time_str)
        return now if now is not None else utc_now()


def get_zone(tz_name: str) -> ZoneInfo | timezone:
    """
    Resolve an IANA timezone name

    Raises:
        DateFormatError: If the timezone is unknown
    """
    if tz_name == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise DateFormatError(f"Invalid timezone: '{tz_name}'") from e


def format_clock_time(dt: datetime, tz_name: str = "UTC") -> str:
    """Format a datetime as HH:MM in the given timezone"""
    return dt.astimezone(get_zone(tz_name)).strftime("%H:%M")
