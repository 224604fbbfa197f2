"""Conversions between request dates, WordPress DATETIME strings and RFC 3339.

WordPress keeps every post date twice: in site-local time and in UTC. The
site's offset is the ``gmt_offset`` option, in hours.
"""

from datetime import datetime, timedelta, timezone as dt_timezone

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.fields import MYSQL_DATETIME_FORMAT, ZERO_DATE

# WordPress offers UTC-12 to UTC+14 in its timezone setting.
MAX_GMT_OFFSET = 14


def parse_request_date(value: str) -> datetime | None:
    """Parse an ISO 8601 date-time, returning a naive UTC-or-local datetime.

    Values carrying an explicit offset are converted to UTC first; naive
    values are returned as given.
    """
    try:
        parsed = parse_datetime(value)
        if parsed is not None and parsed.tzinfo is not None:
            parsed = parsed.astimezone(dt_timezone.utc).replace(tzinfo=None)
    except (ValueError, OverflowError):
        return None
    return parsed


def format_mysql(value: datetime) -> str:
    return value.strftime(MYSQL_DATETIME_FORMAT)


def rest_get_date_with_gmt(value: str, is_utc: bool = False, gmt_offset: float = 0) -> tuple[str, str] | None:
    """Return ``(local, utc)`` DATETIME strings for a request date.

    With ``is_utc`` the input is the UTC value and local time is derived by
    adding the offset; otherwise the input is local and UTC is derived by
    subtracting it. Returns None if the value cannot be parsed or the
    derived date falls outside the representable range.
    """
    parsed = parse_request_date(value)
    if parsed is None:
        return None

    offset = timedelta(hours=gmt_offset)
    try:
        if is_utc:
            return format_mysql(parsed + offset), format_mysql(parsed)
        return format_mysql(parsed), format_mysql(parsed - offset)
    except OverflowError:
        return None


def mysql_to_rfc3339(value: str | None) -> str | None:
    """``2024-01-15 10:30:00`` -> ``2024-01-15T10:30:00``; zero dates become None."""
    if not value or value == ZERO_DATE:
        return None
    return value.replace(" ", "T", 1)


def prepare_date_gmt(date_gmt: str, date_local: str, gmt_offset: float) -> str | None:
    """Return the RFC 3339 UTC date, deriving it from local time when it is unset.

    Drafts often keep a zero ``post_date_gmt``; their UTC date is then the
    local date minus the site offset.
    """
    if date_gmt and date_gmt != ZERO_DATE:
        return mysql_to_rfc3339(date_gmt)
    try:
        local = datetime.strptime(date_local, MYSQL_DATETIME_FORMAT)
    except (TypeError, ValueError):
        return None
    return (local - timedelta(hours=gmt_offset)).strftime("%Y-%m-%dT%H:%M:%S")


def current_time_pair(gmt_offset: float) -> tuple[str, str]:
    """Return ``(local, utc)`` DATETIME strings for now."""
    now_utc = timezone.now().astimezone(dt_timezone.utc).replace(tzinfo=None, microsecond=0)
    return format_mysql(now_utc + timedelta(hours=gmt_offset)), format_mysql(now_utc)


__all__ = [
    "ZERO_DATE",
    "MAX_GMT_OFFSET",
    "parse_request_date",
    "format_mysql",
    "rest_get_date_with_gmt",
    "mysql_to_rfc3339",
    "prepare_date_gmt",
    "current_time_pair",
]
