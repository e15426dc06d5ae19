"""
Timestamp helpers shared by the tools and the reminder scheduler.

Stored timestamps are ISO 8601 strings in UTC; anything shown to people or
compared by calendar day is converted to the scheduler timezone first.
"""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo


def parse_iso(value: str) -> datetime:
    """Parse an ISO 8601 string; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def local_date(value: str | datetime, tz_name: str) -> date:
    """Calendar date of a timestamp in the given timezone."""
    dt = parse_iso(value) if isinstance(value, str) else value
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(ZoneInfo(tz_name)).date()


def same_local_date(a: str | datetime, b: str | datetime, tz_name: str) -> bool:
    return local_date(a, tz_name) == local_date(b, tz_name)


def format_timestamp(value: str, tz_name: str) -> str:
    """Human-readable local time, e.g. 'Sun 18 Oct 2026, 08:00 EDT'. Unparseable input is returned as-is."""
    try:
        dt = parse_iso(value)
    except ValueError:
        return value
    return dt.astimezone(ZoneInfo(tz_name)).strftime("%a %d %b %Y, %H:%M %Z")
