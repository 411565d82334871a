"""
Timezone-aware datetime helpers.
- Store and compute instants in UTC in the DB.
- "Today" for log submissions is the calendar date in settings.APP_TIMEZONE.
- Log dates are exchanged as midnight UTC instants ("2024-05-01T00:00:00Z").
"""
from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware). Use for approved_at, created_at, etc."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt


def today_local(tz_name: Optional[str] = None) -> date:
    """Current calendar date in the configured application timezone"""
    if tz_name is None:
        from tasklog.core.config import settings
        tz_name = settings.APP_TIMEZONE
    return datetime.now(ZoneInfo(tz_name)).date()


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    utc = ensure_utc(dt)
    s = utc.isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def log_date_to_instant(d: Optional[date]) -> Optional[str]:
    """Serialize a calendar log date as its midnight UTC instant."""
    if d is None:
        return None
    return f"{d.isoformat()}T00:00:00Z"


def parse_log_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a log date from an exchange file.

    Accepts date/datetime objects (as produced by spreadsheet readers) or any
    string that starts with YYYY-MM-DD; the time part of an instant is ignored
    so "2024-05-01T00:00:00Z" and "2024-05-01" name the same day.

    Raises:
        ValueError: If the value does not start with a valid date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    return date.fromisoformat(text[:10])


def parse_instant(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse a timestamp from an exchange file as an aware UTC datetime.

    Accepts datetimes (naive ones are taken as UTC), bare dates (midnight UTC)
    and ISO-8601 strings, with or without a trailing Z.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    text = str(value).strip()
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))
