"""
Timestamp helpers - every domain timestamp is stored as naive UTC
"""
from datetime import date, datetime, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Current time as naive UTC"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """
    Normalize an ISO8601 string or datetime to naive UTC

    Offset-aware values are converted to UTC; naive values are taken as UTC.
    A trailing 'Z' is accepted.

    Raises:
        ValueError: If the string is not ISO8601
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text)

    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def local_date(value: datetime, tz_name: str) -> date:
    """Calendar date of a naive UTC timestamp in the given timezone"""
    return value.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name)).date()


def isoformat_utc(value: Optional[datetime]) -> Optional[str]:
    """Render a naive UTC timestamp as ISO8601 with a 'Z' suffix"""
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds") + "Z"
