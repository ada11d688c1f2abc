"""Display formatting for dates in emails and confirmation documents"""

from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str, None]


def _coerce(value: DateLike) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


def format_date(value: DateLike, fallback: str = "N/A") -> str:
    """e.g. "January 10, 2025"; fallback for missing or unparseable values"""
    parsed = _coerce(value)
    return parsed.strftime("%B %d, %Y") if parsed else fallback


def format_datetime(value: DateLike, fallback: str = "N/A") -> str:
    """e.g. "January 10, 2025 09:30 AM UTC" """
    parsed = _coerce(value)
    if not parsed:
        return fallback
    formatted = parsed.strftime("%B %d, %Y %I:%M %p")
    return f"{formatted} {parsed.tzname()}" if parsed.tzname() else formatted
