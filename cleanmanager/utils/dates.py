"""Date helpers shared by services"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from dateutil import parser as date_parser


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: Optional[Union[str, datetime, date]]) -> Optional[datetime]:
    """
    Parse an ISO-ish string (or pass through a datetime) into naive UTC.

    Raises:
        ValueError: If the string cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        parsed = date_parser.isoparse(str(value))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999999)


def count_weekdays(start: date, end: date) -> int:
    """Inclusive count of Monday-Friday days between two dates"""
    if end < start:
        return 0
    days = 0
    current = start
    while current <= end:
        if current.weekday() < 5:
            days += 1
        current += timedelta(days=1)
    return days


def format_display_datetime(value: Optional[datetime]) -> Optional[str]:
    """Mon 03 Mar 2025, 09:30"""
    if value is None:
        return None
    return value.strftime("%a %d %b %Y, %H:%M")


def format_display_date(value: Optional[Union[datetime, date]]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%d %b %Y")
