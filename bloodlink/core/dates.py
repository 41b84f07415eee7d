"""
Date helpers

All timestamps crossing the service boundary are timezone-aware UTC datetimes.
"""
import calendar
from datetime import date, datetime, timezone
from typing import Union


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def add_months(value: Union[date, datetime], months: int) -> Union[date, datetime]:
    """
    Same calendar day `months` later (or earlier for negative values)

    When the target month is shorter, the day is clamped to its last day,
    e.g. Nov 30 + 3 months -> Feb 28 (or 29).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
