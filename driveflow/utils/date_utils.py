"""Date manipulation utilities"""

import calendar
import math
from datetime import date, datetime, time, timedelta

SECONDS_PER_DAY = 24 * 60 * 60


def to_calendar_date(value: date) -> date:
    """Drop any time-of-day component so day counts work on calendar dates"""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative when end is earlier)"""
    return (to_calendar_date(end) - to_calendar_date(start)).days


def day_after(value: date) -> date:
    return to_calendar_date(value) + timedelta(days=1)


def _as_datetime(value: date) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def ceil_days_between(start: date, end: date) -> int:
    """Days needed to cover the span between start and end, in either order"""
    seconds = abs((_as_datetime(end) - _as_datetime(start)).total_seconds())
    return math.ceil(seconds / SECONDS_PER_DAY)


def add_months(value: date, months: int) -> date:
    """
    Same day N months later, clamped to the end of shorter months.

    Example:
        add_months(date(2025, 8, 31), 6) -> date(2026, 2, 28)
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)
