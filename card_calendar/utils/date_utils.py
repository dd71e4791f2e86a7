"""Calendar helpers for month-anchored recurrences"""

import calendar
from datetime import date, datetime, time
from typing import Union

DateLike = Union[date, datetime]


def as_date(value: DateLike) -> date:
    """Drop the time-of-day part of a datetime (dates pass through)"""
    if isinstance(value, datetime):
        return value.date()
    return value


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamped_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping day-of-month to the month's last day"""
    return date(year, month, min(day, days_in_month(year, month)))


def next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def at_time_of_day(day: date, hour: int, minute: int = 0) -> datetime:
    """Local naive datetime for a calendar day at a fixed time"""
    return datetime.combine(day, time(hour=hour, minute=minute))
