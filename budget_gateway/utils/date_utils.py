"""Date manipulation utilities"""

import calendar
from datetime import date, timedelta
from typing import List, Tuple


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(max(days, 0))]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of a month"""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def is_weekend(day: date) -> bool:
    """Saturday or Sunday"""
    return day.weekday() >= 5


def parse_iso_date(value) -> date:
    """Accept a date, a datetime, or an ISO-8601 string (date part only)"""
    if isinstance(value, date):
        # datetime is a date subclass; keep the calendar day only
        return value if type(value) is date else value.date()
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"Unsupported date value: {value!r}")
