"""
Month key helpers.

A month key is a "YYYY-MM" string. Filtering by month always goes through
month_bounds() and compares calendar days, never string prefixes.
"""

import calendar
import re
from datetime import date
from typing import Optional

from src.models.budget import MONTH_KEY_PATTERN


_MONTH_KEY_RE = re.compile(MONTH_KEY_PATTERN)


class InvalidMonthError(ValueError):
    """A month key is not in YYYY-MM form."""
    pass


def parse_month(month: str) -> tuple[int, int]:
    """Split a month key into (year, month), validating its format."""
    if not isinstance(month, str) or not _MONTH_KEY_RE.match(month):
        raise InvalidMonthError(f"Invalid month key: {month!r} (expected YYYY-MM)")
    year, month_num = month.split("-")
    return int(year), int(month_num)


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def current_month(today: Optional[date] = None) -> str:
    """Month key for today (or the given day)."""
    return month_key(today or date.today())


def month_bounds(month: str) -> tuple[date, date]:
    """First and last calendar day of a month, both inclusive."""
    year, month_num = parse_month(month)
    last_day = calendar.monthrange(year, month_num)[1]
    return date(year, month_num, 1), date(year, month_num, last_day)


def is_in_month(day: date, month: str) -> bool:
    first, last = month_bounds(month)
    return first <= day <= last


def shift_month(month: str, offset: int) -> str:
    """Move a month key by offset months (negative goes back)."""
    year, month_num = parse_month(month)
    index = year * 12 + (month_num - 1) + offset
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def recent_months(count: int = 12, today: Optional[date] = None) -> list[str]:
    """The current month and the count - 1 before it, newest first."""
    start = current_month(today)
    return [shift_month(start, -i) for i in range(count)]


def month_display_name(month: str) -> str:
    """'2024-03' -> 'March 2024'."""
    year, month_num = parse_month(month)
    return f"{calendar.month_name[month_num]} {year}"
