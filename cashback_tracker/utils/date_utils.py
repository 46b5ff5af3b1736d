"""Date manipulation utilities"""

import calendar
import re
from datetime import date
from typing import Optional, Tuple

from cashback_tracker.domain.exceptions import InvalidPeriodError

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MIN_YEAR = 2000
MAX_YEAR = 2100


def parse_iso_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD string into a date.

    Raises:
        ValueError: If the format is wrong or the day does not exist
    """
    if not isinstance(value, str) or not ISO_DATE_RE.match(value):
        raise ValueError("date must be in YYYY-MM-DD format")
    return date.fromisoformat(value)


def month_label(year: int, month: int) -> str:
    """'January 2026' style label"""
    return f"{calendar.month_name[month]} {year}"


def in_month(day: date, year: int, month: int) -> bool:
    return day.year == year and day.month == month


def days_between(start: date, end: date) -> int:
    """Whole days from start to end, never negative"""
    return max(0, (end - start).days)


def resolve_period(year: Optional[int], month: Optional[int], today: date) -> Tuple[int, int]:
    """
    Apply current-month defaults and validate a year/month pair.

    Raises:
        InvalidPeriodError: If year is outside 2000-2100 or month outside 1-12
    """
    year = today.year if year is None else year
    month = today.month if month is None else month

    if year < MIN_YEAR or year > MAX_YEAR:
        raise InvalidPeriodError(f"Invalid year. Must be between {MIN_YEAR} and {MAX_YEAR}")
    if month < 1 or month > 12:
        raise InvalidPeriodError("Invalid month. Must be between 1 and 12")

    return year, month
