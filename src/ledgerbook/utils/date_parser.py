"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Callable
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def _monday(day: date) -> date:
    return day - timedelta(days=day.weekday())


_RELATIVE: dict[str, Callable[[date], date]] = {
    "today": lambda today: today,
    "yesterday": lambda today: today - timedelta(days=1),
    "tomorrow": lambda today: today + timedelta(days=1),
    "this week": _monday,
    "last week": lambda today: _monday(today) - timedelta(days=7),
    "this month": lambda today: today.replace(day=1),
    "last month": lambda today: (today - relativedelta(months=1)).replace(day=1),
    "this year": lambda today: today.replace(month=1, day=1),
    "last year": lambda today: today.replace(month=1, day=1) - relativedelta(years=1),
}

_PERIODS: dict[str, Callable[[date], tuple[date, date]]] = {
    "this-week": lambda today: (_monday(today), today),
    "this-month": lambda today: (today.replace(day=1), today),
    "this-year": lambda today: (today.replace(month=1, day=1), today),
    "last-week": lambda today: (
        _monday(today) - timedelta(days=7),
        _monday(today) - timedelta(days=1),
    ),
    "last-month": lambda today: (
        (today - relativedelta(months=1)).replace(day=1),
        today.replace(day=1) - timedelta(days=1),
    ),
    "last-year": lambda today: (
        today.replace(month=1, day=1) - relativedelta(years=1),
        today.replace(month=1, day=1) - timedelta(days=1),
    ),
}


def parse_date(value: str | date, dayfirst: bool = False) -> date:
    """Parse a date value into a date object.

    Accepts date/datetime objects unchanged, relative phrases ("today",
    "last month", "this year", ...) and anything dateutil can read.

    Args:
        value: Date string or date
        dayfirst: Read ambiguous numeric dates as DD/MM/YYYY

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValueError("Empty date string")

    text = " ".join(str(value).strip().lower().split())
    if text in _RELATIVE:
        return _RELATIVE[text](date.today())

    try:
        return date_parser.parse(text, dayfirst=dayfirst).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: this-week, this-month, this-year, last-week, last-month or last-year

    Raises:
        ValueError: If period string is not recognized
    """
    key = period.strip().lower()
    if key not in _PERIODS:
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(_PERIODS)}")
    return _PERIODS[key](date.today())
