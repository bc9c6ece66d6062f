"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

END_OF_DAY = time(23, 59, 59)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2026-02-16", "February 16, 2026") and a few
    relative forms ("today", "yesterday", "this month", "last month", ...).

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_datetime(value: str) -> datetime:
    """Parse a timestamp string ("2026-02-16 10:00:00") into a naive datetime."""
    try:
        parsed = date_parser.parse(value.strip())
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse time '{value}': {e}")
    return parsed.replace(tzinfo=None)


def end_of_day(day: date) -> datetime:
    """Return the last second of the given day."""
    return datetime.combine(day, END_OF_DAY)


def resolve_settlement_time(value: Optional[str] = None) -> datetime:
    """Resolve a settlement time input to 23:59:59 of the referenced day.

    An empty or missing value means today.
    """
    if value is None or not value.strip():
        return end_of_day(date.today())
    return end_of_day(parse_date(value))
