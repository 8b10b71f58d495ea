"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "next month", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

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

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_entry_date(value: str | date) -> date:
    """Parse an entry date from its ``YYYY-MM-DD`` components.

    The components are read directly so the calendar day never shifts
    through a timezone conversion.

    Raises:
        ValueError: If the value is not a valid ``YYYY-MM-DD`` date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = (value or "").strip()
    # Accept full ISO timestamps by keeping only the date part
    text = text.split("T", 1)[0]
    parts = text.split("-")
    if len(parts) != 3 or len(parts[0]) != 4:
        raise ValueError(f"Invalid date '{value}': expected YYYY-MM-DD")
    try:
        year, month, day = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}': {e}")


def format_entry_date(value: date) -> str:
    """Serialize a date as plain ``YYYY-MM-DD``."""
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def add_months(base: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length.

    Jan 31 + 1 month is Feb 28 (Feb 29 in leap years), never March.
    """
    return base + relativedelta(months=months)


def move_to_month(base: date, year: int, month: int) -> date:
    """Return ``base``'s day in the given month, clamped to its length."""
    return base + relativedelta(year=year, month=month)


def month_prefix(month: int | str, year: int | str) -> str:
    """Return the ``YYYY-MM-`` text prefix matching dates in a month.

    Raises:
        ValueError: If month or year is out of range
    """
    try:
        month_num = int(month)
        year_num = int(year)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid month/year '{month}/{year}'")
    if not 1 <= month_num <= 12:
        raise ValueError(f"Invalid month '{month}': expected 1-12")
    if not 1 <= year_num <= 9999:
        raise ValueError(f"Invalid year '{year}'")
    return f"{str(year_num).zfill(4)}-{str(month_num).zfill(2)}-"
