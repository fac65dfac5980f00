"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

PERIODS = ("this-month", "this-year", "this-week", "last-month", "last-year", "last-week")


def _start_of(period: str, today: date) -> date:
    if period == "month":
        return today.replace(day=1)
    if period == "year":
        return today.replace(month=1, day=1)
    if period == "week":
        return today - timedelta(days=today.weekday())
    raise ValueError(f"Unknown period '{period}'")


def _shift(period: str, steps: int) -> relativedelta:
    if period == "week":
        return relativedelta(weeks=steps)
    if period == "month":
        return relativedelta(months=steps)
    return relativedelta(years=steps)


def parse_date(date_str: str, today: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and relative
    ones: "today", "yesterday", "tomorrow", "last/this/next week|month|year"
    (the first day of that period) and "last <weekday>".

    Args:
        date_str: Date string in various formats
        today: Reference date for relative dates (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    relative_days = {"today": 0, "yesterday": -1, "tomorrow": 1}
    if text in relative_days:
        return today + timedelta(days=relative_days[text])

    prefix, _, period = text.partition(" ")
    if prefix == "last" and period in WEEKDAYS:
        days_ago = (today.weekday() - WEEKDAYS.index(period)) % 7 or 7
        return today - timedelta(days=days_ago)
    if prefix in ("last", "this", "next") and period in ("week", "month", "year"):
        steps = {"last": -1, "this": 0, "next": 1}[prefix]
        return _start_of(period, today) + _shift(period, steps)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: date | None = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    "this-*" periods run up to today; "last-*" periods cover the whole
    previous week, month or year.

    Raises:
        ValueError: If period string is not recognized
    """
    key = period.strip().lower()
    if key not in PERIODS:
        raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")

    today = today or date.today()
    which, unit = key.split("-")
    start = _start_of(unit, today)
    if which == "this":
        return start, today
    previous = start + _shift(unit, -1)
    return previous, start - timedelta(days=1)
