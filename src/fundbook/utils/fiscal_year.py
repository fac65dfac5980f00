"""Fiscal year and quarter date range presets."""

from dataclasses import dataclass
from datetime import date, timedelta
from dateutil.relativedelta import relativedelta

PRESETS = (
    "current-fy",
    "previous-fy",
    "current-quarter",
    "previous-quarter",
    "fiscal-ytd",
    "calendar-year",
)


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range with a display label."""

    start: date
    end: date
    label: str


def _label_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def _span(start: date, end: date) -> str:
    return f"{_label_date(start)} to {_label_date(end)}"


def fiscal_year_start(fiscal_start_month: int, today: date) -> date:
    """First day of the fiscal year containing ``today``."""
    if not 1 <= fiscal_start_month <= 12:
        raise ValueError(f"Fiscal start month must be between 1 and 12, got {fiscal_start_month}")
    year = today.year if today.month >= fiscal_start_month else today.year - 1
    return date(year, fiscal_start_month, 1)


def fiscal_year_label(fiscal_start_month: int, start: date) -> str:
    """Label such as FY 2024, or FY 2024-2025 when the year spans two calendar years."""
    if fiscal_start_month == 1:
        return f"FY {start.year}"
    return f"FY {start.year}-{start.year + 1}"


def _fiscal_year(fiscal_start_month: int, start: date) -> DateRange:
    end = start + relativedelta(years=1) - timedelta(days=1)
    label = fiscal_year_label(fiscal_start_month, start)
    return DateRange(start, end, f"{label} ({_span(start, end)})")


def _quarter(fiscal_start_month: int, start: date) -> DateRange:
    fy_start = fiscal_year_start(fiscal_start_month, start)
    months = (start.year - fy_start.year) * 12 + start.month - fy_start.month
    end = start + relativedelta(months=3) - timedelta(days=1)
    return DateRange(start, end, f"Q{months // 3 + 1} ({_span(start, end)})")


def fiscal_year_range(fiscal_start_month: int, today: date) -> DateRange:
    return _fiscal_year(fiscal_start_month, fiscal_year_start(fiscal_start_month, today))


def previous_fiscal_year_range(fiscal_start_month: int, today: date) -> DateRange:
    start = fiscal_year_start(fiscal_start_month, today) - relativedelta(years=1)
    return _fiscal_year(fiscal_start_month, start)


def fiscal_quarter_range(fiscal_start_month: int, today: date) -> DateRange:
    """The fiscal quarter containing ``today``.

    Quarters are three month blocks counted from the fiscal year start.
    """
    fy_start = fiscal_year_start(fiscal_start_month, today)
    months = (today.year - fy_start.year) * 12 + today.month - fy_start.month
    return _quarter(fiscal_start_month, fy_start + relativedelta(months=months // 3 * 3))


def previous_fiscal_quarter_range(fiscal_start_month: int, today: date) -> DateRange:
    current = fiscal_quarter_range(fiscal_start_month, today)
    return _quarter(fiscal_start_month, current.start - relativedelta(months=3))


def fiscal_ytd_range(fiscal_start_month: int, today: date) -> DateRange:
    start = fiscal_year_start(fiscal_start_month, today)
    return DateRange(start, today, f"YTD ({_span(start, today)})")


def calendar_year_range(today: date) -> DateRange:
    start, end = date(today.year, 1, 1), date(today.year, 12, 31)
    return DateRange(start, end, f"Calendar Year {today.year} ({_span(start, end)})")


def get_preset_range(preset: str, fiscal_start_month: int = 1, today: date | None = None) -> DateRange:
    """Resolve a named preset to a date range.

    Args:
        preset: One of PRESETS
        fiscal_start_month: Month (1-12) the fiscal year starts in
        today: Reference date (defaults to today)

    Raises:
        ValueError: If the preset or the fiscal start month is not valid
    """
    today = today or date.today()
    key = preset.strip().lower()
    if key == "current-fy":
        return fiscal_year_range(fiscal_start_month, today)
    if key == "previous-fy":
        return previous_fiscal_year_range(fiscal_start_month, today)
    if key == "current-quarter":
        return fiscal_quarter_range(fiscal_start_month, today)
    if key == "previous-quarter":
        return previous_fiscal_quarter_range(fiscal_start_month, today)
    if key == "fiscal-ytd":
        return fiscal_ytd_range(fiscal_start_month, today)
    if key == "calendar-year":
        return calendar_year_range(today)
    raise ValueError(f"Unknown preset: '{preset}'. Supported presets: {', '.join(PRESETS)}")
