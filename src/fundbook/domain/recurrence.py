"""Occurrence date calculations for recurring templates.

All functions are pure. Dates move forward from the template start date one
interval at a time. Month based intervals clamp the day of month to the
length of the target month, and each step clamps from the date it is given,
so a template starting on January 31 runs Jan 31, Feb 28, Mar 28, ...
"""

import calendar
from datetime import date, timedelta
from typing import Optional

from fundbook.domain.entities import RecurrenceRule

_DAY_INTERVALS = {
    RecurrenceRule.WEEKLY: 7,
    RecurrenceRule.BI_WEEKLY: 14,
}

_MONTH_INTERVALS = {
    RecurrenceRule.MONTHLY: 1,
    RecurrenceRule.QUARTERLY: 3,
    RecurrenceRule.ANNUALLY: 12,
}


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def add_interval(value: date, rule: RecurrenceRule | str) -> date:
    """Return the date one interval of ``rule`` after ``value``.

    Raises:
        ValueError: If rule is not a known recurrence rule
    """
    rule = RecurrenceRule(rule)
    if rule in _DAY_INTERVALS:
        return value + timedelta(days=_DAY_INTERVALS[rule])
    return add_months(value, _MONTH_INTERVALS[rule])


def initial_occurrence(start_date: date, end_date: Optional[date] = None) -> Optional[date]:
    """Return the first occurrence of a new template.

    Returns None when the end date is before the start date, meaning the
    template can never fire.
    """
    if end_date is not None and end_date < start_date:
        return None
    return start_date


def next_occurrence(
    start_date: date,
    rule: RecurrenceRule | str,
    after_date: date,
    end_date: Optional[date] = None,
) -> Optional[date]:
    """Return the first occurrence strictly after ``after_date``.

    Walks forward from ``start_date``, so several elapsed intervals are
    caught up in one call. An occurrence on ``end_date`` is still valid;
    one past it returns None.
    """
    rule = RecurrenceRule(rule)
    current = start_date
    while current <= after_date:
        current = add_interval(current, rule)

    if end_date is not None and end_date < current:
        return None
    return current


def resume_occurrence(
    start_date: date,
    rule: RecurrenceRule | str,
    today: date,
    end_date: Optional[date] = None,
) -> Optional[date]:
    """Return the first occurrence on or after ``today``.

    Used when a paused template is resumed: a start date in the future wins
    outright, otherwise the schedule is walked forward past every missed
    occurrence.
    """
    rule = RecurrenceRule(rule)
    if start_date >= today:
        if end_date is not None and end_date < start_date:
            return None
        return start_date

    current = start_date
    while current < today:
        current = add_interval(current, rule)

    if end_date is not None and end_date < current:
        return None
    return current


def occurrences_through(
    start_date: date,
    rule: RecurrenceRule | str,
    first: Optional[date],
    through: date,
    end_date: Optional[date] = None,
) -> list[date]:
    """List the occurrences from ``first`` up to and including ``through``.

    ``first`` is a template's pending next occurrence; None yields nothing.
    """
    dates = []
    current = first
    while current is not None and current <= through:
        dates.append(current)
        current = next_occurrence(start_date, rule, current, end_date)
    return dates
