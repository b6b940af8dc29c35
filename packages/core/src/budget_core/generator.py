"""Deterministic occurrence generator.

Turns a recurrence rule and an inclusive date window into the ordered list
of concrete occurrences inside that window. Dates only, no time component,
no dependency on the wall clock.

Patterns:
- once: the single date, if inside the window
- weekly: every 7 days from the anchor, forward only
- biweekly: every 14 days from the anchor; the anchor stays the parity
  epoch however far ahead the window starts
- monthly: the given day in every month that has it (no clamping)
- twice_monthly: monthly, applied to both days
- yearly: month/day in every year that has it
"""

from datetime import date, timedelta
from typing import Iterable

import structlog

from budget_core.models import (
    BiweeklyPattern,
    MonthlyPattern,
    Occurrence,
    OncePattern,
    RecurrencePattern,
    RecurrenceRule,
    TwiceMonthlyPattern,
    WeeklyPattern,
    YearlyPattern,
)
from budget_core.periods import days_in_month, iter_months

logger = structlog.get_logger()


def _first_on_or_after(anchor: date, step_days: int, from_date: date) -> date:
    """First date in the series anchor + k*step_days (k >= 0) that is >= from_date."""
    if from_date <= anchor:
        return anchor
    steps = -(-(from_date - anchor).days // step_days)
    return anchor + timedelta(days=steps * step_days)


def _stepped(anchor: date, step_days: int, start: date, end: date) -> list[date]:
    out: list[date] = []
    current = _first_on_or_after(anchor, step_days, start)
    while current <= end:
        out.append(current)
        current += timedelta(days=step_days)
    return out


def _monthly(days: Iterable[int], start: date, end: date) -> list[date]:
    wanted = sorted(set(days))
    out: list[date] = []
    for year, month in iter_months(start, end):
        last = days_in_month(year, month)
        for day in wanted:
            if day > last:
                continue
            d = date(year, month, day)
            if start <= d <= end:
                out.append(d)
    return out


def _yearly(month: int, day: int, start: date, end: date) -> list[date]:
    out: list[date] = []
    for year in range(start.year, end.year + 1):
        if day > days_in_month(year, month):
            continue
        d = date(year, month, day)
        if start <= d <= end:
            out.append(d)
    return out


def occurrence_dates(
    pattern: RecurrencePattern,
    window_start: date,
    window_end: date,
) -> list[date]:
    """Dates in [window_start, window_end] (inclusive) on which ``pattern`` fires.

    Sorted ascending, no duplicates. An inverted window yields an empty list.
    """
    if window_start > window_end:
        return []

    if isinstance(pattern, OncePattern):
        if window_start <= pattern.date <= window_end:
            return [pattern.date]
        return []
    if isinstance(pattern, WeeklyPattern):
        return _stepped(pattern.anchor_date, 7, window_start, window_end)
    if isinstance(pattern, BiweeklyPattern):
        return _stepped(pattern.anchor_date, 14, window_start, window_end)
    if isinstance(pattern, MonthlyPattern):
        return _monthly([pattern.day_of_month], window_start, window_end)
    if isinstance(pattern, TwiceMonthlyPattern):
        return _monthly(
            [pattern.first_day, pattern.second_day], window_start, window_end
        )
    if isinstance(pattern, YearlyPattern):
        return _yearly(pattern.month, pattern.day_of_month, window_start, window_end)
    raise TypeError(f"unhandled recurrence pattern: {pattern!r}")


def fires_on(pattern: RecurrencePattern, day: date) -> bool:
    """Whether ``pattern`` fires on ``day``.

    Single-day check used by calendar cells; always agrees with
    :func:`occurrence_dates` over a one-day window.
    """
    if isinstance(pattern, OncePattern):
        return day == pattern.date
    if isinstance(pattern, WeeklyPattern):
        return day >= pattern.anchor_date and (day - pattern.anchor_date).days % 7 == 0
    if isinstance(pattern, BiweeklyPattern):
        anchor = pattern.anchor_date
        if day < anchor or day.weekday() != anchor.weekday():
            return False
        return ((day - anchor).days // 7) % 2 == 0
    if isinstance(pattern, MonthlyPattern):
        return day.day == pattern.day_of_month
    if isinstance(pattern, TwiceMonthlyPattern):
        return day.day in (pattern.first_day, pattern.second_day)
    if isinstance(pattern, YearlyPattern):
        return day.month == pattern.month and day.day == pattern.day_of_month
    raise TypeError(f"unhandled recurrence pattern: {pattern!r}")


def generate(
    rule: RecurrenceRule,
    window_start: date,
    window_end: date,
) -> list[Occurrence]:
    """Concrete occurrences of ``rule`` inside the inclusive window.

    Occurrences are unclassified (``status`` is None); pass them through
    :func:`budget_core.status.classify_occurrences` to split occurred from
    pending.
    """
    dates = occurrence_dates(rule.pattern, window_start, window_end)
    logger.debug(
        "rule_occurrences_generated",
        rule_id=rule.id,
        kind=rule.pattern.kind,
        window_start=window_start.isoformat(),
        window_end=window_end.isoformat(),
        count=len(dates),
    )
    return [
        Occurrence(
            rule_id=rule.id,
            label=rule.label,
            amount=rule.amount,
            flow=rule.flow,
            category_id=rule.category_id,
            date=d,
        )
        for d in dates
    ]


def generate_all(
    rules: Iterable[RecurrenceRule],
    window_start: date,
    window_end: date,
) -> list[Occurrence]:
    """Occurrences of every rule, ordered by date then label then rule id."""
    out: list[Occurrence] = []
    for rule in rules:
        out.extend(generate(rule, window_start, window_end))
    out.sort(key=lambda o: (o.date, o.label, str(o.rule_id)))
    return out
