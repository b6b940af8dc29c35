"""Calendar window helpers."""

import calendar
from datetime import date, datetime
from typing import Iterator
from zoneinfo import ZoneInfo


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_window(year: int, month: int) -> tuple[date, date]:
    """Inclusive first/last day of a month."""
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def year_window(year: int) -> tuple[date, date]:
    """Inclusive first/last day of a year."""
    return date(year, 1, 1), date(year, 12, 31)


def iter_months(start: date, end: date) -> Iterator[tuple[int, int]]:
    """Yield (year, month) for every month overlapping [start, end]."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            month = 1
            year += 1


def month_key(d: date) -> str:
    """'YYYY-MM' key for the month containing ``d``."""
    return f"{d.year:04d}-{d.month:02d}"


def local_today(timezone: str) -> date:
    """Today's date in ``timezone``.

    Only the reporting boundary calls this; engine functions always take
    the reference date as a parameter.
    """
    return datetime.now(ZoneInfo(timezone)).date()
