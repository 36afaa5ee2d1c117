from __future__ import annotations

import calendar
from datetime import date, datetime


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def days_in_period(period: str) -> int:
    """Number of days in a YYYY-MM payroll period."""
    year, month = (int(p) for p in period.split("-"))
    return calendar.monthrange(year, month)[1]


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1
