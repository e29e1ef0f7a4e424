"""Calendar helpers for month-based statistics."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time


def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by whole months, clamping the day to the target month's length."""
    index = moment.month - 1 + months
    year = moment.year + index // 12
    month = index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_keys_between(start: date, end: date) -> list[str]:
    """Every ``YYYY-MM`` from the month of ``start`` to the month of ``end`` inclusive."""
    keys: list[str] = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        keys.append(f"{year:04d}-{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return keys


def as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)
