"""Calendar helpers for monthly payroll periods."""

from __future__ import annotations

import calendar
from datetime import date

MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def validate_period(year: int, month: int) -> None:
    """Raise ValueError for a month outside 1-12 or a non-positive year."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    if year < 1:
        raise ValueError(f"Year must be positive, got {year}")


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def days_in_month(year: int, month: int) -> int:
    """Number of calendar days in the month."""
    return calendar.monthrange(year, month)[1]


def working_days_in_month(year: int, month: int) -> int:
    """Number of days in the month that are not Sundays.

    Sunday is the only non-working weekday; holidays are not considered.
    """
    return sum(
        1
        for day in range(1, days_in_month(year, month) + 1)
        if date(year, month, day).weekday() != calendar.SUNDAY
    )


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of the month."""
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def previous_month(year: int, month: int) -> tuple[int, int]:
    """(year, month) of the month before, rolling January back to December."""
    if month == 1:
        return year - 1, 12
    return year, month - 1
