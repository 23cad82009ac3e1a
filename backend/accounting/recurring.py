# accounting/recurring.py
"""
Due-date arithmetic for recurring transactions.

Month-based intervals clamp to the last day of the target month, so a
schedule anchored on the 31st lands on Feb 28/29 and Apr 30 instead of
spilling into the next month.
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal


class InvalidIntervalError(ValueError):
    """Raised for an unknown interval or a non-positive interval count."""


# Months advanced per unit for month-based intervals
_MONTHS_PER_UNIT = {
    "monthly": 1,
    "quarterly": 3,
    "yearly": 12,
}

# Multipliers that turn one occurrence into a monthly amount
MONTHLY_EQUIVALENT = {
    "daily": Decimal("30"),
    "weekly": Decimal("4.33"),
    "monthly": Decimal("1"),
    "quarterly": Decimal("1") / Decimal("3"),
    "yearly": Decimal("1") / Decimal("12"),
}


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = (value.month - 1) + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(value.day, last_day))


def calculate_next_due_date(current: date, interval: str, interval_count: int = 1) -> date:
    """
    Return the occurrence after ``current``.

    Args:
        current: The current due date (or the start date for a new schedule)
        interval: daily, weekly, monthly, quarterly or yearly
        interval_count: Number of interval units between occurrences

    Raises:
        InvalidIntervalError: unknown interval or interval_count < 1

    Example:
        >>> calculate_next_due_date(date(2024, 1, 31), "monthly")
        datetime.date(2024, 2, 29)
    """
    if interval_count is None or int(interval_count) < 1:
        raise InvalidIntervalError(f"Invalid interval count: {interval_count}")
    interval_count = int(interval_count)

    if interval == "daily":
        return current + timedelta(days=interval_count)
    if interval == "weekly":
        return current + timedelta(days=7 * interval_count)
    if interval in _MONTHS_PER_UNIT:
        return add_months(current, _MONTHS_PER_UNIT[interval] * interval_count)

    raise InvalidIntervalError(f"Invalid interval: {interval}")


def occurrences_between(start: date, end: date, interval: str, interval_count: int = 1) -> list[date]:
    """All due dates from ``start`` (inclusive) up to ``end`` (inclusive)."""
    dates = []
    current = start
    while current <= end:
        dates.append(current)
        current = calculate_next_due_date(current, interval, interval_count)
    return dates


def monthly_equivalent(amount: Decimal, interval: str, interval_count: int = 1) -> Decimal:
    """Approximate monthly amount of a recurring schedule."""
    if interval not in MONTHLY_EQUIVALENT:
        raise InvalidIntervalError(f"Invalid interval: {interval}")
    return Decimal(amount) * MONTHLY_EQUIVALENT[interval] / Decimal(max(int(interval_count or 1), 1))
