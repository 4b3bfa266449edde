"""
Calendar windows used to bucket expenses.

All boundaries are computed in the timezone of the reference instant; a naive
reference is treated as local wall-clock time. Windows are half-open.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from .records import ExpenseRecord

DAYS_PER_WEEK = 7


@dataclass(frozen=True, slots=True)
class Window:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Midnight of the most recent Sunday (the week's day index 0)."""
    days_since_sunday = (now.weekday() + 1) % DAYS_PER_WEEK
    return start_of_day(now) - timedelta(days=days_since_sunday)


def start_of_month(now: datetime) -> datetime:
    return start_of_day(now).replace(day=1)


def _shift_month(month_start: datetime, months: int) -> datetime:
    month_index = month_start.year * 12 + (month_start.month - 1) + months
    year, month = divmod(month_index, 12)
    return month_start.replace(year=year, month=month + 1, day=1)


def current_week(now: datetime) -> Window:
    start = start_of_week(now)
    return Window(start=start, end=start + timedelta(days=DAYS_PER_WEEK))


def previous_week(now: datetime) -> Window:
    end = start_of_week(now)
    return Window(start=end - timedelta(days=DAYS_PER_WEEK), end=end)


def current_month(now: datetime) -> Window:
    start = start_of_month(now)
    return Window(start=start, end=_shift_month(start, 1))


def previous_month(now: datetime) -> Window:
    end = start_of_month(now)
    return Window(start=_shift_month(end, -1), end=end)


def period_window(period: str, now: datetime) -> Window:
    """Return the current window for a budget period ("weekly" or "monthly")."""
    if period == "weekly":
        return current_week(now)
    if period == "monthly":
        return current_month(now)
    raise ValueError(f"Unsupported budget period: {period!r}")


def align_to(moment: datetime, reference: datetime) -> datetime:
    """Make `moment` comparable with `reference` (both naive or both aware)."""
    if reference.tzinfo is None:
        if moment.tzinfo is None:
            return moment
        return moment.astimezone().replace(tzinfo=None)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=reference.tzinfo)
    return moment.astimezone(reference.tzinfo)


def occurred_at(expense: ExpenseRecord, reference: datetime) -> datetime:
    """
    Instant used for window membership.

    Falls back to midnight of the expense date when no timestamp was recorded.
    """
    if expense.timestamp is not None:
        return align_to(expense.timestamp, reference)
    return datetime.combine(expense.date, time.min, tzinfo=reference.tzinfo)
