from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Literal

from .records import ExpenseRecord
from .trends import PeriodComparison, compare_periods

SERIES_LENGTH = 7

LabelStyle = Literal["weekday", "month_day"]

# Fixed English labels so charts do not depend on the process locale.
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True, slots=True)
class DailyPoint:
    day: date
    label: str
    amount: float


def day_label(day: date, style: LabelStyle = "weekday") -> str:
    if style == "weekday":
        return WEEKDAY_LABELS[day.weekday()]
    if style == "month_day":
        return f"{MONTH_LABELS[day.month - 1]} {day.day}"
    raise ValueError(f"Unsupported label style: {style!r}")


def _daily_totals(expenses: Iterable[ExpenseRecord]) -> Dict[date, float]:
    totals: Dict[date, float] = {}
    for expense in expenses:
        totals[expense.date] = totals.get(expense.date, 0.0) + expense.amount
    return totals


def build_daily_series(
    expenses: Iterable[ExpenseRecord],
    today: date,
    label_style: LabelStyle = "weekday",
) -> List[DailyPoint]:
    """
    Per-day totals for the seven days ending on `today`, oldest first.

    An expense belongs to a day only when its date equals that day; days without
    expenses are present with an amount of 0, so the series always has 7 points.
    """
    totals = _daily_totals(expenses)
    days = [today - timedelta(days=offset) for offset in range(SERIES_LENGTH - 1, -1, -1)]
    return [
        DailyPoint(day=day, label=day_label(day, label_style), amount=totals.get(day, 0.0))
        for day in days
    ]


def week_over_week(expenses: Iterable[ExpenseRecord], today: date) -> PeriodComparison:
    """Compare the trailing seven days with the seven days immediately before them."""
    records = list(expenses)
    current = sum(point.amount for point in build_daily_series(records, today))
    prior_end = today - timedelta(days=SERIES_LENGTH)
    last = sum(point.amount for point in build_daily_series(records, prior_end))
    return compare_periods(float(current), float(last))


def average_daily_spend(series: Sequence[DailyPoint]) -> float:
    if not series:
        return 0.0
    return float(sum(point.amount for point in series)) / len(series)
