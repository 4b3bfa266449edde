from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .periods import Window, current_month, current_week, occurred_at, previous_month, previous_week
from .records import ExpenseRecord


@dataclass(frozen=True, slots=True)
class PeriodComparison:
    current: float
    last: float
    change: float
    difference: float


@dataclass(frozen=True, slots=True)
class TrendReport:
    week: PeriodComparison
    month: PeriodComparison


def percent_change(current: float, prior: float) -> float:
    """
    Period-over-period change in percent.

    Returns 0 when the prior period is empty instead of dividing by zero, so a
    jump from 0 to 100 reads as "no comparable change" rather than infinity.
    """
    if prior > 0:
        return (current - prior) / prior * 100
    return 0.0


def compare_periods(current: float, last: float) -> PeriodComparison:
    return PeriodComparison(
        current=current,
        last=last,
        change=percent_change(current, last),
        difference=current - last,
    )


def sum_in_window(expenses: Iterable[ExpenseRecord], window: Window, now: datetime) -> float:
    return float(sum(expense.amount for expense in expenses if window.contains(occurred_at(expense, now))))


def compute_trend_report(expenses: Iterable[ExpenseRecord], now: datetime) -> TrendReport:
    """
    Compare this week and this month against the preceding week and month.

    Args:
        expenses: Expense records for a single user; consumed once.
        now: Reference instant; week/month boundaries follow its timezone.
    Returns:
        TrendReport with current/last totals, percent change and absolute difference.
    Assumptions:
        Pure function of its inputs; the caller decides which user's expenses to pass.
    """
    records = list(expenses)
    week = compare_periods(
        sum_in_window(records, current_week(now), now),
        sum_in_window(records, previous_week(now), now),
    )
    month = compare_periods(
        sum_in_window(records, current_month(now), now),
        sum_in_window(records, previous_month(now), now),
    )
    return TrendReport(week=week, month=month)
