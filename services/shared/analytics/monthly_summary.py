from __future__ import annotations

import calendar
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from .records import ExpenseRecord, SavingGoalRecord


@dataclass(frozen=True, slots=True)
class MonthlySummary:
    income: float
    spent: float
    left_to_spend: float
    average_daily: float
    days_remaining: int
    predicted_spending: float


def compute_monthly_summary(
    expenses: Iterable[ExpenseRecord],
    income: float,
    today: date,
) -> MonthlySummary:
    """
    Summarize the calendar month containing `today` for the dashboard cards.

    Args:
        expenses: Expense records; month membership uses the expense date.
        income: Monthly income captured during onboarding.
        today: Reference day; its day-of-month drives the daily average.
    Returns:
        MonthlySummary where predicted_spending extrapolates the average daily spend over
        the days left in the month.
    """
    monthly = [
        expense for expense in expenses if expense.date.year == today.year and expense.date.month == today.month
    ]
    spent = float(sum(expense.amount for expense in monthly))
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    days_remaining = days_in_month - today.day
    average_daily = spent / today.day if monthly else 0.0

    return MonthlySummary(
        income=income,
        spent=spent,
        left_to_spend=income - spent,
        average_daily=average_daily,
        days_remaining=days_remaining,
        predicted_spending=average_daily * days_remaining,
    )


def goal_progress(goal: SavingGoalRecord) -> float:
    """Percent of the target saved so far; uncapped, 0 when the target is 0."""
    if goal.target_amount > 0:
        return goal.current_amount / goal.target_amount * 100
    return 0.0
