"""
Aggregation engine shared by the expense API and the client.

Every function here is a pure computation over an in-memory list of records;
loading those records is the caller's job.
"""

from .breakdown import (
    TOP_EXPENSE_LIMIT,
    CategoryBreakdown,
    CategorySummary,
    TopExpense,
    compute_category_breakdown,
    filter_by_date_range,
)
from .budget_status import BudgetStatus, budget_percentage, evaluate_budget_status, evaluate_budgets
from .daily_series import SERIES_LENGTH, DailyPoint, average_daily_spend, build_daily_series, week_over_week
from .monthly_summary import MonthlySummary, compute_monthly_summary, goal_progress
from .periods import Window, current_month, current_week, period_window, previous_month, previous_week
from .records import BudgetRecord, ExpenseRecord, SavingGoalRecord
from .trends import PeriodComparison, TrendReport, compute_trend_report, percent_change

__all__ = [
    "TOP_EXPENSE_LIMIT",
    "SERIES_LENGTH",
    "BudgetRecord",
    "BudgetStatus",
    "CategoryBreakdown",
    "CategorySummary",
    "DailyPoint",
    "ExpenseRecord",
    "MonthlySummary",
    "PeriodComparison",
    "SavingGoalRecord",
    "TopExpense",
    "TrendReport",
    "Window",
    "average_daily_spend",
    "budget_percentage",
    "build_daily_series",
    "compute_category_breakdown",
    "compute_monthly_summary",
    "compute_trend_report",
    "current_month",
    "current_week",
    "evaluate_budget_status",
    "evaluate_budgets",
    "filter_by_date_range",
    "goal_progress",
    "percent_change",
    "period_window",
    "previous_month",
    "previous_week",
    "week_over_week",
]
