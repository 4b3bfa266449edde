from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import List

from ..categories import TOTAL_BUDGET_CATEGORY
from .periods import occurred_at, period_window
from .records import BudgetRecord, ExpenseRecord


@dataclass(slots=True)
class BudgetStatus:
    budget: BudgetRecord
    spent: float
    remaining: float
    percentage: float
    is_over_budget: bool


def budget_percentage(spent: float, limit: float) -> float:
    """Share of the limit already spent; a zero limit reads as 100% once anything is spent."""
    if limit > 0:
        return spent / limit * 100
    return 100.0 if spent > 0 else 0.0


def _matches(budget: BudgetRecord, expense: ExpenseRecord) -> bool:
    return budget.category == TOTAL_BUDGET_CATEGORY or expense.category == budget.category


def evaluate_budget_status(
    budget: BudgetRecord,
    expenses: Iterable[ExpenseRecord],
    now: datetime,
) -> BudgetStatus:
    """
    Compute spend-to-date for one budget inside its current weekly or monthly window.

    The "Total" budget counts every expense; other budgets match their category exactly.
    """
    window = period_window(budget.period, now)
    spent = float(
        sum(
            expense.amount
            for expense in expenses
            if _matches(budget, expense) and window.contains(occurred_at(expense, now))
        )
    )
    return BudgetStatus(
        budget=budget,
        spent=spent,
        remaining=budget.limit - spent,
        percentage=budget_percentage(spent, budget.limit),
        is_over_budget=spent > budget.limit,
    )


def evaluate_budgets(
    budgets: Iterable[BudgetRecord],
    expenses: Sequence[ExpenseRecord],
    now: datetime,
) -> List[BudgetStatus]:
    return [evaluate_budget_status(budget, expenses, now) for budget in budgets]
