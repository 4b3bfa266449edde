from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from .records import ExpenseRecord

TOP_EXPENSE_LIMIT = 5


@dataclass(frozen=True, slots=True)
class TopExpense:
    amount: float
    description: str | None
    date: date


@dataclass(slots=True)
class CategorySummary:
    category: str
    total: float
    count: int
    percentage: float
    avg_per_transaction: float
    top_expenses: List[TopExpense] = field(default_factory=list)


@dataclass(slots=True)
class CategoryBreakdown:
    categories: List[CategorySummary]
    total_spent: float
    total_transactions: int


def filter_by_date_range(
    expenses: Iterable[ExpenseRecord],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[ExpenseRecord]:
    """Keep expenses whose date falls within [start, end]; a missing bound is open."""
    return [
        expense
        for expense in expenses
        if (start is None or expense.date >= start) and (end is None or expense.date <= end)
    ]


def compute_category_breakdown(
    expenses: Iterable[ExpenseRecord],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> CategoryBreakdown:
    """
    Group expenses by category label and rank the categories by spend.

    Args:
        expenses: Expense records; grouping uses the exact, case-sensitive category label.
        start: Optional inclusive lower date bound.
        end: Optional inclusive upper date bound.
    Returns:
        CategoryBreakdown with categories sorted by total descending. Each category lists
        up to five of its largest transactions; equal amounts keep their input order.
    Assumptions:
        Percentages are 0 when nothing was spent.
    """
    selected = filter_by_date_range(expenses, start, end)
    total_spent = float(sum(expense.amount for expense in selected))

    grouped: Dict[str, List[ExpenseRecord]] = {}
    for expense in selected:
        grouped.setdefault(expense.category, []).append(expense)

    categories: List[CategorySummary] = []
    for category, members in grouped.items():
        total = float(sum(member.amount for member in members))
        count = len(members)
        # sorted() is stable, so ties stay in input order.
        ranked = sorted(members, key=lambda member: member.amount, reverse=True)
        categories.append(
            CategorySummary(
                category=category,
                total=total,
                count=count,
                percentage=total / total_spent * 100 if total_spent > 0 else 0.0,
                avg_per_transaction=total / count,
                top_expenses=[
                    TopExpense(amount=member.amount, description=member.description, date=member.date)
                    for member in ranked[:TOP_EXPENSE_LIMIT]
                ],
            )
        )

    categories.sort(key=lambda summary: summary.total, reverse=True)
    return CategoryBreakdown(
        categories=categories,
        total_spent=total_spent,
        total_transactions=len(selected),
    )
