from datetime import date, datetime

import pytest

from shared.analytics import BudgetRecord, ExpenseRecord, budget_percentage, evaluate_budget_status, evaluate_budgets

NOW = datetime(2024, 1, 17, 10, 30)


def _expense(amount: float, category: str, timestamp: datetime) -> ExpenseRecord:
    return ExpenseRecord(amount=amount, category=category, date=timestamp.date(), timestamp=timestamp)


EXPENSES = [
    _expense(80, "Food", datetime(2024, 1, 15, 12)),
    _expense(45, "Food", datetime(2024, 1, 16, 19)),
    _expense(70, "Bills", datetime(2024, 1, 3, 9)),
    _expense(25, "Food", datetime(2024, 1, 10, 13)),  # previous week
    _expense(300, "Food", datetime(2023, 12, 28, 13)),  # previous month
]


def test_weekly_category_budget():
    status = evaluate_budget_status(BudgetRecord(category="Food", limit=100, period="weekly"), EXPENSES, NOW)

    assert status.spent == 125
    assert status.remaining == -25
    assert status.percentage == 125
    assert status.is_over_budget is True


def test_monthly_total_budget_counts_every_category():
    status = evaluate_budget_status(BudgetRecord(category="Total", limit=500, period="monthly"), EXPENSES, NOW)

    assert status.spent == 220
    assert status.remaining == status.budget.limit - status.spent
    assert status.percentage == pytest.approx(44)
    assert status.is_over_budget is False


def test_spending_exactly_the_limit_is_not_over():
    status = evaluate_budget_status(BudgetRecord(category="Bills", limit=70), EXPENSES, NOW)

    assert status.remaining == 0
    assert status.is_over_budget is False


def test_zero_limit():
    assert budget_percentage(0, 0) == 0
    assert budget_percentage(10, 0) == 100

    status = evaluate_budget_status(BudgetRecord(category="Health", limit=0), EXPENSES, NOW)
    assert status.spent == 0
    assert status.is_over_budget is False


def test_evaluate_budgets_keeps_input_order():
    budgets = [
        BudgetRecord(category="Bills", limit=100, period="weekly"),
        BudgetRecord(category="Food", limit=1000),
    ]

    statuses = evaluate_budgets(budgets, EXPENSES, NOW)

    assert [status.budget.category for status in statuses] == ["Bills", "Food"]
    assert [status.spent for status in statuses] == [0, 150]


def test_expense_without_timestamp_uses_its_date():
    record = ExpenseRecord(amount=12, category="Food", date=date(2024, 1, 14))

    status = evaluate_budget_status(BudgetRecord(category="Food", limit=50, period="weekly"), [record], NOW)

    assert status.spent == 12
