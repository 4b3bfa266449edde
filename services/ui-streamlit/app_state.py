"""
Client-side application state.

`AppState` owns the profile, expenses and saving goals held by the client and
writes every change back through `LocalStateStore`. Dashboard figures are
derived from that state with the shared aggregation engine.
"""

from __future__ import annotations

import datetime as dt
import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from local_store import (
    GUIDE_SEEN_KEY,
    ONBOARDING_KEY,
    ClientExpense,
    LocalStateStore,
    SavingGoal,
    UserData,
)
from shared.analytics import (
    CategoryBreakdown,
    DailyPoint,
    ExpenseRecord,
    MonthlySummary,
    PeriodComparison,
    SavingGoalRecord,
    build_daily_series,
    compute_category_breakdown,
    compute_monthly_summary,
    goal_progress,
    week_over_week,
)

logger = logging.getLogger(__name__)


class ExpenseNotFoundError(KeyError):
    """Raised when an edit or delete names an unknown expense id."""


@dataclass(frozen=True)
class GoalView:
    goal: SavingGoal
    progress: float


@dataclass(frozen=True)
class DashboardView:
    summary: MonthlySummary
    daily_series: List[DailyPoint]
    week_change: PeriodComparison
    breakdown: CategoryBreakdown
    goals: List[GoalView]


def _to_record(expense: ClientExpense) -> ExpenseRecord:
    return ExpenseRecord(amount=expense.amount, category=expense.category, date=expense.date, id=expense.id)


@dataclass
class AppState:
    store: LocalStateStore
    theme: str = "light"
    onboarding_complete: bool = False
    user_data: Optional[UserData] = None
    expenses: List[ClientExpense] = field(default_factory=list)
    goals: List[SavingGoal] = field(default_factory=list)
    show_first_time_guide: bool = False

    @classmethod
    def load(cls, store: LocalStateStore) -> "AppState":
        """
        Restore state from the store.

        The first-time guide is shown once onboarding is complete, until it has been
        dismissed or the user has at least one expense.
        """
        expenses = store.load_expenses()
        onboarding_complete = store.load_flag(ONBOARDING_KEY)
        show_guide = onboarding_complete and not store.load_flag(GUIDE_SEEN_KEY) and not expenses
        state = cls(
            store=store,
            theme=store.load_theme(),
            onboarding_complete=onboarding_complete,
            user_data=store.load_user_data(),
            expenses=expenses,
            goals=store.load_goals(),
            show_first_time_guide=show_guide,
        )
        logger.debug(
            {
                "event": "client_state_loaded",
                "expense_count": len(expenses),
                "goal_count": len(state.goals),
                "onboarding_complete": onboarding_complete,
            }
        )
        return state

    @property
    def currency_symbol(self) -> str:
        return self.user_data.currency_symbol if self.user_data else "$"

    def toggle_theme(self) -> str:
        self.theme = "light" if self.theme == "dark" else "dark"
        self.store.save_theme(self.theme)
        return self.theme

    def complete_onboarding(self, user_data: UserData) -> None:
        self.user_data = user_data
        self.onboarding_complete = True
        self.store.save_user_data(user_data)
        self.store.save_flag(ONBOARDING_KEY, True)
        if not self.store.load_flag(GUIDE_SEEN_KEY) and not self.expenses:
            self.show_first_time_guide = True

    def add_expense(self, *, amount: float, category: str, date: dt.date) -> ClientExpense:
        expense = ClientExpense(id=uuid.uuid4().hex, amount=amount, category=category, date=date)
        self.expenses.append(expense)
        self.store.save_expenses(self.expenses)
        self.close_guide()
        logger.info({"event": "client_expense_added", "expense_id": expense.id, "category": category})
        return expense

    def edit_expense(self, expense_id: str, *, amount: float, category: str, date: dt.date) -> ClientExpense:
        index = self._expense_index(expense_id)
        updated = ClientExpense(id=expense_id, amount=amount, category=category, date=date)
        self.expenses[index] = updated
        self.store.save_expenses(self.expenses)
        return updated

    def delete_expense(self, expense_id: str) -> None:
        index = self._expense_index(expense_id)
        del self.expenses[index]
        self.store.save_expenses(self.expenses)
        logger.info({"event": "client_expense_deleted", "expense_id": expense_id})

    def add_goal(self, *, name: str, target_amount: float, target_date: dt.date) -> SavingGoal:
        goal = SavingGoal(
            id=uuid.uuid4().hex,
            name=name,
            target_amount=target_amount,
            current_amount=0.0,
            target_date=target_date,
        )
        self.goals.append(goal)
        self.store.save_goals(self.goals)
        return goal

    def close_guide(self) -> None:
        self.show_first_time_guide = False
        self.store.save_flag(GUIDE_SEEN_KEY, True)

    def expense_records(self) -> List[ExpenseRecord]:
        return [_to_record(expense) for expense in self.expenses]

    def dashboard(self, today: dt.date) -> DashboardView:
        records = self.expense_records()
        income = self.user_data.income if self.user_data else 0.0
        goals = [
            GoalView(
                goal=goal,
                progress=goal_progress(
                    SavingGoalRecord(
                        id=goal.id,
                        name=goal.name,
                        target_amount=goal.target_amount,
                        current_amount=goal.current_amount,
                        target_date=goal.target_date,
                    )
                ),
            )
            for goal in self.goals
        ]
        month_start, month_end = _month_bounds(today)
        return DashboardView(
            summary=compute_monthly_summary(records, income, today),
            daily_series=build_daily_series(records, today),
            week_change=week_over_week(records, today),
            breakdown=compute_category_breakdown(records, month_start, month_end),
            goals=goals,
        )

    def _expense_index(self, expense_id: str) -> int:
        for index, expense in enumerate(self.expenses):
            if expense.id == expense_id:
                return index
        raise ExpenseNotFoundError(expense_id)


def _month_bounds(today: dt.date) -> Tuple[dt.date, dt.date]:
    start = today.replace(day=1)
    next_month = (start + dt.timedelta(days=32)).replace(day=1)
    return start, next_month - dt.timedelta(days=1)
