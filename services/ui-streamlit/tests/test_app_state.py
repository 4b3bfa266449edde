import datetime as dt

import pytest

from app_state import AppState, ExpenseNotFoundError
from local_store import GUIDE_SEEN_KEY, ONBOARDING_KEY, LocalStateStore, UserData


def _user_data(income: float = 3000) -> UserData:
    return UserData(age=28, country="United States", currency="USD", currency_symbol="$", income=income)


def test_fresh_state_needs_onboarding(store):
    state = AppState.load(store)

    assert state.onboarding_complete is False
    assert state.show_first_time_guide is False
    assert state.theme == "light"
    assert state.currency_symbol == "$"


def test_completing_onboarding_shows_guide_and_persists(store, state_path):
    state = AppState.load(store)
    state.complete_onboarding(_user_data())

    assert state.show_first_time_guide is True

    reloaded = AppState.load(LocalStateStore(state_path))
    assert reloaded.onboarding_complete is True
    assert reloaded.user_data == _user_data()
    assert reloaded.show_first_time_guide is True


def test_guide_hidden_once_expenses_exist(store):
    store.save_flag(ONBOARDING_KEY, True)
    state = AppState.load(store)
    state.add_expense(amount=4.5, category="Coffee", date=dt.date(2024, 1, 2))

    assert state.show_first_time_guide is False
    assert store.load_flag(GUIDE_SEEN_KEY) is True


def test_close_guide_is_remembered(store, state_path):
    store.save_flag(ONBOARDING_KEY, True)
    state = AppState.load(store)
    state.close_guide()

    assert AppState.load(LocalStateStore(state_path)).show_first_time_guide is False


def test_toggle_theme_persists(store, state_path):
    state = AppState.load(store)

    assert state.toggle_theme() == "dark"
    assert AppState.load(LocalStateStore(state_path)).theme == "dark"
    assert state.toggle_theme() == "light"


def test_edit_and_delete_expense(store, state_path):
    state = AppState.load(store)
    expense = state.add_expense(amount=20, category="Shopping", date=dt.date(2024, 1, 5))

    state.edit_expense(expense.id, amount=25, category="Eating Out", date=dt.date(2024, 1, 6))
    reloaded = AppState.load(LocalStateStore(state_path))
    assert [(e.id, e.amount, e.category, e.date) for e in reloaded.expenses] == [
        (expense.id, 25.0, "Eating Out", dt.date(2024, 1, 6))
    ]

    state.delete_expense(expense.id)
    assert AppState.load(LocalStateStore(state_path)).expenses == []

    with pytest.raises(ExpenseNotFoundError):
        state.delete_expense(expense.id)


def test_new_goal_starts_with_nothing_saved(store):
    state = AppState.load(store)
    goal = state.add_goal(name="Holiday", target_amount=1200, target_date=dt.date(2024, 12, 1))

    assert goal.current_amount == 0.0
    assert store.load_goals()[0].name == "Holiday"


def test_dashboard_derives_figures_from_expenses(store):
    state = AppState.load(store)
    state.complete_onboarding(_user_data(income=3000))
    today = dt.date(2024, 1, 10)
    state.add_expense(amount=30, category="Eating Out", date=dt.date(2024, 1, 10))
    state.add_expense(amount=20, category="Transport", date=dt.date(2024, 1, 8))
    state.add_expense(amount=50, category="Eating Out", date=dt.date(2024, 1, 2))
    state.add_expense(amount=40, category="Shopping", date=dt.date(2023, 12, 31))
    state.add_goal(name="Laptop", target_amount=1000, target_date=dt.date(2024, 6, 1))

    view = state.dashboard(today)

    assert view.summary.spent == 100.0
    assert view.summary.left_to_spend == 2900.0
    assert view.summary.average_daily == 10.0
    assert view.summary.days_remaining == 21
    assert view.summary.predicted_spending == 210.0
    assert [point.amount for point in view.daily_series] == [0, 0, 0, 0, 20.0, 0, 30.0]
    assert view.week_change.current == 50.0
    assert view.week_change.last == 90.0
    assert [summary.category for summary in view.breakdown.categories] == ["Eating Out", "Transport"]
    assert view.goals[0].progress == 0.0
