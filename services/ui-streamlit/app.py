import datetime as dt
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

SERVICES_ROOT = Path(__file__).resolve().parents[1]
if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICES_ROOT))

from app_state import AppState  # noqa: E402
from calendar_grid import DAY_NAMES, build_month_grid, shift_month  # noqa: E402
from local_store import LocalStateStore  # noqa: E402
from onboarding import COUNTRIES, HABITS, TOTAL_STEPS, build_user_data, can_proceed, toggle_habit  # noqa: E402
from shared.analytics import average_daily_spend, build_daily_series  # noqa: E402
from shared.categories import CLIENT_PRESETS, category_emoji  # noqa: E402
from shared.observability import configure_logging  # noqa: E402

configure_logging("ui-streamlit")

PAGES = ("Dashboard", "Calendar", "Trends")

DARK_THEME_CSS = """
<style>
.stApp { background-color: #0f172a; color: #e2e8f0; }
</style>
"""


def get_app_state() -> AppState:
    if "app_state" not in st.session_state:
        st.session_state["app_state"] = AppState.load(LocalStateStore())
    return st.session_state["app_state"]


def init_session_state() -> None:
    today = dt.date.today()
    defaults = {
        "page": PAGES[0],
        "onboarding_step": 1,
        "onboarding_age": "",
        "onboarding_country": None,  # type: Optional[str]
        "onboarding_income": "",
        "onboarding_fixed_expenses": [{"name": "", "amount": ""}],
        "onboarding_habits": [],  # type: List[str]
        "calendar_year": today.year,
        "calendar_month": today.month,
        "selected_day": None,  # type: Optional[dt.date]
    }

    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def format_currency(amount: float, symbol: str) -> str:
    return f"{symbol}{amount:,.2f}"


def render_onboarding(state: AppState) -> None:
    step = st.session_state["onboarding_step"]
    st.title("Welcome to SpendWise")
    st.progress(step / TOTAL_STEPS)
    st.caption(f"Step {step} of {TOTAL_STEPS}")

    country_codes = [country.code for country in COUNTRIES]
    selected_code = st.session_state.get("onboarding_country")
    selected_country = next((c for c in COUNTRIES if c.code == selected_code), None)

    if step == 1:
        st.session_state["onboarding_age"] = st.text_input(
            "How old are you?", value=st.session_state["onboarding_age"]
        )
    elif step == 2:
        index = country_codes.index(selected_code) if selected_code in country_codes else None
        choice = st.selectbox(
            "Where do you live?",
            country_codes,
            index=index,
            format_func=lambda code: next(
                f"{c.flag} {c.name} - {c.currency} ({c.symbol})" for c in COUNTRIES if c.code == code
            ),
        )
        st.session_state["onboarding_country"] = choice
        selected_country = next((c for c in COUNTRIES if c.code == choice), None)
    elif step == 3:
        symbol = selected_country.symbol if selected_country else ""
        st.session_state["onboarding_income"] = st.text_input(
            f"Monthly income ({symbol})", value=st.session_state["onboarding_income"]
        )
    elif step == 4:
        st.subheader("Fixed monthly expenses")
        rows: List[Dict[str, Any]] = st.session_state["onboarding_fixed_expenses"]
        for index, row in enumerate(rows):
            name_col, amount_col = st.columns(2)
            row["name"] = name_col.text_input("Name", value=row["name"], key=f"fixed_name_{index}")
            row["amount"] = amount_col.text_input("Amount", value=row["amount"], key=f"fixed_amount_{index}")
        if st.button("Add another"):
            rows.append({"name": "", "amount": ""})
            st.rerun()
    else:
        st.subheader("What do you usually spend on?")
        selected: List[str] = st.session_state["onboarding_habits"]
        columns = st.columns(4)
        for index, (habit, emoji) in enumerate(HABITS):
            active = habit in selected
            if columns[index % 4].button(f"{emoji} {habit}" + (" ✓" if active else ""), key=f"habit_{habit}"):
                st.session_state["onboarding_habits"] = toggle_habit(selected, habit)
                st.rerun()

    back_col, next_col = st.columns(2)
    if step > 1 and back_col.button("Back"):
        st.session_state["onboarding_step"] = step - 1
        st.rerun()

    ready = can_proceed(
        step,
        age=st.session_state["onboarding_age"],
        country=selected_country,
        income=st.session_state["onboarding_income"],
    )
    if step < TOTAL_STEPS:
        if next_col.button("Next", disabled=not ready):
            st.session_state["onboarding_step"] = step + 1
            st.rerun()
        return

    if next_col.button("Finish", disabled=selected_country is None):
        user_data = build_user_data(
            age=st.session_state["onboarding_age"],
            country=selected_country,
            income=st.session_state["onboarding_income"],
            fixed_expenses=st.session_state["onboarding_fixed_expenses"],
            spending_habits=st.session_state["onboarding_habits"],
        )
        state.complete_onboarding(user_data)
        st.rerun()


def render_expense_form(state: AppState) -> None:
    preset_names = [name for name, _ in CLIENT_PRESETS]
    with st.form("add_expense_form", clear_on_submit=True):
        st.subheader("Add expense")
        amount = st.number_input("Amount", min_value=0.0, step=1.0)
        preset = st.selectbox(
            "Category",
            preset_names,
            format_func=lambda name: f"{category_emoji(name)} {name}",
        )
        custom = st.text_input("Or a custom category")
        date = st.date_input("Date", value=dt.date.today())
        submitted = st.form_submit_button("Add")

    if submitted:
        if amount <= 0:
            st.error("Amount must be greater than 0.")
            return
        state.add_expense(amount=amount, category=custom.strip() or preset, date=date)
        st.rerun()


def render_goal_form(state: AppState) -> None:
    with st.form("add_goal_form", clear_on_submit=True):
        name = st.text_input("Goal name")
        target_amount = st.number_input("Target amount", min_value=0.0, step=100.0)
        target_date = st.date_input("Target date", value=dt.date.today() + dt.timedelta(days=90))
        submitted = st.form_submit_button("Add goal")

    if submitted:
        if not name.strip() or target_amount <= 0:
            st.error("A goal needs a name and a target amount.")
            return
        state.add_goal(name=name.strip(), target_amount=target_amount, target_date=target_date)
        st.rerun()


def render_dashboard(state: AppState) -> None:
    today = dt.date.today()
    symbol = state.currency_symbol
    view = state.dashboard(today)

    st.title("Dashboard")
    if state.show_first_time_guide:
        st.info("Start by adding your first expense below. Everything stays on this device.")
        if st.button("Got it"):
            state.close_guide()
            st.rerun()

    summary = view.summary
    cols = st.columns(3)
    cols[0].metric("Monthly income", format_currency(summary.income, symbol))
    cols[1].metric("Spent this month", format_currency(summary.spent, symbol))
    cols[2].metric("Left to spend", format_currency(summary.left_to_spend, symbol))
    st.caption(
        f"Average {format_currency(summary.average_daily, symbol)} per day. "
        f"At this pace you will spend {format_currency(summary.predicted_spending, symbol)} more "
        f"over the remaining {summary.days_remaining} days."
    )

    st.subheader("Last 7 days")
    series = pd.DataFrame(
        {"Day": [point.label for point in view.daily_series], "Amount": [point.amount for point in view.daily_series]}
    )
    st.bar_chart(series, x="Day", y="Amount")
    change = view.week_change
    st.metric(
        "This week",
        format_currency(change.current, symbol),
        delta=f"{change.change:+.1f}% vs last week",
        delta_color="inverse",
    )

    render_expense_form(state)

    st.subheader("Saving goals")
    if not view.goals:
        st.write("No goals yet.")
    for goal_view in view.goals:
        goal = goal_view.goal
        st.markdown(f"**{goal.name}** by {goal.target_date.isoformat()}")
        st.progress(min(goal_view.progress, 100.0) / 100)
        st.caption(
            f"{format_currency(goal.current_amount, symbol)} of {format_currency(goal.target_amount, symbol)} "
            f"({goal_view.progress:.0f}%)"
        )
    render_goal_form(state)


def render_calendar(state: AppState) -> None:
    symbol = state.currency_symbol
    year = st.session_state["calendar_year"]
    month = st.session_state["calendar_month"]
    grid = build_month_grid(year, month, state.expenses, dt.date.today())

    prev_col, title_col, next_col = st.columns([1, 3, 1])
    if prev_col.button("◀"):
        st.session_state["calendar_year"], st.session_state["calendar_month"] = shift_month(year, month, -1)
        st.session_state["selected_day"] = None
        st.rerun()
    title_col.subheader(grid.title)
    if next_col.button("▶"):
        st.session_state["calendar_year"], st.session_state["calendar_month"] = shift_month(year, month, 1)
        st.session_state["selected_day"] = None
        st.rerun()

    for column, name in zip(st.columns(7), DAY_NAMES):
        column.caption(name)
    for week in grid.weeks:
        for column, cell in zip(st.columns(7), week):
            if cell is None:
                column.write("")
                continue
            label = f"{cell.day.day}"
            if cell.total:
                label += f"\n{format_currency(cell.total, symbol)}"
            if column.button(label, key=f"day_{cell.day.isoformat()}", type="primary" if cell.is_today else "secondary"):
                selected = st.session_state.get("selected_day")
                st.session_state["selected_day"] = None if selected == cell.day else cell.day
                st.rerun()

    selected_day: Optional[dt.date] = st.session_state.get("selected_day")
    if selected_day is None:
        return

    st.subheader(selected_day.strftime("%A, %d %B %Y"))
    day_expenses = [expense for expense in state.expenses if expense.date == selected_day]
    if not day_expenses:
        st.write("No expenses on this day.")
    for expense in day_expenses:
        with st.expander(f"{category_emoji(expense.category)} {expense.category}: {format_currency(expense.amount, symbol)}"):
            with st.form(f"edit_{expense.id}"):
                amount = st.number_input("Amount", min_value=0.0, value=float(expense.amount))
                category = st.text_input("Category", value=expense.category)
                date = st.date_input("Date", value=expense.date)
                save_col, delete_col = st.columns(2)
                saved = save_col.form_submit_button("Save")
                deleted = delete_col.form_submit_button("Delete")
            if saved:
                state.edit_expense(expense.id, amount=amount, category=category.strip() or expense.category, date=date)
                st.rerun()
            if deleted:
                state.delete_expense(expense.id)
                st.rerun()


def render_trends(state: AppState) -> None:
    today = dt.date.today()
    symbol = state.currency_symbol
    records = state.expense_records()
    series = build_daily_series(records, today, label_style="month_day")
    view = state.dashboard(today)

    st.title("Spending trends")
    cols = st.columns(2)
    cols[0].metric("Average per day (7 days)", format_currency(average_daily_spend(series), symbol))
    cols[1].metric(
        "Week over week",
        format_currency(view.week_change.current, symbol),
        delta=f"{view.week_change.change:+.1f}%",
        delta_color="inverse",
    )
    frame = pd.DataFrame({"Day": [point.label for point in series], "Amount": [point.amount for point in series]})
    st.line_chart(frame, x="Day", y="Amount")

    st.subheader("This month by category")
    breakdown = view.breakdown
    if not breakdown.categories:
        st.write("No expenses this month.")
        return
    rows = [
        {
            "Category": f"{category_emoji(summary.category)} {summary.category}",
            "Total": format_currency(summary.total, symbol),
            "Transactions": summary.count,
            "Share (%)": f"{summary.percentage:.1f}",
            "Average": format_currency(summary.avg_per_transaction, symbol),
        }
        for summary in breakdown.categories
    ]
    st.table(pd.DataFrame(rows))


def main() -> None:
    st.set_page_config(page_title="SpendWise", page_icon="💸")
    init_session_state()
    state = get_app_state()

    if state.theme == "dark":
        st.markdown(DARK_THEME_CSS, unsafe_allow_html=True)

    if not state.onboarding_complete:
        render_onboarding(state)
        return

    with st.sidebar:
        st.session_state["page"] = st.radio("View", PAGES, index=PAGES.index(st.session_state["page"]))
        if st.button("Toggle theme"):
            state.toggle_theme()
            st.rerun()

    page = st.session_state["page"]
    if page == "Calendar":
        render_calendar(state)
    elif page == "Trends":
        render_trends(state)
    else:
        render_dashboard(state)


if __name__ == "__main__":
    main()
