from __future__ import annotations

import datetime as dt
from pathlib import Path

from sqlalchemy.orm import sessionmaker

from persistence.database import build_engine, init_db
from persistence.models import Expense, User
from persistence.repository import BudgetRepository, ExpenseRepository, UserRepository


def _factory(tmp_path: Path):
    engine = build_engine(f"sqlite:///{tmp_path / 'repo.db'}")
    init_db(engine)
    return engine, sessionmaker(bind=engine, expire_on_commit=False)


def test_expenses_survive_new_engine(tmp_path: Path) -> None:
    """Expense rows persist even after a new engine/session is created."""
    engine_one, factory_one = _factory(tmp_path)
    with factory_one() as session:
        user = UserRepository(session).create_user(email="a@example.com", password_hash="x", name="A")
        ExpenseRepository(session).create_expense(
            user.id,
            amount=12.0,
            category="Food",
            description="Lunch",
            date=dt.date(2024, 1, 2),
        )
        user_id = user.id
    engine_one.dispose()

    engine_two, factory_two = _factory(tmp_path)
    with factory_two() as session:
        records = ExpenseRepository(session).list_records(user_id)
    engine_two.dispose()

    assert len(records) == 1
    assert records[0].amount == 12.0
    assert records[0].date == dt.date(2024, 1, 2)
    assert records[0].timestamp is not None


def test_bulk_create_and_upsert_budget(tmp_path: Path) -> None:
    engine, factory = _factory(tmp_path)
    with factory() as session:
        user = UserRepository(session).create_user(email="b@example.com", password_hash="x", name="B")
        expenses = ExpenseRepository(session).bulk_create(
            user.id,
            [
                {"amount": 1.0, "category": "Food", "description": "Gum", "date": dt.date(2024, 1, 1)},
                {"amount": 2.0, "category": "Bills", "description": "Fee", "date": dt.date(2024, 1, 1)},
            ],
        )
        budgets = BudgetRepository(session)
        first, created_first = budgets.upsert_budget(user.id, category="Food", period="weekly", limit=10.0)
        second, created_second = budgets.upsert_budget(user.id, category="Food", period="weekly", limit=15.0)
        stored = budgets.list_records(user.id)

    engine.dispose()

    assert [expense.source for expense in expenses] == ["ocr", "ocr"]
    assert created_first is True
    assert created_second is False
    assert first.id == second.id
    assert len(stored) == 1
    assert stored[0].limit == 15.0


def test_deleting_a_user_cascades_to_expenses(tmp_path: Path) -> None:
    engine, factory = _factory(tmp_path)
    with factory() as session:
        user = UserRepository(session).create_user(email="c@example.com", password_hash="x", name="C")
        ExpenseRepository(session).create_expense(
            user.id,
            amount=3.0,
            category="Other",
            description="Stamp",
            date=dt.date(2024, 2, 1),
        )
        session.delete(session.get(User, user.id))
        session.commit()
        remaining = session.query(Expense).count()
    engine.dispose()

    assert remaining == 0
