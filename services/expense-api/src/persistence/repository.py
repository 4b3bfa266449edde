"""Data access helpers for users, expenses, and budgets."""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterable
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from persistence.models import Budget, Expense, User
from shared.analytics import BudgetRecord, ExpenseRecord

EDITABLE_EXPENSE_FIELDS = ("amount", "category", "description", "date")


def _new_id() -> str:
    return str(uuid4())


def expense_to_record(expense: Expense) -> ExpenseRecord:
    return ExpenseRecord(
        id=expense.id,
        amount=expense.amount,
        category=expense.category,
        date=expense.date,
        timestamp=expense.timestamp,
        description=expense.description,
        source=expense.source,
    )


def budget_to_record(budget: Budget) -> BudgetRecord:
    return BudgetRecord(
        id=budget.id,
        category=budget.category,
        limit=budget.limit,
        period=budget.period,
    )


class UserRepository:
    """Thin repository that encapsulates account persistence."""

    def __init__(self, db: Session):
        self._db = db

    def create_user(self, *, email: str, password_hash: str, name: str) -> User:
        record = User(id=_new_id(), email=email, password_hash=password_hash, name=name)
        self._db.add(record)
        self._db.commit()
        self._db.refresh(record)
        return record

    def get_user(self, user_id: str) -> User | None:
        return self._db.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        return self._db.scalars(select(User).where(User.email == email)).first()


class ExpenseRepository:
    """Expense queries are always scoped to the owning user."""

    def __init__(self, db: Session):
        self._db = db

    def list_expenses(
        self,
        user_id: str,
        *,
        start_date: dt.date | None = None,
        end_date: dt.date | None = None,
        category: str | None = None,
    ) -> list[Expense]:
        """Newest first; date bounds are inclusive and applied independently."""
        statement = select(Expense).where(Expense.user_id == user_id)
        if start_date is not None:
            statement = statement.where(Expense.date >= start_date)
        if end_date is not None:
            statement = statement.where(Expense.date <= end_date)
        if category:
            statement = statement.where(Expense.category == category)
        statement = statement.order_by(Expense.timestamp.desc())
        return list(self._db.scalars(statement))

    def list_records(self, user_id: str, **filters: Any) -> list[ExpenseRecord]:
        return [expense_to_record(expense) for expense in self.list_expenses(user_id, **filters)]

    def get_expense(self, user_id: str, expense_id: str) -> Expense | None:
        expense = self._db.get(Expense, expense_id)
        if expense is None or expense.user_id != user_id:
            return None
        return expense

    def create_expense(
        self,
        user_id: str,
        *,
        amount: float,
        category: str,
        description: str,
        date: dt.date,
        source: str = "manual",
    ) -> Expense:
        record = self._build(user_id, amount, category, description, date, source)
        self._db.add(record)
        self._db.commit()
        self._db.refresh(record)
        return record

    def bulk_create(self, user_id: str, items: Iterable[dict[str, Any]], *, source: str = "ocr") -> list[Expense]:
        """Insert pre-parsed expenses in one transaction."""
        records = [
            self._build(
                user_id,
                item["amount"],
                item["category"],
                item["description"],
                item["date"],
                source,
            )
            for item in items
        ]
        self._db.add_all(records)
        self._db.commit()
        for record in records:
            self._db.refresh(record)
        return records

    def update_expense(self, user_id: str, expense_id: str, changes: dict[str, Any]) -> Expense | None:
        expense = self.get_expense(user_id, expense_id)
        if expense is None:
            return None
        for field_name in EDITABLE_EXPENSE_FIELDS:
            if changes.get(field_name) is not None:
                setattr(expense, field_name, changes[field_name])
        self._db.add(expense)
        self._db.commit()
        self._db.refresh(expense)
        return expense

    def delete_expense(self, user_id: str, expense_id: str) -> bool:
        expense = self.get_expense(user_id, expense_id)
        if expense is None:
            return False
        self._db.delete(expense)
        self._db.commit()
        return True

    def _build(
        self,
        user_id: str,
        amount: float,
        category: str,
        description: str,
        date: dt.date,
        source: str,
    ) -> Expense:
        return Expense(
            id=_new_id(),
            user_id=user_id,
            amount=amount,
            category=category,
            description=description,
            date=date,
            timestamp=dt.datetime.now(),
            source=source,
        )


class BudgetRepository:
    """Budgets are unique per (user, category, period); saving an existing triple updates it."""

    def __init__(self, db: Session):
        self._db = db

    def list_budgets(self, user_id: str) -> list[Budget]:
        statement = select(Budget).where(Budget.user_id == user_id).order_by(Budget.created_at, Budget.id)
        return list(self._db.scalars(statement))

    def list_records(self, user_id: str) -> list[BudgetRecord]:
        return [budget_to_record(budget) for budget in self.list_budgets(user_id)]

    def upsert_budget(self, user_id: str, *, category: str, period: str, limit: float) -> tuple[Budget, bool]:
        """Return the saved budget and whether it was newly created."""
        existing = self._db.scalars(
            select(Budget).where(
                Budget.user_id == user_id,
                Budget.category == category,
                Budget.period == period,
            )
        ).first()
        created = existing is None
        if existing is None:
            existing = Budget(id=_new_id(), user_id=user_id, category=category, period=period, limit=limit)
        else:
            existing.limit = limit
        self._db.add(existing)
        self._db.commit()
        self._db.refresh(existing)
        return existing, created

    def delete_budget(self, user_id: str, budget_id: str) -> bool:
        budget = self._db.get(Budget, budget_id)
        if budget is None or budget.user_id != user_id:
            return False
        self._db.delete(budget)
        self._db.commit()
        return True

