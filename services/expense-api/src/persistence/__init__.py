"""Persistence primitives for the expense API."""

from persistence.database import (
    DB_URL_ENV_VAR,
    DEFAULT_DB_PATH,
    SessionLocal,
    build_engine,
    get_database_url,
    get_engine,
    get_session,
    init_db,
)
from persistence.models import Base, Budget, Expense, User
from persistence.repository import BudgetRepository, ExpenseRepository, UserRepository

__all__ = [
    "Base",
    "Budget",
    "BudgetRepository",
    "DB_URL_ENV_VAR",
    "DEFAULT_DB_PATH",
    "Expense",
    "ExpenseRepository",
    "SessionLocal",
    "User",
    "UserRepository",
    "build_engine",
    "get_database_url",
    "get_engine",
    "get_session",
    "init_db",
]
