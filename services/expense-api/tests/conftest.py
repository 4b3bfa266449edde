"""Pytest configuration for expense-api tests.

Ensures the service's own src directory takes precedence in sys.path and points
the API at a throwaway SQLite file before `main` is imported.
"""

import os
import sys
import tempfile
from pathlib import Path

SERVICE_SRC = Path(__file__).resolve().parents[1] / "src"
SERVICES_ROOT = Path(__file__).resolve().parents[2]

for path in (SERVICES_ROOT, SERVICE_SRC):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="spendwise-tests-"))
os.environ.setdefault("SPENDWISE_DB_URL", f"sqlite:///{_TEST_DB_DIR / 'spendwise.db'}")
os.environ.setdefault("SPENDWISE_JWT_SECRET", "test-secret")
os.environ.setdefault("SPENDWISE_ENV", "test")
os.environ.setdefault("SPENDWISE_RATE_LIMIT_PER_WINDOW", "100000")

import datetime as dt  # noqa: E402
from typing import Callable, Dict  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402
from persistence.database import SessionLocal, init_db  # noqa: E402
from persistence.models import Budget, Expense, User  # noqa: E402

init_db()


@pytest.fixture(autouse=True)
def reset_db():
    yield
    session = SessionLocal()
    session.query(Budget).delete()
    session.query(Expense).delete()
    session.query(User).delete()
    session.commit()
    session.close()


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_user(client: TestClient) -> Callable[..., Dict[str, str]]:
    """Register an account and return its id plus ready-to-use auth headers."""

    def _register(email: str = "ana@example.com", password: str = "secret123", name: str = "Ana") -> Dict[str, str]:
        response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
        assert response.status_code == 201, response.text
        payload = response.json()
        return {
            "user_id": payload["user"]["id"],
            "token": payload["token"],
            "Authorization": f"Bearer {payload['token']}",
        }

    return _register


@pytest.fixture
def auth_headers(register_user) -> Dict[str, str]:
    account = register_user()
    return {"Authorization": account["Authorization"]}


@pytest.fixture
def insert_expense() -> Callable[..., str]:
    """Write an expense row directly so tests control its creation timestamp."""

    def _insert(
        user_id: str,
        amount: float,
        category: str,
        date: dt.date,
        timestamp: dt.datetime | None = None,
        description: str = "test expense",
    ) -> str:
        expense_id = str(uuid4())
        with SessionLocal() as session:
            session.add(
                Expense(
                    id=expense_id,
                    user_id=user_id,
                    amount=amount,
                    category=category,
                    description=description,
                    date=date,
                    timestamp=timestamp or dt.datetime.combine(date, dt.time(12, 0)),
                    source="manual",
                )
            )
            session.commit()
        return expense_id

    return _insert


@pytest.fixture
def frozen_clock():
    """Pin the analytics reference instant; yields a setter for other instants."""
    original = app.state.clock

    def _freeze(moment: dt.datetime) -> None:
        app.state.clock = lambda: moment

    _freeze(dt.datetime(2024, 1, 17, 10, 30))
    yield _freeze
    app.state.clock = original
