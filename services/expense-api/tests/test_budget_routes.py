import datetime as dt

import pytest
from fastapi.testclient import TestClient


def test_saving_same_category_and_period_updates_limit(client: TestClient, auth_headers) -> None:
    first = client.post("/api/budgets", json={"category": "Food", "limit": 200, "period": "monthly"}, headers=auth_headers)
    second = client.post("/api/budgets", json={"category": "Food", "limit": 250, "period": "monthly"}, headers=auth_headers)
    weekly = client.post("/api/budgets", json={"category": "Food", "limit": 60, "period": "weekly"}, headers=auth_headers)

    assert first.status_code == 200
    assert second.json()["budget"]["id"] == first.json()["budget"]["id"]
    assert weekly.json()["budget"]["id"] != first.json()["budget"]["id"]

    budgets = client.get("/api/budgets", headers=auth_headers).json()["budgets"]
    assert sorted((item["period"], item["limit"]) for item in budgets) == [("monthly", 250.0), ("weekly", 60.0)]


def test_budget_rejects_unknown_category(client: TestClient, auth_headers) -> None:
    response = client.post("/api/budgets", json={"category": "Pets", "limit": 10}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_category"


@pytest.mark.parametrize("literal", ["Infinity", "NaN"])
def test_budget_rejects_non_finite_limit(client: TestClient, auth_headers, literal: str) -> None:
    response = client.post(
        "/api/budgets",
        content=f'{{"category": "Total", "limit": {literal}, "period": "monthly"}}',
        headers={**auth_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 422
    assert client.get("/api/budgets", headers=auth_headers).json()["budgets"] == []


def test_delete_budget(client: TestClient, auth_headers) -> None:
    budget_id = client.post("/api/budgets", json={"category": "Total", "limit": 500}, headers=auth_headers).json()[
        "budget"
    ]["id"]

    assert client.delete(f"/api/budgets/{budget_id}", headers=auth_headers).status_code == 200
    assert client.get("/api/budgets", headers=auth_headers).json()["budgets"] == []
    assert client.delete(f"/api/budgets/{budget_id}", headers=auth_headers).status_code == 404


def test_budget_status_tracks_current_period(client: TestClient, register_user, insert_expense, frozen_clock) -> None:
    account = register_user()
    headers = {"Authorization": account["Authorization"]}
    user_id = account["user_id"]
    client.post("/api/budgets", json={"category": "Food", "limit": 100, "period": "weekly"}, headers=headers)
    client.post("/api/budgets", json={"category": "Total", "limit": 500, "period": "monthly"}, headers=headers)
    # Week of Sunday 2024-01-14; the 12th only counts toward the month.
    insert_expense(user_id, 80.0, "Food", dt.date(2024, 1, 15))
    insert_expense(user_id, 45.0, "Food", dt.date(2024, 1, 16))
    insert_expense(user_id, 70.0, "Bills", dt.date(2024, 1, 12))
    insert_expense(user_id, 999.0, "Bills", dt.date(2023, 12, 31))

    response = client.get("/api/budgets/status", headers=headers)

    assert response.status_code == 200
    statuses = {item["budget"]["category"]: item for item in response.json()["budgetStatus"]}
    food = statuses["Food"]
    assert food["spent"] == pytest.approx(125.0)
    assert food["remaining"] == pytest.approx(-25.0)
    assert food["percentage"] == pytest.approx(125.0)
    assert food["isOverBudget"] is True

    total = statuses["Total"]
    assert total["spent"] == pytest.approx(195.0)
    assert total["remaining"] == pytest.approx(305.0)
    assert total["isOverBudget"] is False
