"""Budget engine: overlap, intersection window and usage figures."""

from __future__ import annotations

from decimal import Decimal

import pytest


@pytest.fixture
def add_budget(client, headers):
    def _add(amount, start_date, end_date, category_id=None, name="Budget"):
        response = client.post("/budgets/", json={
            "name": name, "amount": str(amount), "category_id": category_id,
            "start_date": start_date, "end_date": end_date,
        }, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _add


def read_budgets(client, headers, month=3, year=2024):
    response = client.get("/budgets/", params={"month": month, "year": year}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_spending_counts_only_the_intersection(client, headers, category_ids, add_budget, add_transaction) -> None:
    food = category_ids["Food"]
    add_budget(100, "2024-02-15", "2024-03-15", category_id=food)
    add_transaction(30, "2024-03-01", category_id=food)   # inside both
    add_transaction(50, "2024-02-20", category_id=food)   # before the period
    add_transaction(70, "2024-03-20", category_id=food)   # after the budget
    add_transaction(20, "2024-03-02", category_id=category_ids["Health"])
    add_transaction(999, "2024-03-03", transaction_type="INCOME", category_id=food)

    [budget] = read_budgets(client, headers)
    assert Decimal(budget["spent"]) == Decimal("30")
    assert Decimal(budget["remaining"]) == Decimal("70")
    assert budget["percentage"] == 30
    assert budget["status"] == "normal"
    assert budget["category"]["name"] == "Food"


def test_budget_without_category_counts_everything(client, headers, category_ids, add_budget, add_transaction) -> None:
    add_budget(200, "2024-03-01", "2024-03-31")
    add_transaction(100, "2024-03-05", category_id=category_ids["Food"])
    add_transaction(80, "2024-03-06")

    [budget] = read_budgets(client, headers)
    assert Decimal(budget["spent"]) == Decimal("180")
    assert budget["percentage"] == 90
    assert budget["status"] == "near_limit"


def test_overspent_budget(client, headers, add_budget, add_transaction) -> None:
    add_budget(100, "2024-03-01", "2024-03-31")
    add_transaction(150, "2024-03-05")

    [budget] = read_budgets(client, headers)
    assert budget["percentage"] == 150
    assert budget["display_percentage"] == 100
    assert Decimal(budget["remaining"]) == Decimal("-50")
    assert budget["status"] == "over_budget"


def test_zero_amount_budget(client, headers, add_budget, add_transaction) -> None:
    add_budget(0, "2024-03-01", "2024-03-31")
    add_transaction(10, "2024-03-05")

    [budget] = read_budgets(client, headers)
    assert budget["percentage"] == 0


def test_only_overlapping_budgets_listed_in_start_order(client, headers, add_budget) -> None:
    add_budget(100, "2024-03-10", "2024-04-10", name="Late")
    add_budget(100, "2024-02-01", "2024-03-01", name="Early")
    add_budget(100, "2024-01-01", "2024-01-31", name="January")

    assert [b["name"] for b in read_budgets(client, headers)] == ["Early", "Late"]


def test_end_before_start_rejected(client, headers, add_budget) -> None:
    response = client.post("/budgets/", json={
        "name": "Bad", "amount": "10", "start_date": "2024-03-31", "end_date": "2024-03-01",
    }, headers=headers)
    assert response.status_code == 422

    budget = add_budget(10, "2024-03-01", "2024-03-31")
    response = client.put(f"/budgets/{budget['id']}", json={"end_date": "2024-02-01"}, headers=headers)
    assert response.status_code == 400


def test_invalid_month_rejected(client, headers) -> None:
    assert client.get("/budgets/", params={"month": 13}, headers=headers).status_code == 400


def test_update_and_delete_budget(client, headers, other_headers, add_budget) -> None:
    budget = add_budget(10, "2024-03-01", "2024-03-31")

    response = client.put(f"/budgets/{budget['id']}", json={"amount": "25"}, headers=headers)
    assert Decimal(response.json()["amount"]) == Decimal("25")

    assert client.delete(f"/budgets/{budget['id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/budgets/{budget['id']}", headers=headers).status_code == 204
    assert read_budgets(client, headers) == []


def test_budget_with_foreign_category_is_not_found(client, other_headers, category_ids) -> None:
    response = client.post("/budgets/", json={
        "name": "Food", "amount": "10", "category_id": category_ids["Food"],
        "start_date": "2024-03-01", "end_date": "2024-03-31",
    }, headers=other_headers)
    assert response.status_code == 404


def test_blank_name_rejected(client, headers, add_budget) -> None:
    response = client.post("/budgets/", json={
        "name": "  ", "amount": "10", "start_date": "2024-03-01", "end_date": "2024-03-31",
    }, headers=headers)
    assert response.status_code == 422

    budget = add_budget(10, "2024-03-01", "2024-03-31")
    assert client.put(f"/budgets/{budget['id']}", json={"name": " "}, headers=headers).status_code == 422
