"""Period summary assembled from every store."""

from __future__ import annotations

from datetime import date
from decimal import Decimal


def read_summary(client, headers, month=3, year=2024):
    response = client.get("/summary/", params={"month": month, "year": year}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


def test_empty_summary(client, headers) -> None:
    body = read_summary(client, headers)
    assert Decimal(body["balance"]) == 0
    assert body["expenses_by_category"] == []
    assert body["budget_usage"] == 0
    assert body["completed_goals"] == 0
    assert body["period"] == {"month": 3, "year": 2024, "start_date": "2024-03-01", "end_date": "2024-03-31"}


def test_income_expense_and_health_score(client, headers, category_ids, add_transaction) -> None:
    add_transaction(10000, "2024-03-01", transaction_type="INCOME", category_id=category_ids["Salary"])
    add_transaction(4000, "2024-03-03", category_id=category_ids["Housing"])
    add_transaction(3000, "2024-03-31", category_id=category_ids["Food"])
    # Outside the period
    add_transaction(500, "2024-04-01", category_id=category_ids["Food"])
    add_transaction(800, "2024-02-29", transaction_type="INCOME")

    body = read_summary(client, headers)
    assert Decimal(body["total_income"]) == Decimal("10000")
    assert Decimal(body["total_expense"]) == Decimal("7000")
    assert Decimal(body["balance"]) == Decimal("3000")
    assert body["health_score"] == 100
    assert [e["category_name"] for e in body["expenses_by_category"]] == ["Housing", "Food"]


def test_uncategorized_expenses_are_kept(client, headers, category_ids, add_transaction) -> None:
    add_transaction(40, "2024-03-02")
    add_transaction(60, "2024-03-03", category_id=category_ids["Food"])

    expenses = read_summary(client, headers)["expenses_by_category"]
    assert expenses[1] == {
        "category_id": None, "category_name": "Uncategorized", "color": "#6B7280", "amount": expenses[1]["amount"],
    }
    assert Decimal(expenses[1]["amount"]) == Decimal("40")


def test_summary_is_repeatable(client, headers, add_transaction) -> None:
    add_transaction(100, "2024-03-02", transaction_type="INCOME")
    add_transaction(30, "2024-03-02")
    assert read_summary(client, headers) == read_summary(client, headers)


def test_today_and_recent_transactions(client, headers, add_transaction) -> None:
    add_transaction(5, date.today().isoformat())
    for day in range(1, 12):
        add_transaction(day, f"2024-03-{day:02d}")

    body = read_summary(client, headers)
    assert body["today_transactions"] == 1
    assert len(body["recent_transactions"]) == 10
    assert body["recent_transactions"][0]["transaction_date"] == date.today().isoformat()


def test_budget_usage_is_the_mean_percentage(client, headers, add_transaction) -> None:
    for amount in (100, 200):
        client.post("/budgets/", json={
            "name": f"Cap {amount}", "amount": str(amount), "start_date": "2024-03-01", "end_date": "2024-03-31",
        }, headers=headers)
    add_transaction(100, "2024-03-10")

    # 100% and 50%
    assert read_summary(client, headers)["budget_usage"] == 75


def test_completed_goals(client, headers) -> None:
    client.post("/goals/", json={"name": "Done", "target_amount": "100", "current_amount": "100",
                                 "target_date": "2999-01-01"}, headers=headers)
    client.post("/goals/", json={"name": "Open", "target_amount": "100", "target_date": "2999-01-01"},
                headers=headers)
    assert read_summary(client, headers)["completed_goals"] == 1


def test_total_debt_uses_stored_balance(client, headers, add_transaction) -> None:
    owe = client.post("/debts/", json={"name": "Loan", "debt_type": "OWE", "total_amount": "1000",
                                       "start_date": "2023-01-01", "due_date": "2023-06-30"}, headers=headers).json()
    paid = client.post("/debts/", json={"name": "Card", "debt_type": "OWE", "total_amount": "300",
                                        "start_date": "2023-01-01"}, headers=headers).json()
    client.post(f"/debts/{owe['id']}/payments", json={"amount": "400", "payment_date": "2024-03-01"},
                headers=headers)
    client.post(f"/debts/{paid['id']}/payments", json={"amount": "300", "payment_date": "2024-03-01"},
                headers=headers)

    # Past due but still stored as ACTIVE, so it counts; the paid-off card does not
    body = read_summary(client, headers)
    assert Decimal(body["total_debt"]) == Decimal("600")
    # No income, so the debt penalty applies and the no-debt bonus does not
    assert body["health_score"] == 35


def test_invalid_month_rejected(client, headers) -> None:
    assert client.get("/summary/", params={"month": 13}, headers=headers).status_code == 400
    assert client.get("/summary/", params={"month": 0}, headers=headers).status_code == 400


def test_summary_defaults_to_current_month(client, headers) -> None:
    period = client.get("/summary/", headers=headers).json()["period"]
    assert period["month"] == date.today().month
    assert period["year"] == date.today().year


def test_summary_excludes_other_users(client, headers, other_headers, add_transaction) -> None:
    add_transaction(100, "2024-03-02", transaction_type="INCOME")
    assert Decimal(read_summary(client, other_headers)["total_income"]) == 0
