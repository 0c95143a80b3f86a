"""Goal tracker endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal


def create_goal(client, headers, **overrides):
    payload = {"name": "Emergency fund", "target_amount": "1000", "target_date": "2999-12-31"}
    payload.update(overrides)
    response = client.post("/goals/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_new_goal_starts_at_zero(client, headers) -> None:
    goal = create_goal(client, headers)
    assert Decimal(goal["current_amount"]) == 0
    assert goal["progress"] == 0
    assert Decimal(goal["remaining"]) == Decimal("1000")
    assert goal["status"] == "in_progress"


def test_goal_past_target_date_is_overdue(client, headers) -> None:
    goal = create_goal(client, headers, current_amount="400", target_date="2020-01-01")
    assert goal["days_left"] < 0
    assert goal["progress"] < 100
    assert goal["is_completed"] is False
    assert goal["status"] == "overdue"


def test_goal_near_deadline(client, headers) -> None:
    soon = (date.today() + timedelta(days=10)).isoformat()
    assert create_goal(client, headers, target_date=soon)["status"] == "near_deadline"


def test_update_sets_current_amount(client, headers) -> None:
    goal = create_goal(client, headers, current_amount="300")

    response = client.put(f"/goals/{goal['id']}", json={"current_amount": "1000"}, headers=headers)
    body = response.json()
    assert Decimal(body["current_amount"]) == Decimal("1000")
    assert body["is_completed"] is True
    assert body["status"] == "completed"

    response = client.put(f"/goals/{goal['id']}", json={"current_amount": "200"}, headers=headers)
    assert Decimal(response.json()["current_amount"]) == Decimal("200")


def test_goals_listed_by_target_date(client, headers) -> None:
    create_goal(client, headers, name="Later", target_date="2999-06-01")
    create_goal(client, headers, name="Sooner", target_date="2998-01-01")

    names = [g["name"] for g in client.get("/goals/", headers=headers).json()]
    assert names == ["Sooner", "Later"]


def test_target_must_be_positive(client, headers) -> None:
    response = client.post("/goals/", json={"name": "x", "target_amount": "0", "target_date": "2999-01-01"},
                           headers=headers)
    assert response.status_code == 422


def test_delete_goal_and_ownership(client, headers, other_headers) -> None:
    goal = create_goal(client, headers)
    assert client.put(f"/goals/{goal['id']}", json={"name": "Mine"}, headers=other_headers).status_code == 404
    assert client.delete(f"/goals/{goal['id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/goals/{goal['id']}", headers=headers).status_code == 204
    assert client.get("/goals/", headers=headers).json() == []


def test_blank_name_rejected(client, headers) -> None:
    response = client.post("/goals/", json={"name": " ", "target_amount": "10", "target_date": "2999-01-01"},
                           headers=headers)
    assert response.status_code == 422

    goal = create_goal(client, headers)
    assert client.put(f"/goals/{goal['id']}", json={"name": "\t"}, headers=headers).status_code == 422
