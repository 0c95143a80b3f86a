"""Category store endpoints."""

from __future__ import annotations


def test_create_category(client, headers) -> None:
    response = client.post(
        "/categories/",
        json={"name": "  Pets ", "color": "#123ABC", "category_type": "EXPENSE"},
        headers=headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Pets"
    assert body["color"] == "#123ABC"


def test_category_color_defaults_to_gray(client, headers) -> None:
    response = client.post("/categories/", json={"name": "Gifts", "category_type": "EXPENSE"}, headers=headers)
    assert response.json()["color"] == "#6B7280"


def test_duplicate_name_is_case_insensitive(client, headers) -> None:
    response = client.post("/categories/", json={"name": "food", "category_type": "EXPENSE"}, headers=headers)
    assert response.status_code == 400


def test_same_name_allowed_for_different_users(client, headers, other_headers) -> None:
    payload = {"name": "Pets", "category_type": "EXPENSE"}
    assert client.post("/categories/", json=payload, headers=headers).status_code == 201
    assert client.post("/categories/", json=payload, headers=other_headers).status_code == 201


def test_bad_color_is_a_request_error(client, headers) -> None:
    response = client.post(
        "/categories/", json={"name": "Pets", "color": "red", "category_type": "EXPENSE"}, headers=headers
    )
    assert response.status_code == 422


def test_update_category(client, headers, category_ids) -> None:
    response = client.put(f"/categories/{category_ids['Food']}", json={"name": "Groceries"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Groceries"
    assert response.json()["color"] == "#EF4444"


def test_update_to_existing_name_rejected(client, headers, category_ids) -> None:
    response = client.put(f"/categories/{category_ids['Food']}", json={"name": "Health"}, headers=headers)
    assert response.status_code == 400


def test_foreign_category_is_not_found(client, other_headers, category_ids) -> None:
    food_id = category_ids["Food"]
    assert client.put(f"/categories/{food_id}", json={"name": "Mine"}, headers=other_headers).status_code == 404
    assert client.delete(f"/categories/{food_id}", headers=other_headers).status_code == 404


def test_delete_unreferenced_category(client, headers, category_ids) -> None:
    response = client.delete(f"/categories/{category_ids['Clothing']}", headers=headers)
    assert response.status_code == 204
    names = [c["name"] for c in client.get("/categories/", headers=headers).json()]
    assert "Clothing" not in names


def test_delete_category_used_by_transaction_rejected(client, headers, category_ids, add_transaction) -> None:
    add_transaction(25, "2024-03-05", category_id=category_ids["Food"])
    response = client.delete(f"/categories/{category_ids['Food']}", headers=headers)
    assert response.status_code == 400
    assert "being used" in response.json()["detail"]


def test_delete_category_used_by_budget_rejected(client, headers, category_ids) -> None:
    client.post("/budgets/", json={
        "name": "Fun", "amount": "100", "category_id": category_ids["Entertainment"],
        "start_date": "2024-03-01", "end_date": "2024-03-31",
    }, headers=headers)
    assert client.delete(f"/categories/{category_ids['Entertainment']}", headers=headers).status_code == 400


def test_setup_is_idempotent(client, headers, category_ids) -> None:
    response = client.post("/categories/setup", headers=headers)
    assert response.status_code == 200
    assert response.json()["categories"] == []
    assert len(client.get("/categories/", headers=headers).json()) == 12


def test_setup_seeds_user_without_categories(client, headers, category_ids) -> None:
    for category_id in category_ids.values():
        assert client.delete(f"/categories/{category_id}", headers=headers).status_code == 204

    response = client.post("/categories/setup", headers=headers)
    assert len(response.json()["categories"]) == 12
