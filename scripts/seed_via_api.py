import subprocess
import time
import json
import os
import signal
import requests
import random
from datetime import date, timedelta
from faker import Faker

# --- Configuration ---
BASE_URL = "http://127.0.0.1:8000"
UVICORN_COMMAND = ["uvicorn", "finance_tracker.main:app"]

fake = Faker()

# Set once the user exists; every other endpoint needs it
HEADERS = {}


# --- Helper Function for API Requests ---
def run_api_request(method: str, endpoint: str, data: dict = None, params: dict = None):
    """Makes an API request and returns the JSON response."""
    url = f"{BASE_URL}{endpoint}"
    try:
        # The default json encoder in requests cannot handle Decimal or date
        json_data = json.dumps(data, default=str) if data else None
        headers = dict(HEADERS)
        if json_data:
            headers['Content-Type'] = 'application/json'
        response = requests.request(method, url, data=json_data, params=params, headers=headers, timeout=10)
        response.raise_for_status()
        if not response.text:
            return None
        return response.json()
    except requests.exceptions.HTTPError as e:
        print(f"Error: HTTP {e.response.status_code} for {url}\nResponse: {e.response.text}")
        return None
    except requests.exceptions.RequestException as e:
        print(f"An unexpected error occurred: {e}")
        return None


def seed_transactions(categories):
    print("--- Seeding Transactions ---")
    income = [c for c in categories if c['category_type'] == 'INCOME']
    expense = [c for c in categories if c['category_type'] == 'EXPENSE']
    created = 0

    for _ in range(120):
        is_income = random.random() < 0.15
        category = random.choice(income if is_income else expense)
        trans_data = {
            "transaction_date": fake.date_between(start_date="-90d", end_date="today").isoformat(),
            "amount": round(random.uniform(1500, 5000) if is_income else random.uniform(5, 300), 2),
            "transaction_type": "INCOME" if is_income else "EXPENSE",
            "description": fake.sentence(nb_words=4).rstrip('.'),
            "category_id": category['id'],
        }
        if run_api_request("POST", "/transactions/", trans_data):
            created += 1
    print(f"{created} transactions created.")


def seed_budgets(categories):
    print("--- Seeding Budgets ---")
    today = date.today()
    start = today.replace(day=1)
    end = (start + timedelta(days=32)).replace(day=1) - timedelta(days=1)
    expense = [c for c in categories if c['category_type'] == 'EXPENSE']

    run_api_request("POST", "/budgets/", {
        "name": "Monthly spending", "amount": 3000,
        "start_date": start.isoformat(), "end_date": end.isoformat(),
    })
    for category in random.sample(expense, k=3):
        run_api_request("POST", "/budgets/", {
            "name": f"{category['name']} budget", "amount": round(random.uniform(150, 600), 2),
            "category_id": category['id'], "start_date": start.isoformat(), "end_date": end.isoformat(),
        })


def seed_debts():
    print("--- Seeding Debts ---")
    for debt_type in ("OWE", "LEND"):
        total = round(random.uniform(1000, 8000), 2)
        start = fake.date_between(start_date="-1y", end_date="-30d")
        debt = run_api_request("POST", "/debts/", {
            "name": fake.catch_phrase(), "debt_type": debt_type, "total_amount": total,
            "creditor_name": fake.name(), "start_date": start.isoformat(),
            "due_date": (start + timedelta(days=365)).isoformat(),
        })
        if not debt:
            continue
        for _ in range(random.randint(1, 4)):
            run_api_request("POST", f"/debts/{debt['id']}/payments", {
                "amount": round(total * random.uniform(0.05, 0.2), 2),
                "payment_date": fake.date_between(start_date=start, end_date="today").isoformat(),
            })


def seed_goals():
    print("--- Seeding Goals ---")
    for name in ("Emergency fund", "Vacation"):
        run_api_request("POST", "/goals/", {
            "name": name, "target_amount": round(random.uniform(2000, 10000), 2),
            "current_amount": round(random.uniform(0, 2000), 2),
            "target_date": fake.date_between(start_date="+30d", end_date="+1y").isoformat(),
        })


def main():
    """Starts the server, seeds data for one user through the API, and shuts down the server."""

    print("--- Resetting database with Alembic ---")
    try:
        print("Downgrading database...")
        subprocess.run(["alembic", "downgrade", "base"], check=True, capture_output=True, text=True)
        print("Upgrading database...")
        subprocess.run(["alembic", "upgrade", "head"], check=True, capture_output=True, text=True)
        print("Database reset successfully.")
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        print(f"Error during database reset: {e}")
        if hasattr(e, 'stderr') and e.stderr:
            print(e.stderr)
        return

    server_process = subprocess.Popen(UVICORN_COMMAND, env={**os.environ, "AUTO_CREATE_TABLES": "false"})
    time.sleep(5)
    print(f"Server started with PID: {server_process.pid}")

    try:
        print("--- Creating User ---")
        user = run_api_request("POST", "/users/", {"email": "testuser@example.com", "username": "testuser"})
        if not user:
            return
        HEADERS["X-User-Id"] = str(user["db_id"])

        categories = run_api_request("GET", "/categories/") or []

        seed_transactions(categories)
        seed_budgets(categories)
        seed_debts()
        seed_goals()

        summary = run_api_request("GET", "/summary/")
        if summary:
            print(f"Health score this month: {summary['health_score']}")

        print("\n--- Seeding Complete ---")

    finally:
        if server_process:
            print("\n--- Shutting down server ---")
            os.kill(server_process.pid, signal.SIGTERM)
            server_process.wait()
            print("Server shut down.")


if __name__ == "__main__":
    main()
