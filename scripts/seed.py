import sys
import os
import random
from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta
from decimal import Decimal
from faker import Faker

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from finance_tracker.db.core import (
    session_local,
    init_db,
    UserDB,
    CategoryDB,
    TransactionDB,
    BudgetDB,
    DebtDB,
    DebtPaymentDB,
    GoalDB,
    CategoryType,
    TransactionType,
    DebtType,
    DebtStatus,
)
from finance_tracker.crud.crud_category import setup_default_categories
from finance_tracker.services.calculations import month_bounds, refreshed_debt_cache

fake = Faker()

USER_COUNT = 5
MONTHS_OF_HISTORY = 6


def money(low: float, high: float) -> Decimal:
    return Decimal(str(round(random.uniform(low, high), 2)))


def seed_transactions(db: Session, user: UserDB, categories: list) -> int:
    income_categories = [c for c in categories if c.category_type == CategoryType.INCOME]
    expense_categories = [c for c in categories if c.category_type == CategoryType.EXPENSE]
    today = date.today()
    count = 0

    for months_back in range(MONTHS_OF_HISTORY):
        month = (today.month - months_back - 1) % 12 + 1
        year = today.year + (today.month - months_back - 1) // 12
        start, end = month_bounds(month, year)
        end = min(end, today)

        # Payday plus the odd bonus
        db.add(TransactionDB(
            user_id=user.db_id,
            category_id=income_categories[0].id,
            amount=money(3500, 6500),
            description="Monthly salary",
            transaction_date=start,
            transaction_type=TransactionType.INCOME,
        ))
        count += 1

        for _ in range(random.randint(15, 40)):
            category = random.choice(expense_categories + [None])
            db.add(TransactionDB(
                user_id=user.db_id,
                category_id=category.id if category else None,
                amount=money(5, 400),
                description=fake.sentence(nb_words=4).rstrip('.'),
                transaction_date=fake.date_between(start_date=start, end_date=end),
                transaction_type=TransactionType.EXPENSE,
            ))
            count += 1

    return count


def seed_budgets(db: Session, user: UserDB, categories: list) -> None:
    start, end = month_bounds(date.today().month, date.today().year)
    expense_categories = [c for c in categories if c.category_type == CategoryType.EXPENSE]

    db.add(BudgetDB(user_id=user.db_id, name="Monthly spending", amount=money(2500, 4000),
                    start_date=start, end_date=end))
    for category in random.sample(expense_categories, k=3):
        db.add(BudgetDB(user_id=user.db_id, category_id=category.id, name=f"{category.name} budget",
                        amount=money(150, 800), start_date=start, end_date=end))


def seed_debts(db: Session, user: UserDB) -> None:
    for debt_type in (DebtType.OWE, DebtType.OWE, DebtType.LEND):
        total = money(500, 15000)
        start = fake.date_between(start_date="-1y", end_date="-60d")
        debt = DebtDB(
            user_id=user.db_id,
            name=fake.catch_phrase() if debt_type == DebtType.OWE else f"Loan to {fake.first_name()}",
            debt_type=debt_type,
            total_amount=total,
            interest_rate=money(0, 18) if debt_type == DebtType.OWE else None,
            creditor_name=fake.company() if debt_type == DebtType.OWE else fake.name(),
            start_date=start,
            due_date=start + timedelta(days=random.randint(90, 720)),
            remaining_amount=total,
            status=DebtStatus.ACTIVE,
        )
        db.add(debt)
        db.flush()

        paid = Decimal("0.00")
        for _ in range(random.randint(0, 6)):
            amount = (total * Decimal(str(random.uniform(0.05, 0.25)))).quantize(Decimal("0.01"))
            db.add(DebtPaymentDB(
                user_id=user.db_id,
                debt_id=debt.id,
                amount=amount,
                payment_date=fake.date_between(start_date=start, end_date="today"),
                description="Scheduled payment",
            ))
            paid += amount

        debt.remaining_amount, debt.status = refreshed_debt_cache(total, paid, debt.status)


def seed_goals(db: Session, user: UserDB) -> None:
    for name in ("Emergency fund", "Vacation", "New laptop"):
        target = money(1000, 20000)
        db.add(GoalDB(
            user_id=user.db_id,
            name=name,
            target_amount=target,
            current_amount=(target * Decimal(str(random.uniform(0, 1.1)))).quantize(Decimal("0.01")),
            target_date=fake.date_between(start_date="-30d", end_date="+2y"),
        ))


def seed_database():
    """
    Fills the database with sample data for a handful of users.
    """
    init_db()
    db: Session = session_local()

    try:
        # Check if data exists to prevent duplicate seeding
        if db.query(UserDB).count() > 0:
            print("Database appears to be already seeded. Exiting.")
            return

        print("Seeding database with sample data...")

        for i in range(USER_COUNT):
            print(f"--- Seeding User {i+1}/{USER_COUNT} ---")

            user = UserDB(
                email=fake.unique.email(),
                username=fake.unique.user_name(),
                created_at=datetime.utcnow(),
            )
            db.add(user)
            db.flush()

            setup_default_categories(db, user.db_id, commit=False)
            db.flush()
            categories = db.query(CategoryDB).filter(CategoryDB.user_id == user.db_id).all()

            count = seed_transactions(db, user, categories)
            seed_budgets(db, user, categories)
            seed_debts(db, user)
            seed_goals(db, user)

            db.commit()
            print(f"User {user.db_id} seeded with {count} transactions.")

        print("Successfully seeded database.")

    except Exception as e:
        print(f"An error occurred: {e}")
        import traceback
        traceback.print_exc()
        db.rollback()
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
