from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import func
from typing import Optional, List, Tuple
from datetime import datetime, date
from decimal import Decimal

from finance_tracker.db.core import BudgetDB, TransactionDB, TransactionType, NotFoundError
from finance_tracker.models.budget import BudgetCreate, BudgetUpdate, BudgetUsage
from finance_tracker.crud.crud_transaction import verify_category_ownership
from finance_tracker.services.calculations import calculate_budget_usage, range_intersection, ranges_overlap
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_budget(db: Session, user_id: int, budget_data: BudgetCreate) -> BudgetDB:
    """Create a new budget, optionally capped to a single category"""

    if budget_data.category_id:
        verify_category_ownership(db, user_id, budget_data.category_id)

    db_budget = BudgetDB(
        user_id=user_id,
        name=budget_data.name,
        amount=budget_data.amount,
        category_id=budget_data.category_id,
        start_date=budget_data.start_date,
        end_date=budget_data.end_date,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_budget)
        db.commit()
        db.refresh(db_budget)
        logger.info(f"Created budget {db_budget.id} for user {user_id}")
        return db_budget
    except IntegrityError:
        db.rollback()
        raise ValueError("Budget creation failed due to database constraint")


def read_db_budget(db: Session, budget_id: int, user_id: int) -> Optional[BudgetDB]:
    return db.query(BudgetDB).filter(
        BudgetDB.id == budget_id,
        BudgetDB.user_id == user_id
    ).options(joinedload(BudgetDB.category)).first()


def update_db_budget(db: Session, budget_id: int, user_id: int, budget_updates: BudgetUpdate) -> BudgetDB:
    """Update an existing budget"""

    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    update_data = budget_updates.model_dump(exclude_unset=True)

    for field in ('name', 'amount', 'start_date', 'end_date'):
        if field in update_data and update_data[field] is None:
            raise ValueError(f"{field} cannot be null")

    if update_data.get('category_id'):
        verify_category_ownership(db, user_id, update_data['category_id'])

    # Validate the resulting date range, mixing new and current values
    start_date = update_data.get('start_date', db_budget.start_date)
    end_date = update_data.get('end_date', db_budget.end_date)
    if end_date < start_date:
        raise ValueError("end_date must not be before start_date")

    for field, value in update_data.items():
        setattr(db_budget, field, value)

    db_budget.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_budget)
        return db_budget
    except IntegrityError:
        db.rollback()
        raise ValueError("Budget update failed due to database constraint")


def delete_db_budget(db: Session, budget_id: int, user_id: int) -> bool:
    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    db.delete(db_budget)
    db.commit()
    logger.info(f"Deleted budget {budget_id} for user {user_id}")
    return True


# ===== SPENDING =====

def calculate_expense_total(db: Session, user_id: int, start_date: date, end_date: date,
                            category_id: Optional[int] = None) -> Decimal:
    """Sum of EXPENSE amounts in [start_date, end_date]; every category when category_id is None"""

    query = db.query(func.coalesce(func.sum(TransactionDB.amount), 0)).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_type == TransactionType.EXPENSE,
        TransactionDB.transaction_date >= start_date,
        TransactionDB.transaction_date <= end_date
    )
    if category_id is not None:
        query = query.filter(TransactionDB.category_id == category_id)

    result = query.scalar()
    return Decimal(str(result)) if result else Decimal('0.00')


def read_overlapping_budgets(db: Session, user_id: int, period_start: date, period_end: date) -> List[BudgetDB]:
    return db.query(BudgetDB).filter(
        BudgetDB.user_id == user_id,
        BudgetDB.start_date <= period_end,
        BudgetDB.end_date >= period_start
    ).options(joinedload(BudgetDB.category)).order_by(BudgetDB.start_date, BudgetDB.id).all()


def calculate_budget_spending(db: Session, budget: BudgetDB, period_start: date, period_end: date) -> BudgetUsage:
    """Spending against a budget, counted only where its own range meets the reporting period"""
    if not ranges_overlap(budget.start_date, budget.end_date, period_start, period_end):
        return calculate_budget_usage(budget.amount, Decimal("0.00"))
    window_start, window_end = range_intersection(budget.start_date, budget.end_date, period_start, period_end)
    spent = calculate_expense_total(db, budget.user_id, window_start, window_end, budget.category_id)
    return calculate_budget_usage(budget.amount, spent)


def read_budgets_for_period(db: Session, user_id: int, period_start: date,
                            period_end: date) -> List[Tuple[BudgetDB, BudgetUsage]]:
    """Every budget overlapping the period, each paired with its usage for that period"""
    budgets = read_overlapping_budgets(db, user_id, period_start, period_end)
    return [(budget, calculate_budget_spending(db, budget, period_start, period_end)) for budget in budgets]
