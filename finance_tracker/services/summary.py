"""
Period summary assembly.

Gathers the raw per-user figures for a calendar month with plain queries and
hands them to :func:`compose_period_summary`. Each figure is read on its own,
so a summary taken while writes are in flight may mix before and after states.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from finance_tracker.crud.crud_budget import read_budgets_for_period
from finance_tracker.crud.crud_category import read_db_categories
from finance_tracker.crud.crud_transaction import count_transactions_on, read_recent_transactions
from finance_tracker.db.core import DebtDB, DebtStatus, GoalDB, TransactionDB, TransactionType
from finance_tracker.logging_config import get_logger
from finance_tracker.models.category import CategoryResponse
from finance_tracker.models.summary import ExpenseGroup, FinancialSummary, Period, SummaryInputs
from finance_tracker.models.transaction import TransactionResponse
from finance_tracker.services.calculations import compose_period_summary, month_bounds

logger = get_logger(__name__)

RECENT_TRANSACTION_COUNT = 10


def resolve_period(month: Optional[int], year: Optional[int], today: date) -> Period:
    """Calendar month to report on; missing parts default to today's."""
    month = month if month is not None else today.month
    year = year if year is not None else today.year
    start_date, end_date = month_bounds(month, year)
    return Period(month=month, year=year, start_date=start_date, end_date=end_date)


def _sum_by_type(db: Session, user_id: int, period: Period, transaction_type: TransactionType) -> Decimal:
    result = db.query(func.coalesce(func.sum(TransactionDB.amount), 0)).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_type == transaction_type,
        TransactionDB.transaction_date >= period.start_date,
        TransactionDB.transaction_date <= period.end_date,
    ).scalar()
    return Decimal(str(result)) if result else Decimal("0.00")


def _expense_groups(db: Session, user_id: int, period: Period) -> list[ExpenseGroup]:
    rows = db.query(
        TransactionDB.category_id,
        func.sum(TransactionDB.amount),
    ).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_type == TransactionType.EXPENSE,
        TransactionDB.transaction_date >= period.start_date,
        TransactionDB.transaction_date <= period.end_date,
    ).group_by(TransactionDB.category_id).all()
    return [ExpenseGroup(category_id=category_id, amount=Decimal(str(total))) for category_id, total in rows]


def _stored_active_debt(db: Session, user_id: int) -> Decimal:
    # Reads the balance cache as stored; not recomputed from payments
    result = db.query(func.coalesce(func.sum(DebtDB.remaining_amount), 0)).filter(
        DebtDB.user_id == user_id,
        DebtDB.status == DebtStatus.ACTIVE,
    ).scalar()
    return Decimal(str(result)) if result else Decimal("0.00")


def gather_summary_inputs(db: Session, user_id: int, period: Period, today: date) -> SummaryInputs:
    categories = {c.id: CategoryResponse.model_validate(c) for c in read_db_categories(db, user_id)}
    budgets = read_budgets_for_period(db, user_id, period.start_date, period.end_date)
    goal_amounts = db.query(GoalDB.current_amount, GoalDB.target_amount).filter(GoalDB.user_id == user_id).all()

    return SummaryInputs(
        period=period,
        total_income=_sum_by_type(db, user_id, period, TransactionType.INCOME),
        total_expense=_sum_by_type(db, user_id, period, TransactionType.EXPENSE),
        expense_groups=_expense_groups(db, user_id, period),
        categories=categories,
        today_transactions=count_transactions_on(db, user_id, today),
        recent_transactions=[
            TransactionResponse.model_validate(t)
            for t in read_recent_transactions(db, user_id, RECENT_TRANSACTION_COUNT)
        ],
        total_debt=_stored_active_debt(db, user_id),
        budget_percentages=[usage.percentage for _, usage in budgets],
        goal_amounts=[(current, target) for current, target in goal_amounts],
    )


def build_period_summary(db: Session, user_id: int, month: Optional[int], year: Optional[int],
                         now: datetime) -> FinancialSummary:
    """Summary of one calendar month for a user. Raises ValueError for a month outside 1..12."""
    period = resolve_period(month, year, now.date())
    inputs = gather_summary_inputs(db, user_id, period, now.date())
    summary = compose_period_summary(inputs)
    logger.debug(
        f"Summary for user {user_id} {period.year}-{period.month:02d}: "
        f"income {summary.total_income}, expense {summary.total_expense}, score {summary.health_score}"
    )
    return summary
