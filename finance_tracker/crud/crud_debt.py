from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import desc, func
from typing import Optional, List, Dict, Tuple
from datetime import datetime
from decimal import Decimal

from finance_tracker.db.core import DebtDB, DebtPaymentDB, DebtType, DebtStatus, NotFoundError
from finance_tracker.models.debt import (
    DebtCreate,
    DebtUpdate,
    DebtPaymentCreate,
    DebtPaymentResponse,
    DebtResponse,
    DebtSnapshot,
    DebtSummary,
    RecentDebtPayment,
)
from finance_tracker.services.calculations import derive_debt, refreshed_debt_cache, summarize_debts
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)

EMBEDDED_PAYMENT_COUNT = 5
RECENT_PAYMENT_COUNT = 10


# ===== UTILITY FUNCTIONS =====

def _payment_totals(db: Session, debt_ids: List[int]) -> Dict[int, Tuple[Decimal, int]]:
    """(sum, count) of payments per debt, over every payment the debt has"""
    if not debt_ids:
        return {}

    rows = db.query(
        DebtPaymentDB.debt_id,
        func.coalesce(func.sum(DebtPaymentDB.amount), 0),
        func.count(DebtPaymentDB.id)
    ).filter(DebtPaymentDB.debt_id.in_(debt_ids)).group_by(DebtPaymentDB.debt_id).all()

    return {debt_id: (Decimal(str(total)), count) for debt_id, total, count in rows}


def _latest_payments(db: Session, debt_id: int, limit: int) -> List[DebtPaymentDB]:
    return db.query(DebtPaymentDB).filter(
        DebtPaymentDB.debt_id == debt_id
    ).order_by(desc(DebtPaymentDB.payment_date), desc(DebtPaymentDB.id)).limit(limit).all()


def _sum_payments(db: Session, debt_id: int) -> Decimal:
    result = db.query(func.coalesce(func.sum(DebtPaymentDB.amount), 0)).filter(
        DebtPaymentDB.debt_id == debt_id
    ).scalar()
    return Decimal(str(result)) if result else Decimal('0.00')


def _refresh_cache(db: Session, db_debt: DebtDB) -> None:
    """Rewrite remaining_amount/status from the full payment set. The caller commits."""
    total_paid = _sum_payments(db, db_debt.id)
    remaining, new_status = refreshed_debt_cache(db_debt.total_amount, total_paid, db_debt.status)

    if new_status != db_debt.status:
        logger.info(f"Debt {db_debt.id} status {db_debt.status.value} -> {new_status.value}")

    db_debt.remaining_amount = remaining
    db_debt.status = new_status
    db_debt.updated_at = datetime.utcnow()


def build_debt_response(db: Session, db_debt: DebtDB, now: datetime,
                        totals: Optional[Tuple[Decimal, int]] = None) -> DebtResponse:
    """Stored fields plus everything recomputed from the payment history"""
    if totals is None:
        totals = _payment_totals(db, [db_debt.id]).get(db_debt.id, (Decimal('0.00'), 0))
    total_paid, payment_count = totals

    derived = derive_debt(db_debt.total_amount, [total_paid], db_debt.due_date, db_debt.status, now)
    payments = _latest_payments(db, db_debt.id, EMBEDDED_PAYMENT_COUNT)

    return DebtResponse(
        id=db_debt.id,
        name=db_debt.name,
        debt_type=db_debt.debt_type,
        total_amount=db_debt.total_amount,
        interest_rate=db_debt.interest_rate,
        creditor_name=db_debt.creditor_name,
        description=db_debt.description,
        start_date=db_debt.start_date,
        due_date=db_debt.due_date,
        status=db_debt.status,
        created_at=db_debt.created_at,
        updated_at=db_debt.updated_at,
        payments=[DebtPaymentResponse.model_validate(p) for p in payments],
        payment_count=payment_count,
        **derived.model_dump(),
    )


# ===== DATABASE OPERATIONS - DEBTS =====

def create_db_debt(db: Session, user_id: int, debt_data: DebtCreate) -> DebtDB:
    """Create a new debt; nothing is paid yet so remaining equals the total"""

    db_debt = DebtDB(
        user_id=user_id,
        name=debt_data.name,
        debt_type=debt_data.debt_type,
        total_amount=debt_data.total_amount,
        interest_rate=debt_data.interest_rate,
        creditor_name=debt_data.creditor_name,
        description=debt_data.description,
        start_date=debt_data.start_date,
        due_date=debt_data.due_date,
        remaining_amount=debt_data.total_amount,
        status=DebtStatus.ACTIVE,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_debt)
        db.commit()
        db.refresh(db_debt)
        logger.info(f"Created {db_debt.debt_type.value} debt {db_debt.id} for user {user_id}")
        return db_debt
    except IntegrityError:
        db.rollback()
        raise ValueError("Debt creation failed due to database constraint")


def read_db_debt(db: Session, debt_id: int, user_id: int) -> Optional[DebtDB]:
    return db.query(DebtDB).filter(
        DebtDB.id == debt_id,
        DebtDB.user_id == user_id
    ).first()


def read_db_debts(db: Session, user_id: int, now: datetime, debt_type: Optional[DebtType] = None,
                  status: Optional[DebtStatus] = None) -> List[DebtResponse]:
    """
    List a user's debts, newest first, each with derived fields.

    The status filter applies to the recomputed status, so a debt whose due
    date has passed is listed under OVERDUE even if the stored row says ACTIVE.
    """
    query = db.query(DebtDB).filter(DebtDB.user_id == user_id)
    if debt_type:
        query = query.filter(DebtDB.debt_type == debt_type)

    debts = query.order_by(desc(DebtDB.created_at), desc(DebtDB.id)).all()
    totals = _payment_totals(db, [d.id for d in debts])

    responses = [
        build_debt_response(db, d, now, totals.get(d.id, (Decimal('0.00'), 0)))
        for d in debts
    ]
    if status:
        responses = [r for r in responses if r.current_status == status]
    return responses


def update_db_debt(db: Session, debt_id: int, user_id: int, debt_updates: DebtUpdate) -> DebtDB:
    """Partial update; a changed total_amount refreshes the balance cache"""

    db_debt = read_db_debt(db, debt_id, user_id)
    if not db_debt:
        raise NotFoundError(f"Debt with id {debt_id} not found")

    update_data = debt_updates.model_dump(exclude_unset=True)

    for field in ('name', 'total_amount'):
        if field in update_data and update_data[field] is None:
            raise ValueError(f"{field} cannot be null")

    if update_data.get('due_date') and update_data['due_date'] < db_debt.start_date:
        raise ValueError("due_date must not be before start_date")

    total_changed = 'total_amount' in update_data and update_data['total_amount'] != db_debt.total_amount

    for field, value in update_data.items():
        setattr(db_debt, field, value)

    if total_changed:
        _refresh_cache(db, db_debt)

    db_debt.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_debt)
        return db_debt
    except IntegrityError:
        db.rollback()
        raise ValueError("Debt update failed due to database constraint")


def delete_db_debt(db: Session, debt_id: int, user_id: int) -> bool:
    """Delete a debt together with its payments"""
    db_debt = read_db_debt(db, debt_id, user_id)
    if not db_debt:
        raise NotFoundError(f"Debt with id {debt_id} not found")

    db.delete(db_debt)
    db.commit()
    logger.info(f"Deleted debt {debt_id} for user {user_id}")
    return True


# ===== DATABASE OPERATIONS - PAYMENTS =====

def create_debt_payment(db: Session, user_id: int, debt_id: int, payment_data: DebtPaymentCreate) -> DebtPaymentDB:
    """
    Record a payment and refresh the debt's balance cache.

    The debt row is locked for the rest of the transaction so two payments on
    the same debt cannot both read the old total. SQLite ignores the lock.
    """
    db_debt = db.query(DebtDB).filter(
        DebtDB.id == debt_id,
        DebtDB.user_id == user_id
    ).with_for_update().first()
    if not db_debt:
        raise NotFoundError(f"Debt with id {debt_id} not found")

    db_payment = DebtPaymentDB(
        user_id=user_id,
        debt_id=debt_id,
        amount=payment_data.amount,
        payment_date=payment_data.payment_date,
        description=payment_data.description,
        created_at=datetime.utcnow()
    )

    try:
        db.add(db_payment)
        db.flush()
        _refresh_cache(db, db_debt)
        db.commit()
        db.refresh(db_payment)
        logger.info(
            f"Recorded payment {db_payment.id} of {db_payment.amount} on debt {debt_id}; "
            f"remaining {db_debt.remaining_amount}"
        )
        return db_payment
    except IntegrityError:
        db.rollback()
        raise ValueError("Payment creation failed due to database constraint")


def read_debt_payments(db: Session, user_id: int, debt_id: int) -> List[DebtPaymentDB]:
    if not read_db_debt(db, debt_id, user_id):
        raise NotFoundError(f"Debt with id {debt_id} not found")

    return db.query(DebtPaymentDB).filter(
        DebtPaymentDB.debt_id == debt_id,
        DebtPaymentDB.user_id == user_id
    ).order_by(desc(DebtPaymentDB.payment_date), desc(DebtPaymentDB.id)).all()


def delete_debt_payment(db: Session, user_id: int, debt_id: int, payment_id: int) -> bool:
    db_debt = db.query(DebtDB).filter(
        DebtDB.id == debt_id,
        DebtDB.user_id == user_id
    ).with_for_update().first()
    if not db_debt:
        raise NotFoundError(f"Debt with id {debt_id} not found")

    db_payment = db.query(DebtPaymentDB).filter(
        DebtPaymentDB.id == payment_id,
        DebtPaymentDB.debt_id == debt_id,
        DebtPaymentDB.user_id == user_id
    ).first()
    if not db_payment:
        raise NotFoundError(f"Payment with id {payment_id} not found")

    db.delete(db_payment)
    db.flush()
    _refresh_cache(db, db_debt)
    db.commit()
    logger.info(f"Deleted payment {payment_id} from debt {debt_id}")
    return True


# ===== SUMMARY =====

def get_debt_summary(db: Session, user_id: int, now: datetime) -> DebtSummary:
    """Rollup of every debt the user has, plus the latest payments across them"""
    debts = db.query(DebtDB).filter(DebtDB.user_id == user_id).order_by(DebtDB.created_at, DebtDB.id).all()
    totals = _payment_totals(db, [d.id for d in debts])

    snapshots = [
        DebtSnapshot(
            debt_type=d.debt_type,
            total_amount=d.total_amount,
            total_paid=totals.get(d.id, (Decimal('0.00'), 0))[0],
            due_date=d.due_date,
        )
        for d in debts
    ]
    overview, breakdown = summarize_debts(snapshots, now)

    recent_rows = db.query(DebtPaymentDB, DebtDB.name, DebtDB.debt_type).join(
        DebtDB, DebtPaymentDB.debt_id == DebtDB.id
    ).filter(
        DebtDB.user_id == user_id
    ).order_by(desc(DebtPaymentDB.payment_date), desc(DebtPaymentDB.id)).limit(RECENT_PAYMENT_COUNT).all()

    recent_payments = [
        RecentDebtPayment(
            **DebtPaymentResponse.model_validate(payment).model_dump(),
            debt_name=debt_name,
            debt_type=debt_type,
        )
        for payment, debt_name, debt_type in recent_rows
    ]

    return DebtSummary(overview=overview, debt_breakdown=breakdown, recent_payments=recent_payments)
