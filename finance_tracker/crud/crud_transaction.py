from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from sqlalchemy import desc, func
from typing import Optional, List, Tuple
from datetime import datetime
import math

from finance_tracker.db.core import TransactionDB, CategoryDB, NotFoundError
from finance_tracker.models.transaction import TransactionCreate, TransactionUpdate, TransactionFilter, Pagination
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


# ===== UTILITY FUNCTIONS =====

def verify_category_ownership(db: Session, user_id: int, category_id: int) -> CategoryDB:
    """A category belonging to another user is reported exactly like a missing one"""
    category = db.query(CategoryDB).filter(
        CategoryDB.id == category_id,
        CategoryDB.user_id == user_id
    ).first()
    if not category:
        raise NotFoundError(f"Category with id {category_id} not found")
    return category


def apply_transaction_filters(query, filters: Optional[TransactionFilter]):
    if not filters:
        return query

    if filters.transaction_type:
        query = query.filter(TransactionDB.transaction_type == filters.transaction_type)

    if filters.category_id:
        query = query.filter(TransactionDB.category_id == filters.category_id)

    if filters.search:
        # Literal substring match; % and _ in the search text are escaped
        query = query.filter(TransactionDB.description.icontains(filters.search, autoescape=True))

    if filters.date_from:
        query = query.filter(TransactionDB.transaction_date >= filters.date_from)

    if filters.date_to:
        query = query.filter(TransactionDB.transaction_date <= filters.date_to)

    if filters.amount_min is not None:
        query = query.filter(TransactionDB.amount >= filters.amount_min)

    if filters.amount_max is not None:
        query = query.filter(TransactionDB.amount <= filters.amount_max)

    return query


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, user_id: int, transaction_data: TransactionCreate) -> TransactionDB:
    """Create a new transaction"""

    if transaction_data.category_id:
        verify_category_ownership(db, user_id, transaction_data.category_id)

    db_transaction = TransactionDB(
        user_id=user_id,
        category_id=transaction_data.category_id,
        amount=transaction_data.amount,
        description=transaction_data.description,
        transaction_date=transaction_data.transaction_date,
        transaction_type=transaction_data.transaction_type,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_transaction)
        db.commit()
        db.refresh(db_transaction)
        logger.info(f"Created transaction {db_transaction.id} for user {user_id}")
        return db_transaction
    except IntegrityError:
        db.rollback()
        raise ValueError("Transaction creation failed due to database constraint")


def read_db_transaction(db: Session, transaction_id: int, user_id: int) -> Optional[TransactionDB]:
    """Read a transaction by ID"""
    return db.query(TransactionDB).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.user_id == user_id
    ).options(joinedload(TransactionDB.category)).first()


def read_db_transactions(db: Session, user_id: int, filters: Optional[TransactionFilter] = None,
                         page: int = 1, limit: int = 10) -> Tuple[List[TransactionDB], Pagination]:
    """Read one page of transactions, newest first"""
    if page < 1:
        raise ValueError("page must be at least 1")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    query = db.query(TransactionDB).filter(TransactionDB.user_id == user_id)
    query = apply_transaction_filters(query, filters)

    total = query.count()

    transactions = query.options(joinedload(TransactionDB.category)).order_by(
        desc(TransactionDB.transaction_date),
        desc(TransactionDB.id)
    ).offset((page - 1) * limit).limit(limit).all()

    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )
    return transactions, pagination


def read_recent_transactions(db: Session, user_id: int, limit: int = 10) -> List[TransactionDB]:
    return db.query(TransactionDB).filter(
        TransactionDB.user_id == user_id
    ).options(joinedload(TransactionDB.category)).order_by(
        desc(TransactionDB.transaction_date),
        desc(TransactionDB.id)
    ).limit(limit).all()


def read_transactions_for_export(db: Session, user_id: int,
                                 filters: Optional[TransactionFilter] = None) -> List[TransactionDB]:
    query = db.query(TransactionDB).filter(TransactionDB.user_id == user_id)
    query = apply_transaction_filters(query, filters)
    return query.options(joinedload(TransactionDB.category)).order_by(
        desc(TransactionDB.transaction_date),
        desc(TransactionDB.id)
    ).all()


def update_db_transaction(db: Session, transaction_id: int, user_id: int,
                          transaction_updates: TransactionUpdate) -> TransactionDB:
    """Update an existing transaction"""

    db_transaction = read_db_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    # Update only the fields that are provided
    update_data = transaction_updates.model_dump(exclude_unset=True)

    for field in ('amount', 'description', 'transaction_date', 'transaction_type'):
        if field in update_data and update_data[field] is None:
            raise ValueError(f"{field} cannot be null")

    if update_data.get('category_id'):
        verify_category_ownership(db, user_id, update_data['category_id'])

    for field, value in update_data.items():
        setattr(db_transaction, field, value)

    db_transaction.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_transaction)
        return db_transaction
    except IntegrityError:
        db.rollback()
        raise ValueError("Transaction update failed due to database constraint")


def delete_db_transaction(db: Session, transaction_id: int, user_id: int) -> bool:
    """Delete a transaction"""

    db_transaction = db.query(TransactionDB).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.user_id == user_id
    ).first()

    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    db.delete(db_transaction)
    db.commit()
    logger.info(f"Deleted transaction {transaction_id} for user {user_id}")
    return True


def count_transactions_on(db: Session, user_id: int, day) -> int:
    return db.query(func.count(TransactionDB.id)).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.transaction_date == day
    ).scalar() or 0
