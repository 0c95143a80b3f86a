from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional

from finance_tracker.db.core import BudgetDB, CategoryDB, CategoryType, NotFoundError, TransactionDB
from finance_tracker.models.category import CategoryCreate, CategoryUpdate
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)


DEFAULT_CATEGORIES = [
    # Income Categories
    {"name": "Salary", "color": "#10B981", "category_type": CategoryType.INCOME},
    {"name": "Bonus", "color": "#059669", "category_type": CategoryType.INCOME},
    {"name": "Side Income", "color": "#34D399", "category_type": CategoryType.INCOME},
    {"name": "Investment", "color": "#6EE7B7", "category_type": CategoryType.INCOME},

    # Expense Categories
    {"name": "Food", "color": "#EF4444", "category_type": CategoryType.EXPENSE},
    {"name": "Transportation", "color": "#F97316", "category_type": CategoryType.EXPENSE},
    {"name": "Housing", "color": "#8B5CF6", "category_type": CategoryType.EXPENSE},
    {"name": "Health", "color": "#06B6D4", "category_type": CategoryType.EXPENSE},
    {"name": "Education", "color": "#3B82F6", "category_type": CategoryType.EXPENSE},
    {"name": "Entertainment", "color": "#EC4899", "category_type": CategoryType.EXPENSE},
    {"name": "Clothing", "color": "#84CC16", "category_type": CategoryType.EXPENSE},
    {"name": "Other", "color": "#6B7280", "category_type": CategoryType.EXPENSE},
]


def _find_by_name(db: Session, user_id: int, name: str, exclude_id: Optional[int] = None) -> Optional[CategoryDB]:
    query = db.query(CategoryDB).filter(
        CategoryDB.user_id == user_id,
        func.lower(CategoryDB.name) == name.strip().lower()
    )
    if exclude_id is not None:
        query = query.filter(CategoryDB.id != exclude_id)
    return query.first()


def create_db_category(db: Session, user_id: int, category_data: CategoryCreate) -> CategoryDB:
    """Create a new category for a user"""

    if _find_by_name(db, user_id, category_data.name):
        raise ValueError(f"Category with name '{category_data.name}' already exists")

    db_category = CategoryDB(
        user_id=user_id,
        name=category_data.name,
        color=category_data.color,
        icon=category_data.icon,
        category_type=category_data.category_type,
    )

    try:
        db.add(db_category)
        db.commit()
        db.refresh(db_category)
        logger.info(f"Created category {db_category.id} for user {user_id}")
        return db_category
    except IntegrityError:
        db.rollback()
        raise ValueError("Category creation failed due to a database constraint.")


def read_db_categories(db: Session, user_id: int) -> List[CategoryDB]:
    """Read all categories owned by a user"""
    return db.query(CategoryDB).filter(
        CategoryDB.user_id == user_id
    ).order_by(CategoryDB.category_type, CategoryDB.name).all()


def read_db_category(db: Session, category_id: int, user_id: int) -> Optional[CategoryDB]:
    """Read a single category by its ID, scoped to its owner"""
    return db.query(CategoryDB).filter(
        CategoryDB.id == category_id,
        CategoryDB.user_id == user_id
    ).first()


def update_db_category(db: Session, category_id: int, user_id: int, category_updates: CategoryUpdate) -> CategoryDB:
    """Update a category's details"""
    db_category = read_db_category(db, category_id, user_id)
    if not db_category:
        raise NotFoundError(f"Category with id {category_id} not found")

    update_data = category_updates.model_dump(exclude_unset=True)

    if 'name' in update_data:
        if update_data['name'] is None:
            raise ValueError("Category name cannot be empty")
        if _find_by_name(db, user_id, update_data['name'], exclude_id=category_id):
            raise ValueError(f"Category with name '{update_data['name']}' already exists")

    for field, value in update_data.items():
        if value is None and field in ('color', 'category_type'):
            continue
        setattr(db_category, field, value)

    try:
        db.commit()
        db.refresh(db_category)
        return db_category
    except IntegrityError:
        db.rollback()
        raise ValueError("Category update failed due to a database constraint.")


def count_category_references(db: Session, category_id: int, user_id: int) -> int:
    transaction_count = db.query(func.count(TransactionDB.id)).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.category_id == category_id
    ).scalar()
    budget_count = db.query(func.count(BudgetDB.id)).filter(
        BudgetDB.user_id == user_id,
        BudgetDB.category_id == category_id
    ).scalar()
    return (transaction_count or 0) + (budget_count or 0)


def delete_db_category(db: Session, category_id: int, user_id: int) -> bool:
    """Delete a category that no transaction or budget references"""
    db_category = read_db_category(db, category_id, user_id)
    if not db_category:
        raise NotFoundError(f"Category with id {category_id} not found")

    if count_category_references(db, category_id, user_id) > 0:
        raise ValueError("Cannot delete category that is being used in transactions or budgets")

    try:
        db.delete(db_category)
        db.commit()
        logger.info(f"Deleted category {category_id} for user {user_id}")
        return True
    except IntegrityError:
        db.rollback()
        raise ValueError("Cannot delete category as it is currently in use.")


def setup_default_categories(db: Session, user_id: int, commit: bool = True) -> List[CategoryDB]:
    """
    Create the default category set for a user who has none yet.
    Returns the created categories, or an empty list if the user already has some.
    """
    existing = db.query(func.count(CategoryDB.id)).filter(CategoryDB.user_id == user_id).scalar()
    if existing:
        return []

    categories = [CategoryDB(user_id=user_id, **category) for category in DEFAULT_CATEGORIES]
    db.add_all(categories)

    if commit:
        db.commit()
        for category in categories:
            db.refresh(category)
        logger.info(f"Created {len(categories)} default categories for user {user_id}")

    return categories
