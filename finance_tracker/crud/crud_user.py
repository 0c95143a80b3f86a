from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
from datetime import datetime

from finance_tracker.db.core import UserDB
from finance_tracker.models.user import UserCreate
from finance_tracker.crud.crud_category import setup_default_categories
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)


def create_db_user(db: Session, user_data: UserCreate) -> UserDB:
    """Create a new user together with the default category set"""

    existing_user = db.query(UserDB).filter(UserDB.email == user_data.email).first()
    if existing_user:
        raise ValueError("Email already registered")

    existing_username = db.query(UserDB).filter(UserDB.username == user_data.username).first()
    if existing_username:
        raise ValueError("Username already taken")

    db_user = UserDB(
        email=user_data.email,
        username=user_data.username,
        created_at=datetime.utcnow(),
    )

    try:
        db.add(db_user)
        db.flush()  # Get the db_id without committing
        setup_default_categories(db, db_user.db_id, commit=False)
        db.commit()
        db.refresh(db_user)
        logger.info(f"Created user {db_user.db_id}")
        return db_user
    except IntegrityError:
        db.rollback()
        raise ValueError("User creation failed due to database constraint")


def read_db_user(db: Session, user_id: int) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.db_id == user_id).first()
