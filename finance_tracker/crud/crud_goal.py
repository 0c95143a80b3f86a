from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List
from datetime import datetime

from finance_tracker.db.core import GoalDB, NotFoundError
from finance_tracker.models.goal import GoalCreate, GoalUpdate, GoalResponse
from finance_tracker.services.calculations import derive_goal
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)


def build_goal_response(db_goal: GoalDB, now: datetime) -> GoalResponse:
    progress = derive_goal(db_goal.target_amount, db_goal.current_amount, db_goal.target_date, now)
    return GoalResponse(
        id=db_goal.id,
        name=db_goal.name,
        target_amount=db_goal.target_amount,
        current_amount=db_goal.current_amount,
        description=db_goal.description,
        target_date=db_goal.target_date,
        created_at=db_goal.created_at,
        updated_at=db_goal.updated_at,
        **progress.model_dump(),
    )


def create_db_goal(db: Session, user_id: int, goal_data: GoalCreate) -> GoalDB:
    db_goal = GoalDB(
        user_id=user_id,
        name=goal_data.name,
        target_amount=goal_data.target_amount,
        current_amount=goal_data.current_amount,
        description=goal_data.description,
        target_date=goal_data.target_date,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_goal)
        db.commit()
        db.refresh(db_goal)
        logger.info(f"Created goal {db_goal.id} for user {user_id}")
        return db_goal
    except IntegrityError:
        db.rollback()
        raise ValueError("Goal creation failed due to database constraint")


def read_db_goal(db: Session, goal_id: int, user_id: int) -> Optional[GoalDB]:
    return db.query(GoalDB).filter(
        GoalDB.id == goal_id,
        GoalDB.user_id == user_id
    ).first()


def read_db_goals(db: Session, user_id: int) -> List[GoalDB]:
    """All goals for a user, nearest deadline first"""
    return db.query(GoalDB).filter(
        GoalDB.user_id == user_id
    ).order_by(GoalDB.target_date, GoalDB.id).all()


def update_db_goal(db: Session, goal_id: int, user_id: int, goal_updates: GoalUpdate) -> GoalDB:
    """Set the given fields; current_amount replaces the previous checkpoint"""
    db_goal = read_db_goal(db, goal_id, user_id)
    if not db_goal:
        raise NotFoundError(f"Goal with id {goal_id} not found")

    update_data = goal_updates.model_dump(exclude_unset=True)

    for field in ('name', 'target_amount', 'current_amount', 'target_date'):
        if field in update_data and update_data[field] is None:
            raise ValueError(f"{field} cannot be null")

    for field, value in update_data.items():
        setattr(db_goal, field, value)

    db_goal.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_goal)
        return db_goal
    except IntegrityError:
        db.rollback()
        raise ValueError("Goal update failed due to database constraint")


def delete_db_goal(db: Session, goal_id: int, user_id: int) -> bool:
    db_goal = read_db_goal(db, goal_id, user_id)
    if not db_goal:
        raise NotFoundError(f"Goal with id {goal_id} not found")

    db.delete(db_goal)
    db.commit()
    logger.info(f"Deleted goal {goal_id} for user {user_id}")
    return True
