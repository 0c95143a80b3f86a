from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from datetime import datetime

from finance_tracker.crud import crud_goal
from finance_tracker.models import goal as goal_models
from finance_tracker.db.core import get_db, NotFoundError
from finance_tracker.dependencies import get_current_user_id

router = APIRouter(
    prefix="/goals",
    tags=["goals"],
)


@router.get("/", response_model=List[goal_models.GoalResponse])
def read_goals(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Retrieve all savings goals, nearest target date first.
    """
    now = datetime.now()
    return [crud_goal.build_goal_response(g, now) for g in crud_goal.read_db_goals(db, user_id)]


@router.post("/", response_model=goal_models.GoalResponse, status_code=status.HTTP_201_CREATED)
def create_goal(
    goal: goal_models.GoalCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        db_goal = crud_goal.create_db_goal(db=db, user_id=user_id, goal_data=goal)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return crud_goal.build_goal_response(db_goal, datetime.now())


@router.put("/{goal_id}", response_model=goal_models.GoalResponse)
def update_goal(
    goal_id: int,
    goal_updates: goal_models.GoalUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Update a goal. current_amount is taken as the new saved total, not added to the old one.
    """
    try:
        db_goal = crud_goal.update_db_goal(db=db, goal_id=goal_id, user_id=user_id, goal_updates=goal_updates)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return crud_goal.build_goal_response(db_goal, datetime.now())


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_goal(
    goal_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_goal.delete_db_goal(db=db, goal_id=goal_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
