from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from finance_tracker.crud import crud_user
from finance_tracker.models import user as user_models
from finance_tracker.db.core import get_db
from finance_tracker.dependencies import get_current_user_id

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


@router.post("/", response_model=user_models.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: user_models.UserCreate, db: Session = Depends(get_db)):
    """
    Create a new user along with the default category set.
    """
    try:
        db_user = crud_user.create_db_user(db=db, user_data=user)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return db_user


@router.get("/me", response_model=user_models.UserResponse)
def read_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    return crud_user.read_db_user(db, user_id=user_id)
