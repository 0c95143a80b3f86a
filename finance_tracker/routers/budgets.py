from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from finance_tracker.crud import crud_budget
from finance_tracker.models import budget as budget_models
from finance_tracker.db.core import get_db, NotFoundError
from finance_tracker.dependencies import get_current_user_id
from finance_tracker.services.summary import resolve_period

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


@router.get("/", response_model=List[budget_models.BudgetWithUsage])
def read_budgets(
    month: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Budgets overlapping the given month (default: the current one), with spending
    counted over the part of each budget that falls inside that month.
    """
    try:
        period = resolve_period(month, year, date.today())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    results = crud_budget.read_budgets_for_period(db, user_id, period.start_date, period.end_date)
    return [
        budget_models.BudgetWithUsage(
            **budget_models.BudgetResponse.model_validate(budget).model_dump(),
            **usage.model_dump(),
        )
        for budget, usage in results
    ]


@router.post("/", response_model=budget_models.BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: budget_models.BudgetCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_budget.create_db_budget(db=db, user_id=user_id, budget_data=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{budget_id}", response_model=budget_models.BudgetResponse)
def update_budget(
    budget_id: int,
    budget_updates: budget_models.BudgetUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_budget.update_db_budget(db=db, budget_id=budget_id, user_id=user_id,
                                            budget_updates=budget_updates)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_budget.delete_db_budget(db=db, budget_id=budget_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
