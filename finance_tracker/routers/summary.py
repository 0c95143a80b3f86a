from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime

from finance_tracker.models.summary import FinancialSummary
from finance_tracker.db.core import get_db
from finance_tracker.dependencies import get_current_user_id
from finance_tracker.services.summary import build_period_summary

router = APIRouter(
    prefix="/summary",
    tags=["summary"],
)


@router.get("/", response_model=FinancialSummary)
def read_summary(
    month: Optional[int] = None,
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Income, spending, budget usage and health score for one calendar month.
    Defaults to the current month.
    """
    try:
        return build_period_summary(db, user_id, month, year, datetime.now())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
