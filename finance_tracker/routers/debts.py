from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

from finance_tracker.crud import crud_debt
from finance_tracker.models import debt as debt_models
from finance_tracker.db.core import get_db, NotFoundError, DebtType, DebtStatus
from finance_tracker.dependencies import get_current_user_id

router = APIRouter(
    prefix="/debts",
    tags=["debts"],
)

# ===== DEBTS =====

@router.get("/", response_model=List[debt_models.DebtResponse])
def read_debts(
    debt_type: Optional[DebtType] = None,
    status: Optional[DebtStatus] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Retrieve all debts for the current user, each with its latest payments.
    """
    return crud_debt.read_db_debts(db, user_id, datetime.now(), debt_type=debt_type, status=status)


@router.post("/", response_model=debt_models.DebtResponse, status_code=status.HTTP_201_CREATED)
def create_debt(
    debt: debt_models.DebtCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        db_debt = crud_debt.create_db_debt(db=db, user_id=user_id, debt_data=debt)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return crud_debt.build_debt_response(db, db_debt, datetime.now())


@router.get("/summary", response_model=debt_models.DebtSummary)
def read_debt_summary(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Totals across all debts, split into money owed and money lent.
    """
    return crud_debt.get_debt_summary(db, user_id, datetime.now())


@router.get("/{debt_id}", response_model=debt_models.DebtResponse)
def read_debt(
    debt_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    db_debt = crud_debt.read_db_debt(db, debt_id=debt_id, user_id=user_id)
    if db_debt is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Debt not found")
    return crud_debt.build_debt_response(db, db_debt, datetime.now())


@router.put("/{debt_id}", response_model=debt_models.DebtResponse)
def update_debt(
    debt_id: int,
    debt_updates: debt_models.DebtUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        db_debt = crud_debt.update_db_debt(db=db, debt_id=debt_id, user_id=user_id, debt_updates=debt_updates)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return crud_debt.build_debt_response(db, db_debt, datetime.now())


@router.delete("/{debt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_debt(
    debt_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_debt.delete_db_debt(db=db, debt_id=debt_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

# ===== DEBT PAYMENTS =====

@router.get("/{debt_id}/payments", response_model=List[debt_models.DebtPaymentResponse])
def read_debt_payments(
    debt_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        return crud_debt.read_debt_payments(db=db, user_id=user_id, debt_id=debt_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{debt_id}/payments", response_model=debt_models.DebtPaymentResponse,
             status_code=status.HTTP_201_CREATED)
def create_debt_payment(
    debt_id: int,
    payment: debt_models.DebtPaymentCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Record a payment. The debt's stored balance and status are refreshed in the same commit.
    """
    try:
        return crud_debt.create_debt_payment(db=db, user_id=user_id, debt_id=debt_id, payment_data=payment)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{debt_id}/payments/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_debt_payment(
    debt_id: int,
    payment_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        crud_debt.delete_debt_payment(db=db, user_id=user_id, debt_id=debt_id, payment_id=payment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
