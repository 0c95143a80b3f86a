from fastapi import APIRouter, HTTPException, Query, status
from fastapi.params import Depends
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date
from decimal import Decimal

from finance_tracker.db.core import NotFoundError, TransactionType, get_db
from finance_tracker.dependencies import get_current_user_id
from finance_tracker.models.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionFilter,
    TransactionPage,
)
from finance_tracker.crud.crud_transaction import (
    create_db_transaction,
    read_db_transaction,
    read_db_transactions,
    update_db_transaction,
    delete_db_transaction,
)

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)


@router.get("/")
def read_transactions(
    transaction_type: Optional[TransactionType] = None,
    category_id: Optional[int] = None,
    search: Optional[str] = Query(None, description="Case-insensitive match on description"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    amount_min: Optional[Decimal] = None,
    amount_max: Optional[Decimal] = None,
    page: int = 1,
    limit: int = 10,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionPage:
    filters = TransactionFilter(
        transaction_type=transaction_type,
        category_id=category_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
        amount_min=amount_min,
        amount_max=amount_max,
    )
    try:
        transactions, pagination = read_db_transactions(db, user_id, filters, page=page, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TransactionPage(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=pagination,
    )


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionResponse:
    try:
        db_transaction = create_db_transaction(db, user_id, transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TransactionResponse.model_validate(db_transaction)


@router.get("/{transaction_id}")
def read_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionResponse:
    db_transaction = read_db_transaction(db, transaction_id=transaction_id, user_id=user_id)
    if not db_transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionResponse.model_validate(db_transaction)


@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: int,
    transaction: TransactionUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionResponse:
    try:
        db_transaction = update_db_transaction(db, transaction_id=transaction_id, user_id=user_id,
                                               transaction_updates=transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TransactionResponse.model_validate(db_transaction)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    try:
        delete_db_transaction(db, transaction_id=transaction_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Transaction not found") from e
