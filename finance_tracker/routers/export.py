from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from finance_tracker.crud.crud_transaction import read_transactions_for_export
from finance_tracker.db.core import get_db, TransactionType
from finance_tracker.dependencies import get_current_user_id
from finance_tracker.models.transaction import TransactionFilter, TransactionResponse
from finance_tracker.services.export import DEFAULT_LOCALE, export_filename, transactions_to_csv

router = APIRouter(
    prefix="/export",
    tags=["export"],
)

EXPORT_FORMATS = ("csv", "json")


@router.get("/transactions")
def export_transactions(
    transaction_type: Optional[TransactionType] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    locale: str = DEFAULT_LOCALE,
    export_format: str = Query("csv", alias="format", description="csv (download) or json"),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Export transactions newest first, as a CSV download or as JSON.
    """
    if export_format not in EXPORT_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported format '{export_format}'. Use one of: {', '.join(EXPORT_FORMATS)}",
        )

    filters = TransactionFilter(transaction_type=transaction_type, date_from=date_from, date_to=date_to)
    transactions = read_transactions_for_export(db, user_id, filters)

    if export_format == "json":
        return {"transactions": [TransactionResponse.model_validate(t) for t in transactions]}

    try:
        content = transactions_to_csv(transactions, locale=locale)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(date.today())}"'},
    )
