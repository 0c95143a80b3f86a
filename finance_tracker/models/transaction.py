from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal

from finance_tracker.db.core import TransactionType
from finance_tracker.models.category import CategoryResponse

# ===== TRANSACTION PYDANTIC MODELS =====


class TransactionCreate(BaseModel):
    amount: Decimal = Field(..., ge=0, description="Transaction amount (magnitude, sign implied by type)")
    description: str = Field(..., min_length=1, max_length=500, description="Transaction description")
    transaction_date: date = Field(..., description="Date of the transaction")
    transaction_type: TransactionType = Field(..., description="INCOME or EXPENSE")
    category_id: Optional[int] = Field(None, description="The ID of the transaction's category")

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("description must not be blank")
        return v


class TransactionUpdate(BaseModel):
    """Update transaction - all fields optional"""
    amount: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    transaction_date: Optional[date] = None
    transaction_type: Optional[TransactionType] = None
    category_id: Optional[int] = Field(None, description="Set to null to clear the category")

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("description must not be blank")
        return v


class TransactionResponse(BaseModel):
    """Transaction data returned to client"""
    id: int
    amount: Decimal
    description: str
    transaction_date: date
    transaction_type: TransactionType
    category_id: Optional[int]
    category: Optional[CategoryResponse] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionFilter(BaseModel):
    """Filter parameters for transaction queries"""
    transaction_type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    search: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    amount_min: Optional[Decimal] = None
    amount_max: Optional[Decimal] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TransactionPage(BaseModel):
    transactions: List[TransactionResponse]
    pagination: Pagination
