from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from finance_tracker.db.core import DebtType, DebtStatus

# ===== DEBT MODELS =====


class DebtCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    debt_type: DebtType = Field(..., description="OWE (user owes) or LEND (user is owed)")
    total_amount: Decimal = Field(..., gt=0)
    interest_rate: Optional[Decimal] = Field(None, ge=0, description="Annual rate in percent")
    creditor_name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    start_date: date
    due_date: Optional[date] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @model_validator(mode='after')
    def validate_due_date(self) -> 'DebtCreate':
        if self.due_date is not None and self.due_date < self.start_date:
            raise ValueError('due_date must not be before start_date')
        return self


class DebtUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    total_amount: Optional[Decimal] = Field(None, gt=0)
    interest_rate: Optional[Decimal] = Field(None, ge=0)
    creditor_name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    due_date: Optional[date] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class DebtDerived(BaseModel):
    """Values recomputed from payments on every read"""
    total_paid: Decimal
    remaining_amount: Decimal
    progress_percentage: float
    days_until_due: Optional[int]
    current_status: DebtStatus


# ===== DEBT PAYMENT MODELS =====


class DebtPaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    payment_date: date
    description: Optional[str] = Field(None, max_length=500)


class DebtPaymentResponse(BaseModel):
    id: int
    debt_id: int
    amount: Decimal
    payment_date: date
    description: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DebtResponse(BaseModel):
    id: int
    name: str
    debt_type: DebtType
    total_amount: Decimal
    interest_rate: Optional[Decimal]
    creditor_name: Optional[str]
    description: Optional[str]
    start_date: date
    due_date: Optional[date]
    status: DebtStatus = Field(..., description="Persisted status; may lag behind current_status")
    created_at: datetime
    updated_at: datetime

    # Derived
    total_paid: Decimal
    remaining_amount: Decimal
    progress_percentage: float
    days_until_due: Optional[int]
    current_status: DebtStatus

    payments: List[DebtPaymentResponse] = Field(default_factory=list, description="Latest payments")
    payment_count: int = 0


# ===== DEBT SUMMARY MODELS =====


class DebtSnapshot(BaseModel):
    """Input row for the cross-debt rollup"""
    debt_type: DebtType
    total_amount: Decimal
    total_paid: Decimal
    due_date: Optional[date] = None


class DebtSummaryOverview(BaseModel):
    total_owe_amount: Decimal
    total_lend_amount: Decimal
    total_owe_paid: Decimal
    total_lend_received: Decimal
    total_owe_remaining: Decimal
    total_lend_remaining: Decimal
    active_owe_debts: int
    active_lend_debts: int
    overdue_debts: int
    net_position: Decimal = Field(..., description="Positive when others owe the user more than the user owes")


class DebtBreakdownItem(BaseModel):
    debt_type: DebtType
    count: int
    total_amount: Decimal


class RecentDebtPayment(DebtPaymentResponse):
    debt_name: str
    debt_type: DebtType


class DebtSummary(BaseModel):
    overview: DebtSummaryOverview
    debt_breakdown: List[DebtBreakdownItem]
    recent_payments: List[RecentDebtPayment]
