from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

from finance_tracker.models.category import CategoryResponse

# ===== BUDGET PYDANTIC MODELS =====


class BudgetStatusEnum(str, Enum):
    NORMAL = "normal"
    NEAR_LIMIT = "near_limit"
    OVER_BUDGET = "over_budget"


class BudgetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Budget name")
    amount: Decimal = Field(..., ge=0, description="Spending cap for the budget period")
    category_id: Optional[int] = Field(None, description="Category to cap; null caps all categories")
    start_date: date = Field(..., description="Budget start date")
    end_date: date = Field(..., description="Budget end date (inclusive)")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

    @model_validator(mode='after')
    def validate_date_range(self) -> 'BudgetCreate':
        if self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        return self


class BudgetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v


class BudgetUsage(BaseModel):
    """Spending measured against a budget cap for one reporting period"""
    spent: Decimal
    remaining: Decimal
    percentage: float
    display_percentage: float
    status: BudgetStatusEnum


class BudgetResponse(BaseModel):
    id: int
    name: str
    amount: Decimal
    category_id: Optional[int]
    category: Optional[CategoryResponse] = None
    start_date: date
    end_date: date
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BudgetWithUsage(BudgetResponse):
    spent: Decimal
    remaining: Decimal
    percentage: float
    display_percentage: float
    status: BudgetStatusEnum
