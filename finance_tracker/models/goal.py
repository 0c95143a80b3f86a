from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class GoalStatusEnum(str, Enum):
    COMPLETED = "completed"
    OVERDUE = "overdue"
    NEAR_DEADLINE = "near_deadline"
    IN_PROGRESS = "in_progress"


class GoalCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(Decimal("0"), ge=0)
    description: Optional[str] = None
    target_date: date

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class GoalUpdate(BaseModel):
    """Progress is a manual checkpoint: current_amount is set, never accumulated."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    target_amount: Optional[Decimal] = Field(None, gt=0)
    current_amount: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    target_date: Optional[date] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class GoalProgress(BaseModel):
    progress: float
    remaining: Decimal
    days_left: int
    is_completed: bool
    status: GoalStatusEnum


class GoalResponse(BaseModel):
    id: int
    name: str
    target_amount: Decimal
    current_amount: Decimal
    description: Optional[str]
    target_date: date
    created_at: datetime
    updated_at: datetime

    progress: float
    remaining: Decimal
    days_left: int
    is_completed: bool
    status: GoalStatusEnum

    model_config = ConfigDict(from_attributes=True)
