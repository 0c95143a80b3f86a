from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import date
from decimal import Decimal

from finance_tracker.models.category import CategoryResponse
from finance_tracker.models.transaction import TransactionResponse

# ===== PERIOD SUMMARY MODELS =====


class Period(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int
    start_date: date
    end_date: date


class CategoryExpense(BaseModel):
    category_id: Optional[int]
    category_name: str
    color: str
    amount: Decimal


class ExpenseGroup(BaseModel):
    """Raw grouped expense total as returned by storage, before the category join"""
    category_id: Optional[int]
    amount: Decimal


class SummaryInputs(BaseModel):
    """Everything the period summary needs, already fetched for one user"""
    period: Period
    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    expense_groups: List[ExpenseGroup] = Field(default_factory=list)
    categories: Dict[int, CategoryResponse] = Field(default_factory=dict)
    today_transactions: int = 0
    recent_transactions: List[TransactionResponse] = Field(default_factory=list)
    total_debt: Decimal = Decimal("0")
    budget_percentages: List[float] = Field(default_factory=list)
    goal_amounts: List[tuple[Decimal, Decimal]] = Field(
        default_factory=list, description="(current_amount, target_amount) for every goal"
    )


class FinancialSummary(BaseModel):
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    expenses_by_category: List[CategoryExpense]
    today_transactions: int
    recent_transactions: List[TransactionResponse]
    total_debt: Decimal = Field(..., description="Sum of the stored debt balance cache for ACTIVE debts")
    budget_usage: float
    completed_goals: int
    health_score: int
    period: Period
