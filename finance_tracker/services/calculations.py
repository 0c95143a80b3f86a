"""
Financial derivation rules.

Pure functions over already-fetched values: nothing here touches the
database or the clock. Callers pass ``now``/``today`` explicitly, which keeps
every result reproducible for identical inputs.
"""
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from finance_tracker.db.core import DebtStatus, DebtType
from finance_tracker.models.budget import BudgetStatusEnum, BudgetUsage
from finance_tracker.models.category import CategoryResponse, DEFAULT_CATEGORY_COLOR
from finance_tracker.models.debt import (
    DebtBreakdownItem,
    DebtDerived,
    DebtSnapshot,
    DebtSummaryOverview,
)
from finance_tracker.models.goal import GoalProgress, GoalStatusEnum
from finance_tracker.models.summary import (
    CategoryExpense,
    ExpenseGroup,
    FinancialSummary,
    SummaryInputs,
)

ZERO = Decimal("0.00")
SECONDS_PER_DAY = 24 * 60 * 60

UNCATEGORIZED_NAME = "Uncategorized"

BUDGET_NEAR_LIMIT_PERCENT = 80
BUDGET_OVER_PERCENT = 100
GOAL_NEAR_DEADLINE_DAYS = 30


# ===== PERIODS =====

def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """First and last day of a calendar month, both inclusive."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    start = date(year, month, 1)
    # Day zero of the following month is the last day of this one
    if month == 12:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 1, 1)
    return start, first_of_next - timedelta(days=1)


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    return start_a <= end_b and end_a >= start_b


def range_intersection(start_a: date, end_a: date, start_b: date, end_b: date) -> Tuple[date, date]:
    """Intersection of two overlapping ranges. Callers check ranges_overlap first."""
    return max(start_a, start_b), min(end_a, end_b)


def days_until(target: date, now: datetime) -> int:
    """Whole days from now until midnight of target, rounded up. Negative once passed."""
    delta = datetime.combine(target, time.min) - now
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


# ===== BUDGETS =====

def budget_percentage(spent: Decimal, amount: Decimal) -> float:
    if amount > 0:
        return float(spent / amount * 100)
    return 0.0


def budget_status(percentage: float) -> BudgetStatusEnum:
    if percentage >= BUDGET_OVER_PERCENT:
        return BudgetStatusEnum.OVER_BUDGET
    if percentage >= BUDGET_NEAR_LIMIT_PERCENT:
        return BudgetStatusEnum.NEAR_LIMIT
    return BudgetStatusEnum.NORMAL


def calculate_budget_usage(amount: Decimal, spent: Decimal) -> BudgetUsage:
    percentage = budget_percentage(spent, amount)
    return BudgetUsage(
        spent=spent,
        remaining=amount - spent,
        percentage=percentage,
        # Progress bars need a bounded width; the percentage itself stays unclamped
        display_percentage=min(percentage, 100.0),
        status=budget_status(percentage),
    )


def average(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


# ===== DEBTS =====

def derive_debt(
    total_amount: Decimal,
    payment_amounts: Iterable[Decimal],
    due_date: Optional[date],
    stored_status: DebtStatus,
    now: datetime,
) -> DebtDerived:
    """Recompute a debt's balance and status from its full payment history."""
    total_paid = sum(payment_amounts, ZERO)
    remaining = max(ZERO, total_amount - total_paid)

    if total_amount > 0:
        progress = min(100.0, float(total_paid / total_amount * 100))
    else:
        progress = 0.0

    days_until_due = days_until(due_date, now) if due_date else None

    if remaining <= 0:
        current_status = DebtStatus.PAID_OFF
    elif days_until_due is not None and days_until_due < 0:
        current_status = DebtStatus.OVERDUE
    else:
        current_status = stored_status

    return DebtDerived(
        total_paid=total_paid,
        remaining_amount=remaining,
        progress_percentage=progress,
        days_until_due=days_until_due,
        current_status=current_status,
    )


def refreshed_debt_cache(
    total_amount: Decimal, total_paid: Decimal, stored_status: DebtStatus
) -> Tuple[Decimal, DebtStatus]:
    """
    New (remaining_amount, status) to persist after the payment set changed.

    Only PAID_OFF is ever written from here; OVERDUE is left to read-time
    derivation. A debt that stops being fully paid (payment removed, total
    raised) goes back to ACTIVE.
    """
    remaining = max(ZERO, total_amount - total_paid)
    if remaining <= 0:
        return remaining, DebtStatus.PAID_OFF
    if stored_status == DebtStatus.PAID_OFF:
        return remaining, DebtStatus.ACTIVE
    return remaining, stored_status


def summarize_debts(
    debts: Sequence[DebtSnapshot], now: datetime
) -> Tuple[DebtSummaryOverview, List[DebtBreakdownItem]]:
    """Cross-debt rollup: per-type totals, counts and the net position."""
    total_owe_amount = ZERO
    total_lend_amount = ZERO
    total_owe_paid = ZERO
    total_lend_received = ZERO
    active_owe_debts = 0
    active_lend_debts = 0
    overdue_debts = 0
    breakdown: dict[DebtType, DebtBreakdownItem] = {}

    for debt in debts:
        remaining = max(ZERO, debt.total_amount - debt.total_paid)

        if debt.due_date and datetime.combine(debt.due_date, time.min) < now and remaining > 0:
            overdue_debts += 1

        if debt.debt_type == DebtType.OWE:
            total_owe_amount += debt.total_amount
            total_owe_paid += debt.total_paid
            if remaining > 0:
                active_owe_debts += 1
        elif debt.debt_type == DebtType.LEND:
            total_lend_amount += debt.total_amount
            total_lend_received += debt.total_paid
            if remaining > 0:
                active_lend_debts += 1

        if remaining > 0:
            item = breakdown.get(debt.debt_type)
            if item is None:
                breakdown[debt.debt_type] = DebtBreakdownItem(
                    debt_type=debt.debt_type, count=1, total_amount=remaining
                )
            else:
                item.count += 1
                item.total_amount += remaining

    total_owe_remaining = total_owe_amount - total_owe_paid
    total_lend_remaining = total_lend_amount - total_lend_received

    overview = DebtSummaryOverview(
        total_owe_amount=total_owe_amount,
        total_lend_amount=total_lend_amount,
        total_owe_paid=total_owe_paid,
        total_lend_received=total_lend_received,
        total_owe_remaining=total_owe_remaining,
        total_lend_remaining=total_lend_remaining,
        active_owe_debts=active_owe_debts,
        active_lend_debts=active_lend_debts,
        overdue_debts=overdue_debts,
        net_position=total_lend_remaining - total_owe_remaining,
    )
    return overview, list(breakdown.values())


# ===== GOALS =====

def derive_goal(
    target_amount: Decimal, current_amount: Decimal, target_date: date, now: datetime
) -> GoalProgress:
    progress = float(current_amount / target_amount * 100) if target_amount > 0 else 0.0
    days_left = days_until(target_date, now)
    is_completed = current_amount >= target_amount

    if is_completed:
        status = GoalStatusEnum.COMPLETED
    elif days_left < 0:
        status = GoalStatusEnum.OVERDUE
    elif days_left <= GOAL_NEAR_DEADLINE_DAYS:
        status = GoalStatusEnum.NEAR_DEADLINE
    else:
        status = GoalStatusEnum.IN_PROGRESS

    return GoalProgress(
        progress=progress,
        remaining=target_amount - current_amount,
        days_left=days_left,
        is_completed=is_completed,
        status=status,
    )


def count_completed_goals(goal_amounts: Iterable[Tuple[Decimal, Decimal]]) -> int:
    return sum(1 for current, target in goal_amounts if current >= target)


# ===== PERIOD SUMMARY =====

def join_expense_categories(
    groups: Iterable[ExpenseGroup], categories: dict[int, CategoryResponse]
) -> List[CategoryExpense]:
    """
    Attach category name and color to grouped expense totals.

    Groups without a category, or whose category no longer exists, render
    under the placeholder bucket instead of being dropped.
    """
    expenses = []
    for group in groups:
        category = categories.get(group.category_id) if group.category_id is not None else None
        expenses.append(CategoryExpense(
            category_id=group.category_id,
            category_name=category.name if category else UNCATEGORIZED_NAME,
            color=category.color if category else DEFAULT_CATEGORY_COLOR,
            amount=group.amount,
        ))
    return sorted(expenses, key=lambda e: (-e.amount, e.category_name))


def calculate_health_score(total_income: Decimal, total_expense: Decimal, total_debt: Decimal) -> int:
    """
    Heuristic 0-100 score.

    Bonuses and penalties are independent, so income == expense fires
    neither the +20 nor the -20 branch.
    """
    score = 50

    if total_income > total_expense:
        score += 20

    if total_income > 0:
        savings_rate = (total_income - total_expense) / total_income * 100
        if savings_rate > 20:
            score += 15
        elif savings_rate > 10:
            score += 10
        elif savings_rate > 0:
            score += 5

    if total_debt == 0:
        score += 15

    if total_expense > total_income:
        score -= 20

    if total_debt > total_income:
        score -= 15

    return max(0, min(100, score))


def compose_period_summary(inputs: SummaryInputs) -> FinancialSummary:
    total_income = inputs.total_income
    total_expense = inputs.total_expense

    return FinancialSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        expenses_by_category=join_expense_categories(inputs.expense_groups, inputs.categories),
        today_transactions=inputs.today_transactions,
        recent_transactions=inputs.recent_transactions,
        total_debt=inputs.total_debt,
        budget_usage=average(inputs.budget_percentages),
        completed_goals=count_completed_goals(inputs.goal_amounts),
        health_score=calculate_health_score(total_income, total_expense, inputs.total_debt),
        period=inputs.period,
    )
