"""Unit tests for finance_tracker.services.calculations.

Everything here is pure: no database, and ``now`` is always passed in.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from finance_tracker.db.core import CategoryType, DebtStatus, DebtType
from finance_tracker.models.budget import BudgetStatusEnum
from finance_tracker.models.category import CategoryResponse
from finance_tracker.models.debt import DebtSnapshot
from finance_tracker.models.goal import GoalStatusEnum
from finance_tracker.models.summary import ExpenseGroup, Period, SummaryInputs
from finance_tracker.services import calculations as calc

NOW = datetime(2024, 6, 15, 12, 0)


def D(value) -> Decimal:
    return Decimal(str(value))


# ===== PERIODS =====

def test_month_bounds_leap_february() -> None:
    assert calc.month_bounds(2, 2024) == (date(2024, 2, 1), date(2024, 2, 29))
    assert calc.month_bounds(2, 2023) == (date(2023, 2, 1), date(2023, 2, 28))


def test_month_bounds_december_rolls_over() -> None:
    assert calc.month_bounds(12, 2023) == (date(2023, 12, 1), date(2023, 12, 31))


@pytest.mark.parametrize("month", [0, 13, -1])
def test_month_bounds_rejects_invalid_month(month) -> None:
    with pytest.raises(ValueError):
        calc.month_bounds(month, 2024)


def test_ranges_overlap_and_intersection() -> None:
    assert calc.ranges_overlap(date(2024, 2, 15), date(2024, 3, 15), date(2024, 3, 1), date(2024, 3, 31))
    assert not calc.ranges_overlap(date(2024, 1, 1), date(2024, 1, 31), date(2024, 3, 1), date(2024, 3, 31))
    # Touching endpoints count as overlapping
    assert calc.ranges_overlap(date(2024, 2, 1), date(2024, 3, 1), date(2024, 3, 1), date(2024, 3, 31))
    assert calc.range_intersection(
        date(2024, 2, 15), date(2024, 3, 15), date(2024, 3, 1), date(2024, 3, 31)
    ) == (date(2024, 3, 1), date(2024, 3, 15))


def test_days_until_rounds_up_partial_days() -> None:
    assert calc.days_until(date(2024, 6, 16), NOW) == 1
    assert calc.days_until(date(2024, 6, 15), datetime(2024, 6, 15)) == 0
    assert calc.days_until(date(2024, 6, 10), NOW) == -5


# ===== BUDGETS =====

def test_budget_usage_zero_amount_gives_zero_percentage() -> None:
    usage = calc.calculate_budget_usage(D(0), D(50))
    assert usage.percentage == 0
    assert usage.remaining == D(-50)
    assert usage.status == BudgetStatusEnum.NORMAL


@pytest.mark.parametrize(
    "spent, status",
    [
        (0, BudgetStatusEnum.NORMAL),
        (399, BudgetStatusEnum.NORMAL),
        (400, BudgetStatusEnum.NEAR_LIMIT),
        (499, BudgetStatusEnum.NEAR_LIMIT),
        (500, BudgetStatusEnum.OVER_BUDGET),
        (900, BudgetStatusEnum.OVER_BUDGET),
    ],
)
def test_budget_status_thresholds(spent, status) -> None:
    assert calc.calculate_budget_usage(D(500), D(spent)).status == status


def test_budget_percentage_is_not_clamped() -> None:
    usage = calc.calculate_budget_usage(D(500), D(750))
    assert usage.percentage == 150
    assert usage.display_percentage == 100
    assert usage.remaining == D(-250)


def test_average_of_nothing_is_zero() -> None:
    assert calc.average([]) == 0
    assert calc.average([50.0, 100.0]) == 75.0


# ===== DEBTS =====

def test_derive_debt_overpayment_is_paid_off() -> None:
    derived = calc.derive_debt(D(5000), [D(2000), D(3500)], None, DebtStatus.ACTIVE, NOW)
    assert derived.total_paid == D(5500)
    assert derived.remaining_amount == 0
    assert derived.progress_percentage == 100
    assert derived.current_status == DebtStatus.PAID_OFF
    assert derived.days_until_due is None


def test_derive_debt_past_due_is_overdue() -> None:
    derived = calc.derive_debt(D(1000), [D(100)], date(2024, 1, 1), DebtStatus.ACTIVE, NOW)
    assert derived.remaining_amount == D(900)
    assert derived.days_until_due < 0
    assert derived.current_status == DebtStatus.OVERDUE


def test_derive_debt_keeps_stored_status_when_current() -> None:
    derived = calc.derive_debt(D(1000), [], date(2025, 1, 1), DebtStatus.ACTIVE, NOW)
    assert derived.progress_percentage == 0
    assert derived.current_status == DebtStatus.ACTIVE


def test_refreshed_debt_cache_transitions() -> None:
    assert calc.refreshed_debt_cache(D(1000), D(1000), DebtStatus.ACTIVE) == (0, DebtStatus.PAID_OFF)
    assert calc.refreshed_debt_cache(D(1000), D(500), DebtStatus.PAID_OFF) == (D(500), DebtStatus.ACTIVE)
    assert calc.refreshed_debt_cache(D(1000), D(500), DebtStatus.OVERDUE) == (D(500), DebtStatus.OVERDUE)


def test_summarize_debts() -> None:
    debts = [
        DebtSnapshot(debt_type=DebtType.OWE, total_amount=D(5000), total_paid=D(2000)),
        DebtSnapshot(debt_type=DebtType.LEND, total_amount=D(3000), total_paid=D(1000), due_date=date(2024, 1, 1)),
        DebtSnapshot(debt_type=DebtType.OWE, total_amount=D(1000), total_paid=D(1000), due_date=date(2024, 1, 1)),
    ]
    overview, breakdown = calc.summarize_debts(debts, NOW)

    assert overview.total_owe_amount == D(6000)
    assert overview.total_owe_paid == D(3000)
    assert overview.total_lend_amount == D(3000)
    assert overview.total_lend_received == D(1000)
    assert overview.total_owe_remaining == D(3000)
    assert overview.total_lend_remaining == D(2000)
    assert overview.net_position == D(-1000)
    assert overview.active_owe_debts == 1
    assert overview.active_lend_debts == 1
    # The paid-off OWE debt is past due but has nothing left
    assert overview.overdue_debts == 1

    assert [(b.debt_type, b.count, b.total_amount) for b in breakdown] == [
        (DebtType.OWE, 1, D(3000)),
        (DebtType.LEND, 1, D(2000)),
    ]


# ===== GOALS =====

def test_goal_past_target_date_is_overdue() -> None:
    progress = calc.derive_goal(D(1000), D(400), date(2024, 1, 1), NOW)
    assert progress.days_left < 0
    assert progress.progress == 40
    assert progress.remaining == D(600)
    assert not progress.is_completed
    assert progress.status == GoalStatusEnum.OVERDUE


def test_goal_statuses() -> None:
    soon = (NOW + timedelta(days=10)).date()
    later = (NOW + timedelta(days=90)).date()
    assert calc.derive_goal(D(1000), D(1000), date(2024, 1, 1), NOW).status == GoalStatusEnum.COMPLETED
    assert calc.derive_goal(D(1000), D(10), soon, NOW).status == GoalStatusEnum.NEAR_DEADLINE
    assert calc.derive_goal(D(1000), D(10), later, NOW).status == GoalStatusEnum.IN_PROGRESS


def test_count_completed_goals() -> None:
    assert calc.count_completed_goals([(D(100), D(100)), (D(150), D(100)), (D(10), D(100))]) == 2


# ===== PERIOD SUMMARY =====

def _category(category_id: int, name: str, color: str) -> CategoryResponse:
    return CategoryResponse(
        id=category_id, name=name, color=color, category_type=CategoryType.EXPENSE, created_at=NOW
    )


def test_join_expense_categories_keeps_missing_categories() -> None:
    groups = [
        ExpenseGroup(category_id=None, amount=D(50)),
        ExpenseGroup(category_id=1, amount=D(200)),
        ExpenseGroup(category_id=99, amount=D(30)),
    ]
    expenses = calc.join_expense_categories(groups, {1: _category(1, "Food", "#EF4444")})

    assert [(e.category_name, e.amount) for e in expenses] == [
        ("Food", D(200)),
        ("Uncategorized", D(50)),
        ("Uncategorized", D(30)),
    ]
    assert expenses[1].color == "#6B7280"


@pytest.mark.parametrize(
    "income, expense, debt, score",
    [
        (10000, 7000, 0, 100),
        (1000, 1000, 0, 65),
        (1000, 950, 0, 90),
        (0, 500, 1000, 15),
        (0, 0, 0, 65),
        (2000, 1000, 5000, 70),
    ],
)
def test_health_score(income, expense, debt, score) -> None:
    assert calc.calculate_health_score(D(income), D(expense), D(debt)) == score


def test_health_score_stays_in_range() -> None:
    values = [0, 1, 100, 1000, 100000]
    for income in values:
        for expense in values:
            for debt in values:
                assert 0 <= calc.calculate_health_score(D(income), D(expense), D(debt)) <= 100


def test_compose_period_summary() -> None:
    period = Period(month=3, year=2024, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
    summary = calc.compose_period_summary(SummaryInputs(
        period=period,
        total_income=D(10000),
        total_expense=D(7000),
        expense_groups=[ExpenseGroup(category_id=1, amount=D(7000))],
        categories={1: _category(1, "Housing", "#8B5CF6")},
        budget_percentages=[50.0, 100.0],
        goal_amounts=[(D(500), D(500)), (D(10), D(500))],
    ))

    assert summary.balance == D(3000)
    assert summary.health_score == 100
    assert summary.budget_usage == 75.0
    assert summary.completed_goals == 1
    assert summary.expenses_by_category[0].category_name == "Housing"
    assert summary.period == period
