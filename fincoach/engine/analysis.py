"""Cashflow analysis.

Whole-history metrics, a daily cashflow series and the category breakdown
behind the analysis screen, plus the dashboard quick stats.
"""

from collections.abc import Sequence
from datetime import datetime, timedelta
from decimal import Decimal

from fincoach.core.models import (
    CashflowMetrics,
    CategoryShare,
    DailyCashflow,
    Goal,
    GoalCategory,
    QuickStats,
    Transaction,
    TransactionType,
    as_naive_utc,
)
from fincoach.engine.aggregator import (
    SPENDING_WINDOW_DAYS,
    coefficient_of_variation,
    sum_by_type,
)

ANALYSIS_DAYS = 30
SAVINGS_GOAL_CATEGORIES = {GoalCategory.SAVINGS, GoalCategory.EMERGENCY}


def calculate_cashflow_metrics(transactions: Sequence[Transaction]) -> CashflowMetrics:
    """Calculate cashflow metrics over every transaction given.

    Average daily spending assumes the list covers a 30-day analysis
    period. The savings rate is not clamped here and goes negative when
    spending exceeds income. Recurring expenses are the part of the total
    flagged as repeating (rent, subscriptions).
    """
    incomes = [tx.amount for tx in transactions if tx.is_income]
    total_income = sum(incomes, Decimal(0))
    total_expenses = sum((tx.amount for tx in transactions if tx.is_expense), Decimal(0))
    recurring_expenses = sum(
        (tx.amount for tx in transactions if tx.is_expense and tx.is_recurring),
        Decimal(0),
    )

    savings_rate = (
        (total_income - total_expenses) / total_income * 100
        if total_income > 0
        else Decimal(0)
    )

    return CashflowMetrics(
        total_income=total_income,
        total_expenses=total_expenses,
        net_income=total_income - total_expenses,
        avg_daily_spending=total_expenses / ANALYSIS_DAYS,
        recurring_expenses=recurring_expenses,
        savings_rate=savings_rate,
        income_volatility=coefficient_of_variation(incomes) * 100,
    )


def daily_cashflow(
    transactions: Sequence[Transaction],
    now: datetime,
    days: int = ANALYSIS_DAYS,
) -> list[DailyCashflow]:
    """Income and expenses per calendar day.

    Args:
        transactions: Transactions to bucket.
        now: Last day of the series.
        days: Number of days before ``now`` to start from.

    Returns:
        One point per day from now - days to now inclusive, oldest first.
    """
    end = as_naive_utc(now).date()
    start = end - timedelta(days=days)

    points = {
        start + timedelta(days=offset): DailyCashflow(day=start + timedelta(days=offset))
        for offset in range(days + 1)
    }

    for tx in transactions:
        point = points.get(tx.date.date())
        if point is None:
            continue
        if tx.is_income:
            point.income += tx.amount
        else:
            point.expenses += tx.amount

    return list(points.values())


def category_breakdown(transactions: Sequence[Transaction]) -> list[CategoryShare]:
    """Expense categories, largest first, with their share of all expenses."""
    totals: dict[str, Decimal] = {}
    for tx in transactions:
        if tx.is_expense:
            totals[tx.category] = totals.get(tx.category, Decimal(0)) + tx.amount

    grand_total = sum(totals.values(), Decimal(0))
    if grand_total <= 0:
        return []

    return [
        CategoryShare(category=cat, amount=amount, percentage=amount / grand_total * 100)
        for cat, amount in sorted(totals.items(), key=lambda x: x[1], reverse=True)
    ]


def calculate_quick_stats(
    transactions: Sequence[Transaction],
    goals: Sequence[Goal],
    now: datetime,
    days: int = SPENDING_WINDOW_DAYS,
) -> QuickStats:
    """Headline dashboard numbers.

    Total savings counts the current amount of savings and emergency goals.
    """
    income = sum_by_type(transactions, TransactionType.INCOME, days, now)
    expenses = sum_by_type(transactions, TransactionType.EXPENSE, days, now)

    return QuickStats(
        monthly_income=income,
        monthly_expenses=expenses,
        net_income=income - expenses,
        total_savings=sum(
            (g.current_amount for g in goals if g.category in SAVINGS_GOAL_CATEGORIES),
            Decimal(0),
        ),
        active_goals=sum(1 for g in goals if not g.is_completed),
    )
