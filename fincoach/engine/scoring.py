"""Financial health scoring.

Turns a transaction/budget/goal snapshot into five 0-100 factors and an
overall score. Division-by-zero situations resolve to fixed neutral values
instead of errors:

    emergency_fund    0 with no expenses and an empty fund (100 if funded)
    debt_ratio        100 with no income and no debt (0 with debt)
    savings_rate      0 with no income
    budget_adherence  50 with no budgets
    income_stability  50 with fewer than two income records
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from fincoach.core.models import (
    Budget,
    FinancialHealth,
    Goal,
    GoalCategory,
    HealthFactors,
    SpendingAggregates,
    Transaction,
    as_naive_utc,
    health_rating,
    utc_now,
)
from fincoach.engine.aggregator import (
    SPENDING_WINDOW_DAYS,
    VOLATILITY_WINDOW_DAYS,
    aggregate,
    coefficient_of_variation,
)

logger = logging.getLogger(__name__)

__all__ = [
    "budget_adherence_score",
    "calculate_budget_adherence",
    "calculate_debt_ratio",
    "calculate_emergency_fund",
    "calculate_financial_health",
    "calculate_income_stability",
    "calculate_savings_rate",
    "find_emergency_goal",
    "health_rating",
]

EMERGENCY_FUND_MONTHS = 6
NEUTRAL_SCORE = Decimal(50)

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)


def clamp_score(value: Decimal) -> Decimal:
    """Clamp a factor to [0, 100]."""
    return min(max(value, _ZERO), _HUNDRED)


def find_emergency_goal(goals: Sequence[Goal]) -> Goal | None:
    """First goal in the emergency category, if any."""
    return next((g for g in goals if g.category == GoalCategory.EMERGENCY), None)


def calculate_emergency_fund(
    goals: Sequence[Goal],
    monthly_expenses: Decimal,
    months: int = EMERGENCY_FUND_MONTHS,
) -> Decimal:
    """Share of ``months`` of expenses covered by the emergency goal."""
    goal = find_emergency_goal(goals)
    saved = goal.current_amount if goal else _ZERO

    if monthly_expenses <= 0:
        return _HUNDRED if saved > 0 else _ZERO

    coverage = min(saved / (monthly_expenses * months), Decimal(1))
    return clamp_score(coverage * 100)


def calculate_debt_ratio(goals: Sequence[Goal], monthly_income: Decimal) -> Decimal:
    """Score inversely proportional to debt targets vs annual income."""
    total_debt = sum(
        (g.target_amount for g in goals if g.category == GoalCategory.DEBT),
        _ZERO,
    )

    if monthly_income <= 0:
        return _HUNDRED if total_debt == 0 else _ZERO

    return clamp_score(_HUNDRED - total_debt / (monthly_income * 12) * 100)


def calculate_savings_rate(monthly_income: Decimal, monthly_expenses: Decimal) -> Decimal:
    """Percentage of income not spent, capped to [0, 100]."""
    if monthly_income <= 0:
        return _ZERO
    return clamp_score((monthly_income - monthly_expenses) / monthly_income * 100)


def budget_adherence_score(budget: Budget) -> Decimal:
    """Score a single budget.

    100 while within the allocation, then one point lost per percent over.
    """
    rate = budget.usage_rate
    if rate <= 1:
        return _HUNDRED
    return max(_ZERO, _HUNDRED - (rate - 1) * 100)


def calculate_budget_adherence(budgets: Sequence[Budget]) -> Decimal:
    """Mean per-budget score; neutral 50 when there are no budgets."""
    if not budgets:
        return NEUTRAL_SCORE
    scores = [budget_adherence_score(b) for b in budgets]
    return sum(scores, _ZERO) / len(scores)


def calculate_income_stability(income_samples: Sequence[Decimal]) -> Decimal:
    """Score income regularity from the trailing income samples.

    Each 0.01 of coefficient of variation costs two points.
    """
    if len(income_samples) < 2:
        return NEUTRAL_SCORE
    volatility = coefficient_of_variation(income_samples)
    return clamp_score(_HUNDRED - volatility * 200)


def score_factors(
    aggregates: SpendingAggregates,
    budgets: Sequence[Budget],
    goals: Sequence[Goal],
    emergency_months: int = EMERGENCY_FUND_MONTHS,
) -> HealthFactors:
    """Compute all five factors from pre-aggregated figures."""
    return HealthFactors(
        emergency_fund=calculate_emergency_fund(
            goals, aggregates.monthly_expenses, emergency_months
        ),
        debt_ratio=calculate_debt_ratio(goals, aggregates.monthly_income),
        savings_rate=calculate_savings_rate(
            aggregates.monthly_income, aggregates.monthly_expenses
        ),
        budget_adherence=calculate_budget_adherence(budgets),
        income_stability=calculate_income_stability(aggregates.income_samples),
    )


def overall_score(factors: HealthFactors) -> int:
    """Mean of the factors, rounded half up."""
    values = factors.as_list()
    mean = sum(values, _ZERO) / len(values)
    return int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def calculate_financial_health(
    transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    goals: Sequence[Goal],
    now: datetime | None = None,
    spending_days: int = SPENDING_WINDOW_DAYS,
    volatility_days: int = VOLATILITY_WINDOW_DAYS,
    emergency_months: int = EMERGENCY_FUND_MONTHS,
) -> FinancialHealth:
    """Calculate the financial health score for a snapshot.

    Pure function: identical inputs (including ``now``) give an identical
    result.

    Args:
        transactions: Full transaction snapshot.
        budgets: Current budgets with their tallied ``spent``.
        goals: All goals.
        now: Reference moment for windows (defaults to the current UTC
            time). Aware values are converted to naive UTC.
        spending_days: Window for monthly income and expenses.
        volatility_days: Window for income stability.
        emergency_months: Months of expenses a full emergency fund covers.

    Returns:
        FinancialHealth with score and factors.
    """
    now = as_naive_utc(now) if now else utc_now()
    aggregates = aggregate(transactions, now, spending_days, volatility_days)
    factors = score_factors(aggregates, budgets, goals, emergency_months)
    score = overall_score(factors)

    logger.debug(
        "Health score %d from %d transactions, %d budgets, %d goals",
        score,
        len(transactions),
        len(budgets),
        len(goals),
    )
    return FinancialHealth(score=score, factors=factors)
