"""Rule-based budget suggestions.

Starts from the 50/30/20 split of monthly income and adds a reduction
suggestion for every category eating a large share of income.
"""

from collections.abc import Sequence
from decimal import Decimal

from fincoach.core.models import BudgetSuggestion, GoalPriority, Transaction
from fincoach.engine.insights import format_number

HEAVY_CATEGORY_SHARE = Decimal(15)  # Percent of income
REDUCTION_FACTOR = Decimal("0.8")
EXEMPT_CATEGORIES = {"housing"}
DEFAULT_LIMIT = 4

# (category, share of income, reason, priority)
INCOME_SPLIT = [
    ("Emergency Fund", Decimal("0.2"), "Build financial security with 20% of income", GoalPriority.HIGH),
    ("Needs (Housing, Food, Utilities)", Decimal("0.5"), "Essential expenses should be 50% of income", GoalPriority.HIGH),
    ("Wants (Entertainment, Shopping)", Decimal("0.3"), "Discretionary spending should be 30% of income", GoalPriority.MEDIUM),
    ("Savings & Investments", Decimal("0.2"), "Save 20% for future goals and investments", GoalPriority.HIGH),
]


def suggest_budgets(
    transactions: Sequence[Transaction],
    monthly_income: Decimal,
    limit: int | None = DEFAULT_LIMIT,
) -> list[BudgetSuggestion]:
    """Suggest budget allocations.

    Args:
        transactions: Transactions whose expenses are checked per category.
        monthly_income: Income the split is based on. Nothing is suggested
            when it is not positive.
        limit: Maximum number of suggestions returned, None for all. The
            income split alone fills the default limit.

    Returns:
        Income split suggestions first, then category reductions.
    """
    if monthly_income <= 0:
        return []

    suggestions = [
        BudgetSuggestion(
            category=category,
            amount=monthly_income * share,
            reason=reason,
            priority=priority,
        )
        for category, share, reason, priority in INCOME_SPLIT
    ]

    spending: dict[str, Decimal] = {}
    for tx in transactions:
        if tx.is_expense:
            spending[tx.category] = spending.get(tx.category, Decimal(0)) + tx.amount

    for category, amount in spending.items():
        percentage = amount / monthly_income * 100
        if percentage > HEAVY_CATEGORY_SHARE and category.lower() not in EXEMPT_CATEGORIES:
            suggestions.append(
                BudgetSuggestion(
                    category=f"Reduce {category}",
                    amount=amount * REDUCTION_FACTOR,
                    reason=f"{category} spending is {format_number(percentage)}% of income - consider reducing",
                    priority=GoalPriority.MEDIUM,
                )
            )

    return suggestions[:limit]
