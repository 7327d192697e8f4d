"""Shared fixtures and builders for FinCoach tests."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from fincoach.core.models import (
    Budget,
    Goal,
    GoalCategory,
    GoalPriority,
    Transaction,
    TransactionType,
)

NOW = datetime(2024, 6, 15, 12, 0)


def income(amount: str, days_ago: float = 1, category: str = "gigs") -> Transaction:
    return Transaction(
        amount=Decimal(amount),
        category=category,
        date=NOW - timedelta(days=days_ago),
        type=TransactionType.INCOME,
    )


def expense(amount: str, category: str = "food", days_ago: float = 1) -> Transaction:
    return Transaction(
        amount=Decimal(amount),
        category=category,
        date=NOW - timedelta(days=days_ago),
        type=TransactionType.EXPENSE,
    )


def budget(spent: str, allocated: str = "100", category: str = "food", id: str = "b1") -> Budget:
    return Budget(id=id, category=category, allocated=Decimal(allocated), spent=Decimal(spent))


def goal(
    current: str,
    target: str = "1000",
    category: GoalCategory = GoalCategory.SAVINGS,
    deadline: date | None = None,
    priority: GoalPriority = GoalPriority.MEDIUM,
    title: str = "Laptop",
    id: str = "g1",
) -> Goal:
    return Goal(
        id=id,
        title=title,
        target_amount=Decimal(target),
        current_amount=Decimal(current),
        deadline=deadline,
        priority=priority,
        category=category,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


# As written by the browser app: JavaScript ISO strings with a "Z" suffix
ZULU_SNAPSHOT_JSON = """
{
  "transactions": [
    {"id": "t1", "amount": 100, "category": "food", "description": "Groceries",
     "date": "2024-06-14T10:00:00.000Z", "type": "expense"}
  ]
}
"""
