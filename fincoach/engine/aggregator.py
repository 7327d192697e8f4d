"""Transaction aggregation.

Reduces raw transaction lists into the windowed sums the scoring and
insight engines work from. Windows are measured in whole days back
from ``now``.
"""

import math
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal

from fincoach.core.models import (
    SpendingAggregates,
    Transaction,
    TransactionType,
    as_naive_utc,
)

SPENDING_WINDOW_DAYS = 30
VOLATILITY_WINDOW_DAYS = 90

SECONDS_PER_DAY = 24 * 60 * 60


def days_between(moment: datetime, now: datetime) -> int:
    """Whole days between two moments, rounded up, ignoring direction.

    Aware moments are compared in UTC, so naive and aware values mix.
    """
    seconds = abs((as_naive_utc(now) - as_naive_utc(moment)).total_seconds())
    return math.ceil(seconds / SECONDS_PER_DAY)


def is_within_days(moment: datetime, days: int, now: datetime) -> bool:
    """Check if a moment falls inside a trailing window.

    A transaction exactly ``days`` old is included.
    """
    return days_between(moment, now) <= days


def filter_window(
    transactions: Iterable[Transaction],
    tx_type: TransactionType,
    days: int,
    now: datetime,
) -> list[Transaction]:
    """Transactions of one type inside the trailing window."""
    return [
        tx for tx in transactions
        if tx.type == tx_type and is_within_days(tx.date, days, now)
    ]


def sum_by_type(
    transactions: Iterable[Transaction],
    tx_type: TransactionType,
    days: int,
    now: datetime,
) -> Decimal:
    """Sum amounts of one transaction type inside the window."""
    return sum(
        (tx.amount for tx in filter_window(transactions, tx_type, days, now)),
        Decimal(0),
    )


def category_totals(
    transactions: Iterable[Transaction],
    days: int,
    now: datetime,
) -> dict[str, Decimal]:
    """Expense totals per category inside the window.

    Categories keep the order in which they first appear.
    """
    totals: dict[str, Decimal] = {}
    for tx in filter_window(transactions, TransactionType.EXPENSE, days, now):
        totals[tx.category] = totals.get(tx.category, Decimal(0)) + tx.amount
    return totals


def income_samples(
    transactions: Iterable[Transaction],
    now: datetime,
    days: int = VOLATILITY_WINDOW_DAYS,
) -> list[Decimal]:
    """Individual income amounts inside the volatility window."""
    return [tx.amount for tx in filter_window(transactions, TransactionType.INCOME, days, now)]


def coefficient_of_variation(values: Sequence[Decimal]) -> Decimal:
    """Population standard deviation divided by the mean.

    Returns:
        CV as a fraction. Zero when fewer than two values exist or the
        mean is zero.
    """
    if len(values) < 2:
        return Decimal(0)

    mean = sum(values, Decimal(0)) / len(values)
    if mean == 0:
        return Decimal(0)

    variance = sum(((v - mean) ** 2 for v in values), Decimal(0)) / len(values)
    return variance.sqrt() / mean


def income_volatility(
    transactions: Iterable[Transaction],
    now: datetime,
    days: int = VOLATILITY_WINDOW_DAYS,
) -> Decimal:
    """Income coefficient of variation as a percentage."""
    return coefficient_of_variation(income_samples(transactions, now, days)) * 100


def aggregate(
    transactions: Sequence[Transaction],
    now: datetime,
    days: int = SPENDING_WINDOW_DAYS,
    volatility_days: int = VOLATILITY_WINDOW_DAYS,
) -> SpendingAggregates:
    """Aggregate a transaction snapshot.

    Args:
        transactions: Full transaction snapshot.
        now: Reference moment for the windows.
        days: Spending window for income, expenses and category totals.
        volatility_days: Window for income samples and volatility.

    Returns:
        SpendingAggregates. All zeros for an empty snapshot.
    """
    return SpendingAggregates(
        monthly_income=sum_by_type(transactions, TransactionType.INCOME, days, now),
        monthly_expenses=sum_by_type(transactions, TransactionType.EXPENSE, days, now),
        category_totals=category_totals(transactions, days, now),
        income_samples=income_samples(transactions, now, volatility_days),
        income_volatility=income_volatility(transactions, now, volatility_days),
    )
