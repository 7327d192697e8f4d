"""Goal advice.

Looks across all goals at once (timeline, focus, overdue) rather than one
goal at a time like the insight rules do.
"""

from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from fincoach.core.models import (
    Goal,
    GoalAdvice,
    GoalAdviceKind,
    GoalPriority,
    Transaction,
)
from fincoach.engine.scoring import find_emergency_goal

ASSUMED_SAVINGS_SHARE = Decimal("0.2")
LOW_SAVINGS_RATE = Decimal(10)
GOOD_SAVINGS_RATE = Decimal(20)
EMERGENCY_INCOME_MONTHS = 3


def analyze_goals(
    goals: Sequence[Goal],
    transactions: Sequence[Transaction],
    now: datetime,
) -> list[GoalAdvice]:
    """Produce goal advice from goals and the transactions given.

    Income and expenses are summed over every transaction passed in, so
    callers choose the period by what they pass.
    """
    income = sum((tx.amount for tx in transactions if tx.is_income), Decimal(0))
    expenses = sum((tx.amount for tx in transactions if tx.is_expense), Decimal(0))
    active = [g for g in goals if not g.is_completed]

    advice: list[GoalAdvice] = []

    if active and income > 0:
        remaining = sum((g.remaining for g in active), Decimal(0))
        months = remaining / (income * ASSUMED_SAVINGS_SHARE)
        advice.append(GoalAdvice(
            kind=GoalAdviceKind.TIMELINE,
            title="Goal Completion Timeline",
            message=f"At a 20% savings rate, you'll complete all goals in {months:.1f} months",
        ))

    high_priority = [g for g in active if g.priority == GoalPriority.HIGH]
    if len(high_priority) > 1:
        advice.append(GoalAdvice(
            kind=GoalAdviceKind.PRIORITY,
            title="Focus Your Efforts",
            message=(
                f"You have {len(high_priority)} high-priority goals. "
                "Consider focusing on one at a time for faster progress."
            ),
        ))

    emergency = find_emergency_goal(goals)
    if emergency is None:
        advice.append(GoalAdvice(
            kind=GoalAdviceKind.EMERGENCY,
            title="Missing Emergency Fund",
            message="An emergency fund should be your top priority. Start with $1,000.",
        ))
    elif emergency.current_amount < income * EMERGENCY_INCOME_MONTHS:
        advice.append(GoalAdvice(
            kind=GoalAdviceKind.EMERGENCY,
            title="Boost Emergency Fund",
            message=(
                "Your emergency fund should cover 6 months of expenses. "
                "Consider increasing contributions."
            ),
        ))

    today = now.date()
    overdue = [g for g in active if g.deadline is not None and g.deadline < today]
    if overdue:
        advice.append(GoalAdvice(
            kind=GoalAdviceKind.OVERDUE,
            title="Overdue Goals",
            message=(
                f"{len(overdue)} goal(s) are past their deadline. "
                "Consider extending deadlines or adjusting targets."
            ),
        ))

    savings_rate = (income - expenses) / income * 100 if income > 0 else Decimal(0)
    if savings_rate < LOW_SAVINGS_RATE:
        advice.append(GoalAdvice(
            kind=GoalAdviceKind.SAVINGS,
            title="Low Savings Rate",
            message=(
                f"Your savings rate is {savings_rate:.1f}%. "
                "Aim for at least 20% to reach your goals faster."
            ),
        ))
    elif savings_rate >= GOOD_SAVINGS_RATE:
        advice.append(GoalAdvice(
            kind=GoalAdviceKind.SAVINGS,
            title="Excellent Savings Rate",
            message=(
                f"Your {savings_rate:.1f}% savings rate is outstanding! "
                "You're on track to achieve your goals."
            ),
        ))

    return advice
