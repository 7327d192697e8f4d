"""Insight rule engine.

Evaluates an ordered table of threshold rules against a snapshot and
returns templated insights, highest priority first. Rules never depend on
each other; any number of them can fire in one call.
"""

import logging
import math
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal

from fincoach.core.models import (
    AIInsight,
    Budget,
    Goal,
    InsightType,
    SpendingAggregates,
    Transaction,
    as_naive_utc,
    utc_now,
)
from fincoach.engine.aggregator import (
    SPENDING_WINDOW_DAYS,
    SECONDS_PER_DAY,
    VOLATILITY_WINDOW_DAYS,
    aggregate,
    coefficient_of_variation,
)
from fincoach.engine.scoring import EMERGENCY_FUND_MONTHS, find_emergency_goal

logger = logging.getLogger(__name__)

IdFactory = Callable[[str], str]

# Thresholds
CONCENTRATION_SHARE = Decimal("0.4")
BUDGET_ON_TARGET_LOW = Decimal("0.9")
BUDGET_ON_TARGET_HIGH = Decimal("1.1")
BUDGET_EXCEEDED = Decimal("1.2")
VOLATILITY_LIMIT = Decimal("0.3")
VOLATILITY_MIN_SAMPLES = 3
GOAL_BEHIND_PROGRESS = Decimal("0.25")
GOAL_BEHIND_DAYS = 90
GOAL_NEAR_PROGRESS = Decimal("0.8")
EMERGENCY_LOW_MONTHS = 3


class TagIdFactory:
    """Uses the rule tag itself as the insight id.

    Tags are unique within a call (budget and goal rules embed the record
    id), so an insight keeps its id whatever else fires. A repeated tag gets
    a ``-2``, ``-3`` ... suffix.
    """

    def __init__(self) -> None:
        self._seen: Counter[str] = Counter()

    def __call__(self, tag: str) -> str:
        self._seen[tag] += 1
        count = self._seen[tag]
        return tag if count == 1 else f"{tag}-{count}"


def format_number(value: Decimal, places: int = 0) -> str:
    """Format with half-up rounding (12.5 -> "13")."""
    exponent = Decimal(1).scaleb(-places)
    return str(value.quantize(exponent, rounding=ROUND_HALF_UP))


@dataclass
class RuleContext:
    """Everything a rule may look at for one engine call."""

    transactions: Sequence[Transaction]
    budgets: Sequence[Budget]
    goals: Sequence[Goal]
    aggregates: SpendingAggregates
    now: datetime
    new_id: IdFactory
    emergency_months: int = EMERGENCY_FUND_MONTHS

    def insight(
        self,
        tag: str,
        insight_type: InsightType,
        title: str,
        message: str,
        priority: int,
        actionable: bool = True,
    ) -> AIInsight:
        return AIInsight(
            id=self.new_id(tag),
            type=insight_type,
            title=title,
            message=message,
            actionable=actionable,
            priority=priority,
            created_at=self.now,
        )

    def days_until(self, goal: Goal) -> int | None:
        """Whole days until the goal deadline, rounded up (negative if past)."""
        if goal.deadline is None:
            return None
        deadline = datetime.combine(goal.deadline, time.min)
        return math.ceil((deadline - self.now).total_seconds() / SECONDS_PER_DAY)


Rule = Callable[[RuleContext], Iterable[AIInsight]]


# -----------------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------------


def spending_concentration_rule(ctx: RuleContext) -> Iterable[AIInsight]:
    """Warn when one category dominates recent spending."""
    totals = ctx.aggregates.category_totals
    total_spent = sum(totals.values(), Decimal(0))
    if not totals or total_spent <= 0:
        return

    # max() keeps the first category on ties
    category, amount = max(totals.items(), key=lambda item: item[1])
    if amount > total_spent * CONCENTRATION_SHARE:
        share = amount / total_spent * 100
        yield ctx.insight(
            "spending",
            InsightType.WARNING,
            "High Spending Alert",
            f"You've spent {format_number(share)}% of your budget on {category} "
            "this month. Consider reviewing this category.",
            priority=8,
        )


def budget_rule(ctx: RuleContext) -> Iterable[AIInsight]:
    """Praise budgets near their target, flag budgets well over it."""
    for budget in ctx.budgets:
        rate = budget.usage_rate

        if BUDGET_ON_TARGET_LOW <= rate < BUDGET_ON_TARGET_HIGH:
            yield ctx.insight(
                f"budget-good-{budget.id}",
                InsightType.ACHIEVEMENT,
                "Great Budget Control!",
                f"You're staying within your {budget.category} budget. Keep it up!",
                priority=5,
                actionable=False,
            )
        elif rate > BUDGET_EXCEEDED:
            over = (rate - 1) * 100
            yield ctx.insight(
                f"budget-over-{budget.id}",
                InsightType.WARNING,
                "Budget Exceeded",
                f"You've exceeded your {budget.category} budget by {format_number(over)}%. "
                "Time to reassess your spending.",
                priority=9,
            )


def income_volatility_rule(ctx: RuleContext) -> Iterable[AIInsight]:
    samples = ctx.aggregates.income_samples
    if len(samples) < VOLATILITY_MIN_SAMPLES:
        return

    if coefficient_of_variation(samples) > VOLATILITY_LIMIT:
        yield ctx.insight(
            "income-volatile",
            InsightType.TIP,
            "Income Variability Detected",
            "Your income varies significantly. Consider building a larger emergency "
            "fund and using percentage-based budgeting.",
            priority=7,
        )


def goal_progress_rule(ctx: RuleContext) -> Iterable[AIInsight]:
    """Flag goals falling behind close to their deadline, cheer nearly-done ones."""
    for goal in ctx.goals:
        progress = goal.progress
        days_left = ctx.days_until(goal)

        if (
            progress < GOAL_BEHIND_PROGRESS
            and days_left is not None
            and days_left < GOAL_BEHIND_DAYS
        ):
            per_month = (goal.target_amount - goal.current_amount) / max(days_left, 1) * 30
            yield ctx.insight(
                f"goal-behind-{goal.id}",
                InsightType.WARNING,
                "Goal Behind Schedule",
                f'Your "{goal.title}" goal needs attention. You\'ll need to save '
                f"${format_number(per_month)} per month to reach it.",
                priority=6,
            )
        elif progress > GOAL_NEAR_PROGRESS:
            yield ctx.insight(
                f"goal-close-{goal.id}",
                InsightType.ACHIEVEMENT,
                "Goal Almost Reached!",
                f"You're {format_number(progress * 100)}% of the way to your "
                f'"{goal.title}" goal. Amazing progress!',
                priority=4,
                actionable=False,
            )


def emergency_fund_rule(ctx: RuleContext) -> Iterable[AIInsight]:
    """Recommend an emergency fund, or warn when it covers under three months."""
    monthly_expenses = ctx.aggregates.monthly_expenses
    goal = find_emergency_goal(ctx.goals)

    if goal is None:
        yield ctx.insight(
            "emergency-missing",
            InsightType.RECOMMENDATION,
            "Create Emergency Fund",
            f"Irregular income makes a safety net essential: aim for "
            f"{ctx.emergency_months} months of expenses saved. "
            f"Start with ${format_number(monthly_expenses * Decimal('0.5'))}.",
            priority=10,
        )
    elif goal.current_amount < monthly_expenses * EMERGENCY_LOW_MONTHS:
        months = goal.current_amount / monthly_expenses
        yield ctx.insight(
            "emergency-low",
            InsightType.WARNING,
            "Emergency Fund Too Low",
            f"Your emergency fund covers only {format_number(months, 1)} months. "
            f"Aim for {ctx.emergency_months} months of expenses.",
            priority=8,
        )


RULES: list[Rule] = [
    spending_concentration_rule,
    budget_rule,
    income_volatility_rule,
    goal_progress_rule,
    emergency_fund_rule,
]


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------


def generate_insights(
    transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    goals: Sequence[Goal],
    now: datetime | None = None,
    id_factory: IdFactory | None = None,
    spending_days: int = SPENDING_WINDOW_DAYS,
    volatility_days: int = VOLATILITY_WINDOW_DAYS,
    emergency_months: int = EMERGENCY_FUND_MONTHS,
) -> list[AIInsight]:
    """Evaluate every rule and rank the resulting insights.

    Stateless: previously dismissed insights are not filtered here, see
    ``filter_dismissed``.

    Args:
        transactions: Full transaction snapshot.
        budgets: Current budgets.
        goals: All goals.
        now: Reference moment (defaults to the current UTC time).
        id_factory: Produces an id from a rule tag. Defaults to a fresh
            TagIdFactory, so ids are the rule tags.
        spending_days: Window for monthly figures and category totals.
        volatility_days: Window for income volatility.
        emergency_months: Target months quoted in emergency fund messages.

    Returns:
        Insights sorted by priority, descending. Equal priorities keep
        rule order.
    """
    now = as_naive_utc(now) if now else utc_now()
    ctx = RuleContext(
        transactions=transactions,
        budgets=budgets,
        goals=goals,
        aggregates=aggregate(transactions, now, spending_days, volatility_days),
        now=now,
        new_id=id_factory or TagIdFactory(),
        emergency_months=emergency_months,
    )

    insights: list[AIInsight] = []
    for rule in RULES:
        insights.extend(rule(ctx))

    logger.debug("Generated %d insights", len(insights))
    return sorted(insights, key=lambda i: i.priority, reverse=True)


def filter_dismissed(insights: Iterable[AIInsight], dismissed: set[str]) -> list[AIInsight]:
    """Drop insights the user has already dismissed."""
    return [i for i in insights if i.id not in dismissed]
