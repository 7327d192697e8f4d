"""Domain models for FinCoach.

All financial data structures are defined here using Pydantic v2 for validation.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, Field, computed_field, field_validator


def _new_id() -> str:
    return uuid4().hex


def as_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC. Naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    """Current time as naive UTC, comparable with stored transaction dates."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------


class TransactionType(str, Enum):
    """Direction of a transaction."""

    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """Period a budget allocation covers."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"


class GoalPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class GoalCategory(str, Enum):
    """Kind of goal.

    EMERGENCY: Safety net, drives the emergency fund factor and rules.
    DEBT: Debt to pay off, target amounts feed the debt ratio factor.
    SAVINGS / INVESTMENT: Plain accumulation goals.
    """

    EMERGENCY = "emergency"
    SAVINGS = "savings"
    DEBT = "debt"
    INVESTMENT = "investment"


class InsightType(str, Enum):
    WARNING = "warning"
    TIP = "tip"
    ACHIEVEMENT = "achievement"
    RECOMMENDATION = "recommendation"


# -----------------------------------------------------------------------------
# Transaction Model
# -----------------------------------------------------------------------------


class Transaction(BaseModel):
    """A single financial transaction.

    Attributes:
        id: Unique identifier (auto-generated).
        amount: Always positive; direction comes from ``type``.
        category: User-defined category string.
        description: Free-form description.
        date: Moment the transaction happened, stored as naive UTC.
        type: income or expense.
        tags: Arbitrary labels.
        is_recurring: True for repeating income/expenses (rent, salary).
    """

    id: str = Field(default_factory=_new_id)
    amount: Annotated[Decimal, Field(gt=0)]
    category: str = Field(min_length=1)
    description: str = ""
    date: datetime
    type: TransactionType
    tags: set[str] = Field(default_factory=set)
    is_recurring: bool = False

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime) -> datetime:
        return as_naive_utc(value)

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


# -----------------------------------------------------------------------------
# Budget & Goal Models
# -----------------------------------------------------------------------------


class Budget(BaseModel):
    """Spending allocation for a category.

    ``spent`` is maintained by whoever tallies transactions against the
    budget; the engine only reads it.
    """

    id: str = Field(default_factory=_new_id)
    category: str = Field(min_length=1)
    allocated: Annotated[Decimal, Field(gt=0)]
    spent: Annotated[Decimal, Field(ge=0)] = Decimal(0)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    is_flexible: bool = False

    @property
    def usage_rate(self) -> Decimal:
        """Share of the allocation already spent (1 = exactly on budget)."""
        return self.spent / self.allocated


class Goal(BaseModel):
    """A savings, debt or investment target.

    current_amount may exceed target_amount (over-funding is allowed).
    A goal without a deadline is never considered behind schedule or overdue.
    """

    id: str = Field(default_factory=_new_id)
    title: str = Field(min_length=1)
    description: str | None = None
    target_amount: Annotated[Decimal, Field(gt=0)]
    current_amount: Annotated[Decimal, Field(ge=0)] = Decimal(0)
    deadline: date | None = None
    priority: GoalPriority = GoalPriority.MEDIUM
    category: GoalCategory = GoalCategory.SAVINGS

    @property
    def progress(self) -> Decimal:
        """Funded fraction of the target (can exceed 1)."""
        return self.current_amount / self.target_amount

    @property
    def remaining(self) -> Decimal:
        return max(Decimal(0), self.target_amount - self.current_amount)

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount


# -----------------------------------------------------------------------------
# Engine Output Models
# -----------------------------------------------------------------------------


class AIInsight(BaseModel):
    """A prioritized, human-readable observation produced by the rule engine."""

    id: str
    type: InsightType
    title: str
    message: str
    actionable: bool
    priority: Annotated[int, Field(ge=1, le=10)]
    created_at: datetime


class HealthFactors(BaseModel):
    """The five sub-scores of the health score, each within [0, 100]."""

    emergency_fund: Annotated[Decimal, Field(ge=0, le=100)]
    debt_ratio: Annotated[Decimal, Field(ge=0, le=100)]
    savings_rate: Annotated[Decimal, Field(ge=0, le=100)]
    budget_adherence: Annotated[Decimal, Field(ge=0, le=100)]
    income_stability: Annotated[Decimal, Field(ge=0, le=100)]

    def as_list(self) -> list[Decimal]:
        return [
            self.emergency_fund,
            self.debt_ratio,
            self.savings_rate,
            self.budget_adherence,
            self.income_stability,
        ]


HEALTH_RATINGS: list[tuple[int, str]] = [
    (90, "Excellent"),
    (80, "Very Good"),
    (70, "Good"),
    (60, "Fair"),
    (40, "Needs Improvement"),
]


def health_rating(score: int) -> str:
    """Map a 0-100 score to its label."""
    for threshold, label in HEALTH_RATINGS:
        if score >= threshold:
            return label
    return "Critical"


class FinancialHealth(BaseModel):
    """Composite health score.

    score is the rounded mean of the factors. Always recomputed from a
    snapshot, never updated incrementally.
    """

    score: Annotated[int, Field(ge=0, le=100)]
    factors: HealthFactors

    @computed_field  # type: ignore[misc]
    @property
    def rating(self) -> str:
        """Human label for the score."""
        return health_rating(self.score)


class SpendingAggregates(BaseModel):
    """Windowed sums the scoring and insight engines work from.

    monthly_* figures cover the spending window (30 days by default),
    income_samples and income_volatility the volatility window (90 days).
    income_volatility is a percentage (coefficient of variation * 100).
    """

    monthly_income: Decimal = Decimal(0)
    monthly_expenses: Decimal = Decimal(0)
    category_totals: dict[str, Decimal] = Field(default_factory=dict)
    income_samples: list[Decimal] = Field(default_factory=list)
    income_volatility: Decimal = Decimal(0)


# -----------------------------------------------------------------------------
# Analysis Models
# -----------------------------------------------------------------------------


class CashflowMetrics(BaseModel):
    """Whole-history cashflow figures shown on the analysis screen."""

    total_income: Decimal = Decimal(0)
    total_expenses: Decimal = Decimal(0)
    net_income: Decimal = Decimal(0)
    avg_daily_spending: Decimal = Decimal(0)
    recurring_expenses: Decimal = Decimal(0)
    savings_rate: Decimal = Decimal(0)  # Percentage, may be negative
    income_volatility: Decimal = Decimal(0)  # Percentage


class DailyCashflow(BaseModel):
    day: date
    income: Decimal = Decimal(0)
    expenses: Decimal = Decimal(0)

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses


class CategoryShare(BaseModel):
    category: str
    amount: Decimal
    percentage: Decimal


class QuickStats(BaseModel):
    """Headline numbers for the dashboard (30-day window)."""

    monthly_income: Decimal = Decimal(0)
    monthly_expenses: Decimal = Decimal(0)
    net_income: Decimal = Decimal(0)
    total_savings: Decimal = Decimal(0)  # Savings + emergency goals
    active_goals: int = 0


class BudgetSuggestion(BaseModel):
    category: str
    amount: Decimal
    reason: str
    priority: GoalPriority


class GoalAdviceKind(str, Enum):
    TIMELINE = "timeline"
    PRIORITY = "priority"
    EMERGENCY = "emergency"
    OVERDUE = "overdue"
    SAVINGS = "savings"


class GoalAdvice(BaseModel):
    kind: GoalAdviceKind
    title: str
    message: str


# -----------------------------------------------------------------------------
# Snapshot
# -----------------------------------------------------------------------------


class FinanceSnapshot(BaseModel):
    """Everything the engine needs, loaded in full before any computation.

    dismissed_insights holds ids the user has hidden; the engine itself never
    looks at it.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    budgets: list[Budget] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    dismissed_insights: set[str] = Field(default_factory=set)
