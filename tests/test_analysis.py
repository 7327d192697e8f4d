"""Tests for cashflow analysis, suggestions and goal advice."""

from datetime import timedelta
from decimal import Decimal

from conftest import NOW, expense, goal, income
from fincoach.core.models import GoalAdviceKind, GoalCategory, GoalPriority
from fincoach.engine.analysis import (
    calculate_cashflow_metrics,
    calculate_quick_stats,
    category_breakdown,
    daily_cashflow,
)
from fincoach.engine.goals import analyze_goals
from fincoach.engine.suggestions import suggest_budgets


class TestCashflowMetrics:
    """Tests for calculate_cashflow_metrics."""

    def test_empty(self) -> None:
        metrics = calculate_cashflow_metrics([])
        assert metrics.total_income == Decimal(0)
        assert metrics.savings_rate == Decimal(0)
        assert metrics.income_volatility == Decimal(0)

    def test_metrics(self) -> None:
        transactions = [
            income("3000"),
            income("1000", days_ago=10),
            expense("600", "rent"),
            expense("300", "food"),
        ]
        metrics = calculate_cashflow_metrics(transactions)
        assert metrics.total_income == Decimal("4000")
        assert metrics.total_expenses == Decimal("900")
        assert metrics.net_income == Decimal("3100")
        assert metrics.avg_daily_spending == Decimal("30")
        assert metrics.savings_rate == Decimal("77.5")
        assert metrics.income_volatility == Decimal("50")

    def test_negative_savings_rate_kept(self) -> None:
        metrics = calculate_cashflow_metrics([income("100"), expense("150")])
        assert metrics.savings_rate == Decimal("-50")

    def test_recurring_expenses(self) -> None:
        rent = expense("900", "rent").model_copy(update={"is_recurring": True})
        metrics = calculate_cashflow_metrics([rent, expense("100", "food"), income("2000")])
        assert metrics.recurring_expenses == Decimal("900")
        assert metrics.total_expenses == Decimal("1000")


class TestDailyCashflow:
    """Tests for daily_cashflow."""

    def test_covers_window(self) -> None:
        points = daily_cashflow([], NOW)
        assert len(points) == 31
        assert points[0].day == (NOW - timedelta(days=30)).date()
        assert points[-1].day == NOW.date()

    def test_buckets_by_day(self) -> None:
        transactions = [
            income("200", days_ago=0),
            expense("50", days_ago=0),
            expense("25", days_ago=0.1),
            expense("999", days_ago=45),
        ]
        points = daily_cashflow(transactions, NOW)
        today = points[-1]
        assert today.income == Decimal("200")
        assert today.expenses == Decimal("75")
        assert today.net == Decimal("125")
        assert sum(p.expenses for p in points) == Decimal("75")


class TestCategoryBreakdown:
    """Tests for category_breakdown."""

    def test_sorted_with_shares(self) -> None:
        transactions = [expense("25", "food"), expense("75", "rent"), income("500")]
        breakdown = category_breakdown(transactions)
        assert [s.category for s in breakdown] == ["rent", "food"]
        assert breakdown[0].percentage == Decimal("75")

    def test_no_expenses(self) -> None:
        assert category_breakdown([income("100")]) == []


class TestQuickStats:
    """Tests for calculate_quick_stats."""

    def test_stats(self) -> None:
        transactions = [income("2000"), expense("500"), income("700", days_ago=40)]
        goals = [
            goal("500", category=GoalCategory.SAVINGS, id="a"),
            goal("1000", target="1000", category=GoalCategory.EMERGENCY, id="b"),
            goal("2000", target="9000", category=GoalCategory.DEBT, id="c"),
        ]
        stats = calculate_quick_stats(transactions, goals, NOW)
        assert stats.monthly_income == Decimal("2000")
        assert stats.net_income == Decimal("1500")
        assert stats.total_savings == Decimal("1500")
        assert stats.active_goals == 2


class TestSuggestBudgets:
    """Tests for suggest_budgets."""

    def test_no_income(self) -> None:
        assert suggest_budgets([expense("100")], Decimal(0)) == []

    def test_income_split(self) -> None:
        suggestions = suggest_budgets([], Decimal("1000"))
        assert [s.amount for s in suggestions] == [
            Decimal("200"),
            Decimal("500"),
            Decimal("300"),
            Decimal("200"),
        ]
        assert suggestions[0].priority == GoalPriority.HIGH

    def test_default_limit(self) -> None:
        suggestions = suggest_budgets([expense("300", "food")], Decimal("1000"))
        assert len(suggestions) == 4

    def test_heavy_category_reduction(self) -> None:
        transactions = [expense("300", "food"), expense("500", "housing"), expense("100", "fun")]
        suggestions = suggest_budgets(transactions, Decimal("1000"), limit=None)
        reductions = [s for s in suggestions if s.category.startswith("Reduce")]
        assert len(reductions) == 1
        assert reductions[0].category == "Reduce food"
        assert reductions[0].amount == Decimal("240")
        assert reductions[0].reason == "food spending is 30% of income - consider reducing"

    def test_reason_percentage_rounds_half_up(self) -> None:
        suggestions = suggest_budgets([expense("165", "travel")], Decimal("1000"), limit=None)
        assert suggestions[-1].reason == "travel spending is 17% of income - consider reducing"


class TestAnalyzeGoals:
    """Tests for analyze_goals."""

    def test_no_goals_no_income(self) -> None:
        advice = analyze_goals([], [], NOW)
        assert [a.title for a in advice] == ["Missing Emergency Fund", "Low Savings Rate"]
        assert advice[1].message.startswith("Your savings rate is 0.0%.")

    def test_timeline(self) -> None:
        goals = [
            goal("600", category=GoalCategory.EMERGENCY, id="a"),
            goal("1000", target="1000", id="b"),
        ]
        advice = analyze_goals(goals, [income("1000")], NOW)
        timeline = next(a for a in advice if a.kind == GoalAdviceKind.TIMELINE)
        # 400 left at 200 a month
        assert timeline.message == "At a 20% savings rate, you'll complete all goals in 2.0 months"

    def test_focus_and_overdue(self) -> None:
        past = (NOW - timedelta(days=3)).date()
        goals = [
            goal("10", priority=GoalPriority.HIGH, deadline=past, id="a"),
            goal("10", priority=GoalPriority.HIGH, id="b"),
        ]
        kinds = [a.kind for a in analyze_goals(goals, [], NOW)]
        assert GoalAdviceKind.PRIORITY in kinds
        assert GoalAdviceKind.OVERDUE in kinds

    def test_completed_goal_not_overdue(self) -> None:
        past = (NOW - timedelta(days=3)).date()
        goals = [goal("1000", target="1000", deadline=past)]
        kinds = [a.kind for a in analyze_goals(goals, [], NOW)]
        assert GoalAdviceKind.OVERDUE not in kinds

    def test_emergency_boost_and_good_savings(self) -> None:
        goals = [goal("100", category=GoalCategory.EMERGENCY)]
        advice = analyze_goals(goals, [income("1000"), expense("500")], NOW)
        titles = [a.title for a in advice]
        assert "Boost Emergency Fund" in titles
        assert "Excellent Savings Rate" in titles
