"""Tests for financial health scoring."""

from datetime import timezone
from decimal import Decimal

from conftest import NOW, ZULU_SNAPSHOT_JSON, budget, expense, goal, income
from fincoach.core.models import FinanceSnapshot, GoalCategory, HealthFactors, health_rating
from fincoach.engine.scoring import (
    budget_adherence_score,
    calculate_budget_adherence,
    calculate_debt_ratio,
    calculate_emergency_fund,
    calculate_financial_health,
    calculate_income_stability,
    calculate_savings_rate,
    overall_score,
)


class TestEmptyInput:
    """Degenerate input resolves to the neutral defaults."""

    def test_default_factors(self) -> None:
        health = calculate_financial_health([], [], [], now=NOW)
        assert health.factors.emergency_fund == Decimal(0)
        assert health.factors.debt_ratio == Decimal(100)
        assert health.factors.savings_rate == Decimal(0)
        assert health.factors.budget_adherence == Decimal(50)
        assert health.factors.income_stability == Decimal(50)

    def test_default_score(self) -> None:
        """0 + 100 + 0 + 50 + 50 averages to 40."""
        assert calculate_financial_health([], [], [], now=NOW).score == 40


class TestWorkedExample:
    """One income, one small expense, nothing else."""

    def test_score(self) -> None:
        transactions = [income("2500", days_ago=2), expense("45.5", "food", days_ago=3)]
        health = calculate_financial_health(transactions, [], [], now=NOW)

        assert health.factors.savings_rate == Decimal("98.18")
        assert health.factors.emergency_fund == Decimal(0)
        assert health.factors.debt_ratio == Decimal(100)
        # mean(0, 100, 98.18, 50, 50) = 59.636
        assert health.score == 60

    def test_deterministic(self) -> None:
        transactions = [income("2500"), expense("45.5")]
        budgets = [budget("80")]
        goals = [goal("200", category=GoalCategory.EMERGENCY)]
        first = calculate_financial_health(transactions, budgets, goals, now=NOW)
        second = calculate_financial_health(transactions, budgets, goals, now=NOW)
        assert first == second
        assert first.model_dump_json() == second.model_dump_json()


class TestTimezones:
    """Snapshots with UTC timestamps score like naive ones."""

    def test_zulu_snapshot_with_naive_now(self) -> None:
        snapshot = FinanceSnapshot.model_validate_json(ZULU_SNAPSHOT_JSON)
        health = calculate_financial_health(snapshot.transactions, [], [], now=NOW)
        # Expenses but no income or fund: 0, 100, 0, 50, 50
        assert health.score == 40
        assert health.factors.emergency_fund == Decimal(0)

    def test_aware_now_matches_naive(self) -> None:
        transactions = [income("2500", days_ago=2), expense("45.5", "food", days_ago=3)]
        aware = calculate_financial_health(transactions, [], [], now=NOW.replace(tzinfo=timezone.utc))
        naive = calculate_financial_health(transactions, [], [], now=NOW)
        assert aware == naive


class TestEmergencyFund:
    """Tests for calculate_emergency_fund."""

    def test_half_covered(self) -> None:
        goals = [goal("300", category=GoalCategory.EMERGENCY)]
        assert calculate_emergency_fund(goals, Decimal("100")) == Decimal(50)

    def test_capped_at_100(self) -> None:
        goals = [goal("5000", category=GoalCategory.EMERGENCY)]
        assert calculate_emergency_fund(goals, Decimal("100")) == Decimal(100)

    def test_no_emergency_goal(self) -> None:
        goals = [goal("5000", category=GoalCategory.SAVINGS)]
        assert calculate_emergency_fund(goals, Decimal("100")) == Decimal(0)

    def test_no_expenses_with_fund(self) -> None:
        goals = [goal("10", category=GoalCategory.EMERGENCY)]
        assert calculate_emergency_fund(goals, Decimal(0)) == Decimal(100)


class TestDebtRatio:
    """Tests for calculate_debt_ratio."""

    def test_half_of_annual_income(self) -> None:
        goals = [goal("0", target="6000", category=GoalCategory.DEBT)]
        assert calculate_debt_ratio(goals, Decimal("1000")) == Decimal(50)

    def test_debt_above_annual_income(self) -> None:
        goals = [goal("0", target="50000", category=GoalCategory.DEBT)]
        assert calculate_debt_ratio(goals, Decimal("1000")) == Decimal(0)

    def test_no_income_with_debt(self) -> None:
        goals = [goal("0", target="100", category=GoalCategory.DEBT)]
        assert calculate_debt_ratio(goals, Decimal(0)) == Decimal(0)

    def test_only_debt_goals_count(self) -> None:
        goals = [goal("0", target="99999", category=GoalCategory.INVESTMENT)]
        assert calculate_debt_ratio(goals, Decimal("1000")) == Decimal(100)


class TestSavingsRate:
    """Tests for calculate_savings_rate."""

    def test_overspending_clamped_to_zero(self) -> None:
        assert calculate_savings_rate(Decimal("100"), Decimal("200")) == Decimal(0)

    def test_no_income(self) -> None:
        assert calculate_savings_rate(Decimal(0), Decimal("50")) == Decimal(0)

    def test_nothing_spent(self) -> None:
        assert calculate_savings_rate(Decimal("100"), Decimal(0)) == Decimal(100)


class TestBudgetAdherence:
    """Tests for budget adherence scoring."""

    def test_within_budget(self) -> None:
        assert budget_adherence_score(budget("100")) == Decimal(100)

    def test_half_over(self) -> None:
        assert budget_adherence_score(budget("150")) == Decimal(50)

    def test_far_over_floors_at_zero(self) -> None:
        assert budget_adherence_score(budget("250")) == Decimal(0)

    def test_no_budgets_neutral(self) -> None:
        assert calculate_budget_adherence([]) == Decimal(50)

    def test_mean_across_budgets(self) -> None:
        budgets = [budget("50", id="a"), budget("150", id="b")]
        assert calculate_budget_adherence(budgets) == Decimal(75)

    def test_more_spending_never_scores_higher(self) -> None:
        previous = Decimal(100)
        for spent in range(0, 400, 10):
            score = budget_adherence_score(budget(str(spent)))
            assert score <= previous
            previous = score


class TestIncomeStability:
    """Tests for calculate_income_stability."""

    def test_flat_income(self) -> None:
        transactions = [
            income("1000", days_ago=5),
            income("1000", days_ago=35),
            income("1000", days_ago=65),
        ]
        health = calculate_financial_health(transactions, [], [], now=NOW)
        assert health.factors.income_stability == Decimal(100)

    def test_single_sample_neutral(self) -> None:
        assert calculate_income_stability([Decimal("1000")]) == Decimal(50)

    def test_volatile_income(self) -> None:
        """CV of 0.5 costs 100 points."""
        assert calculate_income_stability([Decimal("50"), Decimal("150")]) == Decimal(0)

    def test_moderate_volatility(self) -> None:
        """90 and 110: CV 0.1, stability 80."""
        assert calculate_income_stability([Decimal("90"), Decimal("110")]) == Decimal(80)


class TestOverallScore:
    """Tests for rounding and rating."""

    def test_half_rounds_up(self) -> None:
        factors = HealthFactors(
            emergency_fund=Decimal(0),
            debt_ratio=Decimal(100),
            savings_rate=Decimal("2.5"),
            budget_adherence=Decimal(50),
            income_stability=Decimal(50),
        )
        assert overall_score(factors) == 41

    def test_rating_labels(self) -> None:
        assert health_rating(95) == "Excellent"
        assert health_rating(80) == "Very Good"
        assert health_rating(70) == "Good"
        assert health_rating(60) == "Fair"
        assert health_rating(40) == "Needs Improvement"
        assert health_rating(39) == "Critical"

    def test_rating_serialized(self) -> None:
        health = calculate_financial_health([], [], [], now=NOW)
        assert health.model_dump()["rating"] == "Needs Improvement"
