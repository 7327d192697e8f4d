"""Implementation of 'fincoach health' command.

Shows the overall health score with a breakdown of its five factors.
"""

from decimal import Decimal
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from fincoach.cli.utils import console, format_percentage, load_command_context, parse_now
from fincoach.engine.scoring import calculate_financial_health

FACTOR_LABELS = [
    ("emergency_fund", "Emergency Fund", "Protection against unexpected expenses"),
    ("debt_ratio", "Debt Management", "Debt-to-income ratio health"),
    ("savings_rate", "Savings Rate", "Percentage of income saved"),
    ("budget_adherence", "Budget Control", "How well you stick to budgets"),
    ("income_stability", "Income Stability", "Consistency of your income"),
]


def _score_style(score: Decimal | int) -> str:
    if score >= 80:
        return "green"
    if score >= 60:
        return "yellow"
    return "red"


def health_command(
    data: Path = typer.Option(
        None,
        "--data",
        "-d",
        help="Snapshot JSON file (default: data_file from settings)",
    ),
    config: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Settings file (default: fincoach.config.json)",
    ),
    now: str = typer.Option(
        None,
        "--now",
        help="Reference time in ISO format (default: now)",
    ),
) -> None:
    """Show the financial health score.

    The score is the average of five factors: emergency fund, debt
    management, savings rate, budget control and income stability.
    """
    settings, _, snapshot = load_command_context(data, config)

    health = calculate_financial_health(
        snapshot.transactions,
        snapshot.budgets,
        snapshot.goals,
        now=parse_now(now),
        spending_days=settings.spending_window_days,
        volatility_days=settings.volatility_window_days,
        emergency_months=settings.emergency_months_target,
    )

    style = _score_style(health.score)
    console.print()
    console.print(Panel(
        f"[bold {style}]{health.score}[/bold {style}] / 100  ({health.rating})",
        title="Financial Health",
        style="cyan",
    ))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Factor")
    table.add_column("Score", justify="right")
    table.add_column("Description", style="dim")

    for field, label, description in FACTOR_LABELS:
        value = getattr(health.factors, field)
        table.add_row(
            label,
            f"[{_score_style(value)}]{format_percentage(value, 0)}[/{_score_style(value)}]",
            description,
        )

    console.print(table)
    console.print()
