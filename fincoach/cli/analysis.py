"""Implementation of 'fincoach analysis', 'fincoach suggest' and 'fincoach goals'.

Cashflow metrics, rule-based budget suggestions and goal advice.
"""

from decimal import Decimal
from pathlib import Path

import typer
from rich.table import Table

from fincoach.cli.utils import (
    console,
    format_currency,
    format_percentage,
    load_command_context,
    parse_now,
)
from fincoach.core.models import TransactionType
from fincoach.engine.aggregator import filter_window
from fincoach.engine.analysis import (
    calculate_cashflow_metrics,
    calculate_quick_stats,
    category_breakdown,
    daily_cashflow,
)
from fincoach.engine.goals import analyze_goals
from fincoach.engine.suggestions import suggest_budgets


def analysis_command(
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
    """Show cashflow metrics and spending by category."""
    settings, _, snapshot = load_command_context(data, config)
    currency = settings.currency
    reference = parse_now(now)

    stats = calculate_quick_stats(
        snapshot.transactions, snapshot.goals, reference, settings.spending_window_days
    )
    metrics = calculate_cashflow_metrics(snapshot.transactions)

    console.print()
    console.print(f"[bold]Last {settings.spending_window_days} Days[/bold]")
    console.print(f"  Income:        {format_currency(stats.monthly_income, currency):>12}")
    console.print(f"  Expenses:      {format_currency(stats.monthly_expenses, currency):>12}")
    net_style = "green" if stats.net_income >= 0 else "red"
    console.print(f"  [{net_style}]Net:           {format_currency(stats.net_income, currency):>12}[/{net_style}]")
    console.print(f"  Total savings: {format_currency(stats.total_savings, currency):>12}")
    console.print(f"  Active goals:  {stats.active_goals:>12}")
    console.print()

    console.print("[bold]All Transactions[/bold]")
    console.print(f"  Total income:        {format_currency(metrics.total_income, currency):>12}")
    console.print(f"  Total expenses:      {format_currency(metrics.total_expenses, currency):>12}")
    console.print(f"  Avg daily spending:  {format_currency(metrics.avg_daily_spending, currency):>12}")
    console.print(f"  Recurring expenses:  {format_currency(metrics.recurring_expenses, currency):>12}")
    console.print(f"  Savings rate:        {format_percentage(metrics.savings_rate):>12}")
    console.print(f"  Income volatility:   {format_percentage(metrics.income_volatility):>12}")
    console.print()

    breakdown = category_breakdown(snapshot.transactions)
    if breakdown:
        table = Table(title="Spending by Category", show_header=True, header_style="bold")
        table.add_column("Category")
        table.add_column("Amount", justify="right")
        table.add_column("Share", justify="right")
        for share in breakdown:
            table.add_row(
                share.category,
                format_currency(share.amount, currency),
                format_percentage(share.percentage),
            )
        console.print(table)
        console.print()

    active_days = [
        p for p in daily_cashflow(snapshot.transactions, reference, settings.spending_window_days)
        if p.income or p.expenses
    ]
    if active_days:
        table = Table(title="Daily Cashflow", show_header=True, header_style="bold")
        table.add_column("Day")
        table.add_column("Income", justify="right", style="green")
        table.add_column("Expenses", justify="right", style="red")
        table.add_column("Net", justify="right")
        for point in active_days:
            table.add_row(
                point.day.isoformat(),
                format_currency(point.income, currency),
                format_currency(point.expenses, currency),
                format_currency(point.net, currency),
            )
        console.print(table)
        console.print()


def suggest_command(
    income: float = typer.Option(
        None,
        "--income",
        "-i",
        help="Monthly income to plan with (default: income of the spending window)",
    ),
    limit: int = typer.Option(
        4,
        "--limit",
        "-n",
        help="Maximum number of suggestions",
    ),
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
    """Suggest budget allocations based on income and spending."""
    settings, _, snapshot = load_command_context(data, config)
    currency = settings.currency
    reference = parse_now(now)

    if income is not None:
        monthly_income = Decimal(str(income))
    else:
        monthly_income = calculate_quick_stats(
            snapshot.transactions, snapshot.goals, reference, settings.spending_window_days
        ).monthly_income

    recent_expenses = filter_window(
        snapshot.transactions, TransactionType.EXPENSE, settings.spending_window_days, reference
    )
    suggestions = suggest_budgets(recent_expenses, monthly_income, limit=limit)

    if not suggestions:
        console.print("[yellow]No income to plan with. Add income or pass --income.[/yellow]")
        raise typer.Exit(0)

    table = Table(title="Budget Suggestions", show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Priority")
    table.add_column("Why", style="dim")
    for s in suggestions:
        table.add_row(s.category, format_currency(s.amount, currency), s.priority.value, s.reason)

    console.print()
    console.print(table)
    console.print()


def goals_command(
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
    """Show progress on goals and advice across them."""
    settings, _, snapshot = load_command_context(data, config)
    currency = settings.currency

    if not snapshot.goals:
        console.print("[yellow]No goals yet[/yellow]")

    console.print()
    for goal in snapshot.goals:
        pct = goal.progress * 100
        marker = "[green]✓[/green]" if goal.is_completed else " "
        deadline = f"  due {goal.deadline}" if goal.deadline else ""
        console.print(
            f"{marker} [bold]{goal.title}[/bold] ({goal.category.value}, {goal.priority.value}){deadline}"
        )
        console.print(
            f"    {format_currency(goal.current_amount, currency)} of "
            f"{format_currency(goal.target_amount, currency)} ({format_percentage(pct)})"
        )
    if snapshot.goals:
        console.print()

    for advice in analyze_goals(snapshot.goals, snapshot.transactions, parse_now(now)):
        console.print(f"[cyan]{advice.title}[/cyan]")
        console.print(f"  {advice.message}")
    console.print()
