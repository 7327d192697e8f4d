"""Implementation of 'fincoach insights' and 'fincoach dismiss' commands.

Lists coaching insights by priority and records dismissals in the
snapshot so they stay hidden on the next run.
"""

from pathlib import Path

import typer

from fincoach.cli.utils import console, load_command_context, parse_now
from fincoach.core.exceptions import FinCoachError
from fincoach.core.models import InsightType
from fincoach.engine.insights import filter_dismissed, generate_insights

INSIGHT_STYLES = {
    InsightType.WARNING: ("⚠", "yellow"),
    InsightType.TIP: ("💡", "blue"),
    InsightType.ACHIEVEMENT: ("🏆", "green"),
    InsightType.RECOMMENDATION: ("➜", "magenta"),
}


def insights_command(
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Include insights that were dismissed",
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
    """Show coaching insights, highest priority first."""
    settings, _, snapshot = load_command_context(data, config)

    insights = generate_insights(
        snapshot.transactions,
        snapshot.budgets,
        snapshot.goals,
        now=parse_now(now),
        spending_days=settings.spending_window_days,
        volatility_days=settings.volatility_window_days,
        emergency_months=settings.emergency_months_target,
    )
    if not show_all:
        insights = filter_dismissed(insights, snapshot.dismissed_insights)

    if not insights:
        console.print("[green]No insights right now. Everything looks on track.[/green]")
        raise typer.Exit(0)

    console.print()
    for insight in insights:
        icon, color = INSIGHT_STYLES[insight.type]
        console.print(f"[{color}]{icon} {insight.title}[/{color}]  [dim](priority {insight.priority})[/dim]")
        console.print(f"  {insight.message}")
        console.print(f"  [dim]id: {insight.id}[/dim]")
        console.print()


def dismiss_command(
    insight_id: str = typer.Argument(
        ...,
        help="Id of the insight to hide (see 'fincoach insights')",
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
) -> None:
    """Dismiss an insight so it is hidden from future listings."""
    _, repo, snapshot = load_command_context(data, config)

    if insight_id in snapshot.dismissed_insights:
        console.print(f"[yellow]Already dismissed:[/yellow] {insight_id}")
        raise typer.Exit(0)

    try:
        repo.dismiss_insight(insight_id)
    except FinCoachError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Dismissed:[/green] {insight_id}")
