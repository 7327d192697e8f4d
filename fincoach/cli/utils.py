"""Shared helpers for CLI commands."""

from datetime import datetime
from decimal import Decimal
from pathlib import Path

import typer
from rich.console import Console

from fincoach.core.config import CoachSettings, load_settings
from fincoach.core.exceptions import FinCoachError, SnapshotNotFoundError
from fincoach.core.models import FinanceSnapshot, as_naive_utc, utc_now
from fincoach.engine.insights import format_number
from fincoach.storage import JsonFileRepository

console = Console()

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}


def format_currency(amount: Decimal, currency: str) -> str:
    """Format an amount with its currency symbol and two decimals."""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    if amount < 0:
        return f"-{symbol}{abs(amount):,.2f}"
    return f"{symbol}{amount:,.2f}"


def format_percentage(value: Decimal, places: int = 1) -> str:
    """Format a value already expressed in percent, rounding half up."""
    return f"{format_number(value, places)}%"


def parse_now(value: str | None) -> datetime:
    """Parse the --now option (ISO date or timestamp) as naive UTC.

    Defaults to the current time. A trailing "Z" is accepted.
    """
    if not value:
        return utc_now()
    try:
        return as_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        console.print(f"[red]Error:[/red] Invalid --now value '{value}', expected ISO format")
        raise typer.Exit(1)


def open_repository(data: Path | None, settings: CoachSettings) -> JsonFileRepository:
    """Repository for the snapshot file, which must already exist.

    Raises:
        SnapshotNotFoundError: If the file is missing.
    """
    path = data or Path(settings.data_file)
    if not path.exists():
        raise SnapshotNotFoundError(str(path))
    return JsonFileRepository(path)


def load_command_context(
    data: Path | None,
    config: Path | None,
) -> tuple[CoachSettings, JsonFileRepository, FinanceSnapshot]:
    """Load settings, repository and snapshot, exiting with an error on failure."""
    try:
        settings = load_settings(config)
        repo = open_repository(data, settings)
        snapshot = repo.load_snapshot()
    except FinCoachError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    return settings, repo, snapshot

