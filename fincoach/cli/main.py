"""FinCoach command line entry point."""

import logging

import typer
from rich.logging import RichHandler

from fincoach import __version__
from fincoach.cli.analysis import analysis_command, goals_command, suggest_command
from fincoach.cli.health import health_command
from fincoach.cli.insights import dismiss_command, insights_command
from fincoach.cli.utils import console

app = typer.Typer(
    name="fincoach",
    help="Financial health score and coaching insights from your transactions.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"fincoach {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


app.command(name="health")(health_command)
app.command(name="insights")(insights_command)
app.command(name="dismiss")(dismiss_command)
app.command(name="analysis")(analysis_command)
app.command(name="suggest")(suggest_command)
app.command(name="goals")(goals_command)


if __name__ == "__main__":
    app()
