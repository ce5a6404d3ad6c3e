"""CLI entry point for almanac."""

import typer

from almanac.commands.admin import config_command, init_command
from almanac.commands.calendar import calendar_command, events_command, range_command
from almanac.commands.inlines import inlines_command
from almanac.log import configure_logging

app = typer.Typer(
    name="almanac",
    help="Calendar queries, month grids and inline comment ordering",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Calendar queries, month grids and inline comment ordering."""
    configure_logging(verbose)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
) -> None:
    """Create the almanac configuration file."""
    init_command(force)


@app.command(name="config")
def config() -> None:
    """Show the effective settings."""
    config_command()


@app.command(name="range")
def range_(
    query: str = typer.Option(None, "--query", "-q", help="Builtin query: month, upcoming or all"),
    start: str = typer.Option(None, "--start", help="Occurs after this date"),
    end: str = typer.Option(None, "--end", help="Occurs before this date"),
    upcoming: bool = typer.Option(False, "--upcoming", help="Only events from now on"),
    display: str = typer.Option(None, "--display", help="Display mode: month or list"),
    month: str = typer.Option(None, "--month", help="Month to show (YYYY-MM)"),
    tz: str = typer.Option(None, "--tz", help="Viewer timezone (overrides config)"),
) -> None:
    """Show the effective date range for your filter."""
    range_command(query, start, end, upcoming, display, month, tz)


@app.command()
def calendar(
    events_file: str,
    month: str = typer.Option(None, "--month", help="Month to show (YYYY-MM)"),
    query: str = typer.Option(None, "--query", "-q", help="Builtin query: month, upcoming or all"),
    start: str = typer.Option(None, "--start", help="Occurs after this date"),
    end: str = typer.Option(None, "--end", help="Occurs before this date"),
    upcoming: bool = typer.Option(False, "--upcoming", help="Only events from now on"),
    invited: list[str] = typer.Option(None, "--invited", help="Invited owner (repeatable)"),
    creator: list[str] = typer.Option(None, "--creator", help="Creating owner (repeatable)"),
    cancelled: str = typer.Option(None, "--cancelled", help="active, cancelled or both"),
    tz: str = typer.Option(None, "--tz", help="Viewer timezone (overrides config)"),
) -> None:
    """Show your events on a month calendar."""
    calendar_command(events_file, month, query, start, end, upcoming, invited, creator, cancelled, tz)


@app.command()
def events(
    events_file: str,
    query: str = typer.Option(None, "--query", "-q", help="Builtin query: month, upcoming or all"),
    start: str = typer.Option(None, "--start", help="Occurs after this date"),
    end: str = typer.Option(None, "--end", help="Occurs before this date"),
    upcoming: bool = typer.Option(False, "--upcoming", help="Only events from now on"),
    invited: list[str] = typer.Option(None, "--invited", help="Invited owner (repeatable)"),
    creator: list[str] = typer.Option(None, "--creator", help="Creating owner (repeatable)"),
    cancelled: str = typer.Option(None, "--cancelled", help="active, cancelled or both"),
    limit: int = typer.Option(None, help="Maximum events to show (default: page size)"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all matching events"),
    tz: str = typer.Option(None, "--tz", help="Viewer timezone (overrides config)"),
) -> None:
    """List your events."""
    events_command(events_file, query, start, end, upcoming, invited, creator, cancelled, limit, all, tz)


@app.command()
def inlines(
    comments_file: str,
    documents_file: str,
    strays: str = typer.Option(None, "--strays", help="Comments on unknown documents: reject or drop"),
) -> None:
    """Show inline comments grouped by document and ordered by line."""
    inlines_command(comments_file, documents_file, strays)


if __name__ == "__main__":
    app()
