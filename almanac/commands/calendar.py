"""Calendar commands: resolve a range, show a month grid or list events."""

import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.table import Table
from rich.text import Text

from almanac.config import Settings, load_settings
from almanac.dates import ViewerTimezone, parse_month, viewer_timezone
from almanac.domain.events import apply_constraints
from almanac.domain.grid import MonthGrid, build_month_grid
from almanac.domain.listing import build_event_list
from almanac.domain.models import Color, Epoch, Month
from almanac.domain.query import (
    DisplayMode,
    FilterState,
    ResolvedRange,
    build_constraints,
    builtin_filter,
    filter_state_from_params,
    owners_from,
    resolve_range,
    select_month_year,
    with_overrides,
)
from almanac.errors import AlmanacError
from almanac.sources import load_event_records, parse_timestamp

console = Console()
logger = logging.getLogger(__name__)

# Palette color names to rich styles
RICH_STYLES: dict[str, str] = {
    "red": "red",
    "orange": "dark_orange",
    "yellow": "yellow",
    "green": "green",
    "blue": "blue",
    "sky": "sky_blue1",
    "indigo": "slate_blue1",
    "violet": "violet",
    "pink": "pink1",
}

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def current_epoch() -> Epoch:
    """Current time; the only clock read in almanac."""
    return Epoch(int(datetime.now(timezone.utc).timestamp()))


def style_for(color: Color) -> str:
    return RICH_STYLES.get(color, "white")


def compute_filter(
    tz: ViewerTimezone,
    query: str | None = None,
    start: str | None = None,
    end: str | None = None,
    upcoming: bool = False,
    invited: list[str] | None = None,
    creators: list[str] | None = None,
    cancelled: str | None = None,
    display: str | None = None,
) -> FilterState:
    """Build a FilterState from command-line options.

    With a builtin query, only the options that were given override it.
    Without one, the options are decoded like request parameters.

    Raises:
        ValidationError: If an option has an unusable value.
        ValueError: If a date cannot be parsed.
    """
    range_start = parse_timestamp(start, tz) if start else None
    range_end = parse_timestamp(end, tz) if end else None

    if query:
        base = builtin_filter(query)
        overrides = filter_state_from_params({"isCancelled": cancelled, "display": display})
        return with_overrides(
            base,
            range_start=range_start,
            range_end=range_end,
            upcoming_only=True if upcoming else None,
            invited_owners=owners_from(invited),
            creator_owners=owners_from(creators),
            cancellation=overrides.cancellation if cancelled else None,
            display=overrides.display if display else None,
        )

    return filter_state_from_params(
        {
            "rangeStart": range_start,
            "rangeEnd": range_end,
            "upcoming": upcoming,
            "invited": invited,
            "creators": creators,
            "isCancelled": cancelled,
            "display": display,
        }
    )


def explicit_month_year(month: str | None) -> tuple[int | None, int | None]:
    if not month:
        return None, None
    year, month_int = parse_month(Month(month))
    return month_int, year


def resolve_settings(tz_name: str | None) -> tuple[Settings, ViewerTimezone]:
    settings = load_settings()
    tz = viewer_timezone(tz_name or settings.timezone)
    logger.debug("Using timezone %s", tz.name)
    return settings, tz


def format_bound(epoch: Epoch | None, tz: ViewerTimezone) -> str:
    if epoch is None:
        return "[dim]unbounded[/dim]"
    return f"{tz.format(epoch)} [dim]({epoch})[/dim]"


def render_range(filter_state: FilterState, resolved: ResolvedRange, tz: ViewerTimezone) -> None:
    """Render a resolved range and the filter that produced it."""
    table = Table(title="Resolved Range", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Display", filter_state.display.value)
    table.add_row("Upcoming only", "yes" if filter_state.upcoming_only else "no")
    table.add_row("Cancelled", filter_state.cancellation.value)
    table.add_row("Start", format_bound(resolved.start, tz))
    table.add_row("End", format_bound(resolved.end, tz))
    if filter_state.invited_owners:
        table.add_row("Invited", ", ".join(sorted(filter_state.invited_owners)))
    if filter_state.creator_owners:
        table.add_row("Created by", ", ".join(sorted(filter_state.creator_owners)))

    console.print(table)
    if resolved.is_empty:
        console.print("[yellow]Range is empty: no events can match[/yellow]")
    elif resolved.is_unconstrained:
        console.print("[dim]No date constraint applies[/dim]")


def render_grid(grid: MonthGrid) -> None:
    """Render a month grid as a Monday-first table."""
    table = Table(title=grid.label, show_lines=True, expand=True)
    for weekday in WEEKDAYS:
        table.add_column(weekday, vertical="top", ratio=1)

    for week in grid.weeks():
        row: list[Text] = []
        for cell in week:
            if cell is None:
                row.append(Text(""))
                continue
            text = Text(str(cell.day), style="bold reverse" if cell.day == grid.today else "bold")
            for event in cell.events:
                text.append("\n")
                text.append(f"• {event.title}", style=style_for(event.color))
            row.append(text)
        table.add_row(*row)

    console.print(table)

    if grid.colors:
        legend = Text("Owners: ")
        for i, (owner, color) in enumerate(grid.colors.items()):
            if i:
                legend.append(", ")
            legend.append(owner, style=style_for(color))
        console.print(legend)
    console.print(f"[dim]‹ --month {grid.previous}    --month {grid.next} ›[/dim]")
    if grid.browse_uri:
        console.print(f"[dim]Browse: {grid.browse_uri}[/dim]")


def range_command(
    query: str | None = None,
    start: str | None = None,
    end: str | None = None,
    upcoming: bool = False,
    display: str | None = None,
    month: str | None = None,
    tz_name: str | None = None,
) -> None:
    """Show the effective date range for a set of filter options."""
    try:
        _, tz = resolve_settings(tz_name)
        filter_state = compute_filter(tz, query, start, end, upcoming, display=display)
        explicit_month, explicit_year = explicit_month_year(month)
        resolved = resolve_range(filter_state, current_epoch(), tz, explicit_month, explicit_year)
        render_range(filter_state, resolved, tz)
    except (AlmanacError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)


def calendar_command(
    events_file: str,
    month: str | None = None,
    query: str | None = None,
    start: str | None = None,
    end: str | None = None,
    upcoming: bool = False,
    invited: list[str] | None = None,
    creators: list[str] | None = None,
    cancelled: str | None = None,
    tz_name: str | None = None,
) -> None:
    """Show events from a file on a month calendar."""
    try:
        settings, tz = resolve_settings(tz_name)
        filter_state = compute_filter(tz, query, start, end, upcoming, invited, creators, cancelled)
        filter_state = replace(filter_state, display=DisplayMode.MONTH)

        now = current_epoch()
        explicit_month, explicit_year = explicit_month_year(month)
        shown_month, shown_year = select_month_year(explicit_month, explicit_year, filter_state, now, tz.localize)
        resolved = resolve_range(filter_state, now, tz, shown_month, shown_year)

        records = load_event_records(Path(events_file), tz)
        matching = apply_constraints(records, build_constraints(filter_state, resolved))
        logger.debug("%d of %d records match the query", len(matching), len(records))

        grid = build_month_grid(
            shown_month,
            shown_year,
            matching,
            today=now,
            localize=tz.localize,
            palette=settings.palette,
            fallback_color=settings.fallback_color,
            browse_uri=settings.browse_uri.replace("{query_key}", query or "month"),
        )
        render_grid(grid)
    except (AlmanacError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Could not read {events_file}: {e}[/red]", style="bold")
        sys.exit(1)


def events_command(
    events_file: str,
    query: str | None = None,
    start: str | None = None,
    end: str | None = None,
    upcoming: bool = False,
    invited: list[str] | None = None,
    creators: list[str] | None = None,
    cancelled: str | None = None,
    limit: int | None = None,
    all: bool = False,
    tz_name: str | None = None,
) -> None:
    """List events from a file."""
    try:
        settings, tz = resolve_settings(tz_name)
        filter_state = compute_filter(tz, query, start, end, upcoming, invited, creators, cancelled)
        filter_state = replace(filter_state, display=DisplayMode.LIST)
        resolved = resolve_range(filter_state, current_epoch(), tz)

        records = load_event_records(Path(events_file), tz)
        matching = apply_constraints(records, build_constraints(filter_state, resolved))

        actual_limit = None if all else (limit or settings.page_size)
        items = build_event_list(matching, tz, actual_limit)

        if not items:
            console.print("[yellow]No events found[/yellow]")
            return

        table = Table(title=f"Events (showing {len(items)} of {len(matching)})")
        table.add_column("", width=1)
        table.add_column("Event", style="bold")
        table.add_column("Creator", style="magenta")
        table.add_column("When", style="cyan")
        table.add_column("Description", style="dim")
        table.add_column("Link", style="dim")

        for item in items:
            bar = Text("▌", style=style_for(item.bar_color))
            table.add_row(bar, item.header, item.creator, item.span, item.summary, item.href)

        console.print(table)
    except (AlmanacError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Could not read {events_file}: {e}[/red]", style="bold")
        sys.exit(1)
