"""Pure functions for building a month calendar grid.

This module contains the functional core for grid mode:
- No I/O operations (no database, no console, no files)
- No side effects
- Deterministic: the same records in the same order give the same grid

Timezone handling is injected through a `localize` function.
"""

import calendar
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from types import MappingProxyType

from almanac.dates import Localize, days_in_month, local_date, month_label, next_month, previous_month
from almanac.domain.events import EventRecord, truncate_glyphs, validate_records
from almanac.domain.models import Color, Epoch, Month, OwnerID, RecordID
from almanac.errors import ConfigurationError, ValidationError

CALENDAR_COLORS: tuple[Color, ...] = (
    Color("red"),
    Color("orange"),
    Color("yellow"),
    Color("green"),
    Color("blue"),
    Color("sky"),
    Color("indigo"),
    Color("violet"),
    Color("pink"),
)

# Used for every owner once there are more owners than palette colors
FALLBACK_COLOR = Color("sky")


@dataclass(frozen=True)
class CalendarEvent:
    """Immutable event positioned on a grid."""

    owner_id: OwnerID
    start: Epoch
    end: Epoch
    title: str
    description: str
    record_id: RecordID
    color: Color


@dataclass(frozen=True)
class DayCell:
    """One day of the month with the events that touch it."""

    day: int
    events: tuple[CalendarEvent, ...]


@dataclass(frozen=True)
class MonthGrid:
    """Immutable month grid ready for rendering."""

    month: int
    year: int
    today: int | None
    days: tuple[DayCell, ...]
    colors: Mapping[OwnerID, Color]
    browse_uri: str | None = None

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)

    @property
    def previous(self) -> Month:
        """YYYY-MM of the month before this one."""
        year, month = previous_month(self.year, self.month)
        return Month(f"{year:04d}-{month:02d}")

    @property
    def next(self) -> Month:
        """YYYY-MM of the month after this one."""
        year, month = next_month(self.year, self.month)
        return Month(f"{year:04d}-{month:02d}")

    @property
    def first_weekday(self) -> int:
        """Weekday of the 1st (Monday is 0)."""
        return calendar.monthrange(self.year, self.month)[0]

    def weeks(self) -> list[list[DayCell | None]]:
        """Day cells laid out Monday-first, padded with None."""
        cells: list[DayCell | None] = [None] * self.first_weekday
        cells.extend(self.days)
        cells.extend([None] * (-len(cells) % 7))
        return [cells[i : i + 7] for i in range(0, len(cells), 7)]


def assign_colors(
    owner_ids: Iterable[OwnerID],
    palette: Sequence[Color] = CALENDAR_COLORS,
    fallback: Color = FALLBACK_COLOR,
) -> dict[OwnerID, Color]:
    """Assign a color to each distinct owner in first-appearance order.

    When there are more distinct owners than palette colors, every owner
    gets the fallback color instead of a partial cycle.

    Args:
        owner_ids: Owner of each event, in event order (duplicates allowed).
        palette: Available colors.
        fallback: Color used when the palette is exhausted.

    Returns:
        Dictionary of owner to color, in first-appearance order.

    Raises:
        ConfigurationError: If the palette is empty.
    """
    if not palette:
        raise ConfigurationError("Color palette has no colors")

    unique = list(dict.fromkeys(owner_ids))
    if len(unique) > len(palette):
        return {owner: fallback for owner in unique}

    return {owner: palette[i % len(palette)] for i, owner in enumerate(unique)}


def project_event(record: EventRecord, color: Color) -> CalendarEvent:
    """Project a raw record into a grid event.

    The description reads "<owner> (<status>)". The title is the record's
    own title, else its truncated description, else the status text.
    """
    status_text = record.status.label
    title = record.title or truncate_glyphs(record.description) or status_text

    return CalendarEvent(
        owner_id=record.owner_id,
        start=record.start,
        end=record.end,
        title=title,
        description=f"{record.display_owner} ({status_text})",
        record_id=record.id,
        color=color,
    )


def today_marker(month: int, year: int, today: Epoch | None, localize: Localize) -> int | None:
    """Day of month to highlight, or None when today is in another month."""
    if today is None:
        return None
    today_year, today_month, today_day = localize(today)
    if (today_year, today_month) == (year, month):
        return today_day
    return None


def event_days(event: CalendarEvent, month: int, year: int, localize: Localize) -> range:
    """Days of the given month touched by the half-open [start, end) interval.

    A zero-length event touches the day it starts on.
    """
    first_day = local_date(event.start, localize)
    last_epoch = Epoch(event.end - 1) if event.end > event.start else event.start
    last_day = local_date(last_epoch, localize)

    month_first = date(year, month, 1)
    month_last = month_first + timedelta(days=days_in_month(year, month) - 1)

    lo = max(first_day, month_first)
    hi = min(last_day, month_last)
    if lo > hi:
        return range(0)
    return range(lo.day, hi.day + 1)


def build_month_grid(
    month: int,
    year: int,
    records: Sequence[EventRecord],
    today: Epoch | None,
    localize: Localize,
    palette: Sequence[Color] = CALENDAR_COLORS,
    fallback_color: Color = FALLBACK_COLOR,
    browse_uri: str | None = None,
) -> MonthGrid:
    """Build a month grid from raw event records.

    Args:
        month: Month to display (1-12).
        year: Year to display.
        records: Raw records, in the order colors should be assigned.
        today: Current time, used for the today marker.
        localize: Converts an epoch to the viewer's (year, month, day).
        palette: Owner colors.
        fallback_color: Color for every owner when the palette runs out.
        browse_uri: Opaque template for cross-navigation links.

    Returns:
        MonthGrid with one DayCell per day of the month.

    Raises:
        ConfigurationError: If the palette is empty.
        ValidationError: If the month is invalid or a record is malformed.
    """
    if not palette:
        raise ConfigurationError("Color palette has no colors")
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")

    validate_records(records)

    colors = assign_colors((r.owner_id for r in records), palette, fallback_color)
    events = [project_event(r, colors[r.owner_id]) for r in records]

    buckets: list[list[CalendarEvent]] = [[] for _ in range(days_in_month(year, month))]
    for event in events:
        for day in event_days(event, month, year, localize):
            buckets[day - 1].append(event)

    return MonthGrid(
        month=month,
        year=year,
        today=today_marker(month, year, today, localize),
        days=tuple(DayCell(day=i + 1, events=tuple(bucket)) for i, bucket in enumerate(buckets)),
        colors=MappingProxyType(colors),
        browse_uri=browse_uri,
    )
