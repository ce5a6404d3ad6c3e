"""Pure functions for list-mode event display."""

from collections.abc import Iterable
from dataclasses import dataclass

from almanac.dates import ViewerTimezone
from almanac.domain.events import EventRecord, EventStatus, truncate_glyphs
from almanac.domain.models import Color, RecordID
from almanac.domain.query import DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class EventListItem:
    """Immutable list row for one event."""

    record_id: RecordID
    header: str
    href: str
    bar_color: Color
    creator: str
    span: str
    summary: str


def event_href(record_id: RecordID) -> str:
    return f"/E{record_id}"


def list_header(record: EventRecord) -> str:
    """Event name, else a terse summary of its description, else its status."""
    return record.title or truncate_glyphs(record.description) or record.status.label


def build_event_list(
    records: Iterable[EventRecord],
    tz: ViewerTimezone,
    limit: int | None = DEFAULT_PAGE_SIZE,
) -> list[EventListItem]:
    """Build list rows sorted by start time, ties broken by record id.

    Args:
        records: Records already filtered by the query constraints.
        tz: Viewer timezone for the from/to display.
        limit: Maximum rows to return; None for all.

    Returns:
        List of EventListItem.
    """
    ordered = sorted(records, key=lambda r: (r.start, r.id))
    if limit is not None:
        ordered = ordered[:limit]

    return [
        EventListItem(
            record_id=record.id,
            header=list_header(record),
            href=event_href(record.id),
            bar_color=Color("red") if record.status is EventStatus.AWAY else Color("yellow"),
            creator=record.display_owner,
            span=f"From {tz.format(record.start)} to {tz.format(record.end)}",
            summary=truncate_glyphs(record.description),
        )
        for record in ordered
    ]
