"""Pure functions for raw calendar event records.

Records come from an external storage layer; this module validates them
and applies query constraints in memory.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from almanac.domain.models import Epoch, OwnerID, RecordID
from almanac.domain.query import EventConstraints
from almanac.errors import ValidationError

# Maximum glyphs (Unicode code points) shown for a free-text description
MAX_SUMMARY_GLYPHS = 64

ELLIPSIS = "…"


class EventStatus(Enum):
    """Availability status of an event owner."""

    AWAY = "away"
    SPORADIC = "sporadic"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class EventRecord:
    """Immutable raw event record as supplied by the storage layer."""

    id: RecordID
    owner_id: OwnerID
    start: Epoch
    end: Epoch
    owner_name: str = ""
    title: str = ""
    description: str = ""
    status: EventStatus = EventStatus.AWAY
    is_cancelled: bool = False
    invited: frozenset[OwnerID] = field(default_factory=frozenset)

    @property
    def display_owner(self) -> str:
        return self.owner_name or self.owner_id


def truncate_glyphs(text: str, limit: int = MAX_SUMMARY_GLYPHS) -> str:
    """Truncate text to at most `limit` code points.

    Truncated text ends with an ellipsis, which counts towards the limit.
    """
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + ELLIPSIS


def validate_records(records: Sequence[EventRecord]) -> None:
    """Reject records with a missing owner or an inverted interval.

    Raises:
        ValidationError: Listing the ids of every offending record.
    """
    missing_owner = [r.id for r in records if not r.owner_id]
    if missing_owner:
        raise ValidationError("Event records without an owner", missing_owner)

    inverted = [r.id for r in records if r.end < r.start]
    if inverted:
        raise ValidationError("Event records ending before they start", inverted)


def matches_constraints(record: EventRecord, constraints: EventConstraints) -> bool:
    """Check whether a record satisfies the query constraints.

    A record matches a date range when its interval overlaps it. An empty
    range matches nothing.
    """
    date_range = constraints.date_range
    if date_range is not None:
        if date_range.is_empty:
            return False
        if date_range.start is not None and record.end < date_range.start:
            return False
        if date_range.end is not None and record.start > date_range.end:
            return False

    if constraints.creator_owners and record.owner_id not in constraints.creator_owners:
        return False

    if constraints.invited_owners and not (record.invited & constraints.invited_owners):
        return False

    if constraints.is_cancelled is not None and record.is_cancelled != constraints.is_cancelled:
        return False

    return True


def apply_constraints(records: Iterable[EventRecord], constraints: EventConstraints) -> list[EventRecord]:
    """Filter records in memory, keeping input order."""
    return [r for r in records if matches_constraints(r, constraints)]
