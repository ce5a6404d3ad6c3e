"""Pure functions for calendar query resolution.

This module contains the functional core for turning filter parameters into
an effective date range:
- No I/O operations (no database, no console, no files)
- No implicit clock reads: "now" is always passed in
- Pure data transformations
- Easy to test

All timestamps are epoch seconds (Epoch type).
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from almanac.dates import Localize, ViewerTimezone, next_month
from almanac.domain.models import Epoch, OwnerID
from almanac.errors import ValidationError

# List mode shows at most this many events per page
DEFAULT_PAGE_SIZE = 1000


class CancellationFilter(Enum):
    """Which events to include based on their cancelled flag."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    BOTH = "both"


class DisplayMode(Enum):
    """How results are rendered: a month grid or a flat list."""

    MONTH = "month"
    LIST = "list"


@dataclass(frozen=True)
class FilterState:
    """Immutable snapshot of decoded query parameters."""

    range_start: Epoch | None = None
    range_end: Epoch | None = None
    upcoming_only: bool = False
    invited_owners: frozenset[OwnerID] = field(default_factory=frozenset)
    creator_owners: frozenset[OwnerID] = field(default_factory=frozenset)
    cancellation: CancellationFilter = CancellationFilter.BOTH
    display: DisplayMode = DisplayMode.LIST


@dataclass(frozen=True)
class ResolvedRange:
    """Effective date range. A missing bound is unbounded on that side.

    An empty range keeps both bounds as resolved (start after end) and
    matches no event.
    """

    start: Epoch | None
    end: Epoch | None
    is_empty: bool = False

    def __post_init__(self) -> None:
        if self.is_empty:
            if self.start is None or self.end is None or self.start <= self.end:
                raise ValidationError("An empty range needs a start after its end")
            return
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValidationError(f"Range start {self.start} is after range end {self.end}")

    @property
    def is_unconstrained(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True)
class EventConstraints:
    """Constraints handed to the storage layer that fetches event records."""

    date_range: ResolvedRange | None
    invited_owners: frozenset[OwnerID]
    creator_owners: frozenset[OwnerID]
    is_cancelled: bool | None


_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"", "0", "false", "no", "off"}


def _read_epoch(params: Mapping[str, Any], key: str) -> Epoch | None:
    value = params.get(key)
    if value is None or value == "":
        return None
    try:
        return Epoch(int(value))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Parameter '{key}' is not an epoch: {value!r}") from e


def _read_bool(params: Mapping[str, Any], key: str) -> bool:
    value = params.get(key)
    if value is None or isinstance(value, bool):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValidationError(f"Parameter '{key}' is not a boolean: {value!r}")


def _read_owners(params: Mapping[str, Any], key: str) -> frozenset[OwnerID]:
    value = params.get(key)
    if not value:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    return frozenset(OwnerID(str(v).strip()) for v in value if str(v).strip())


def _read_choice(params: Mapping[str, Any], key: str, enum_type: type[Enum], default: Enum) -> Any:
    value = params.get(key)
    if value is None or value == "":
        return default
    try:
        return enum_type(str(value).strip().lower())
    except ValueError as e:
        allowed = ", ".join(str(m.value) for m in enum_type)
        raise ValidationError(f"Parameter '{key}' must be one of {allowed}, got {value!r}") from e


def filter_state_from_params(params: Mapping[str, Any]) -> FilterState:
    """Decode raw request parameters into a FilterState.

    Recognised keys: rangeStart, rangeEnd (epochs), upcoming (bool),
    invited, creators (owner ids, list or comma-separated), isCancelled
    (active|cancelled|both, default active) and display (month|list,
    default month).

    Args:
        params: String-keyed parameters as decoded by the caller.

    Returns:
        FilterState with every field typed.

    Raises:
        ValidationError: If a parameter has an unusable value.
    """
    return FilterState(
        range_start=_read_epoch(params, "rangeStart"),
        range_end=_read_epoch(params, "rangeEnd"),
        upcoming_only=_read_bool(params, "upcoming"),
        invited_owners=_read_owners(params, "invited"),
        creator_owners=_read_owners(params, "creators"),
        cancellation=_read_choice(params, "isCancelled", CancellationFilter, CancellationFilter.ACTIVE),
        display=_read_choice(params, "display", DisplayMode, DisplayMode.MONTH),
    )


BUILTIN_QUERIES: dict[str, str] = {
    "month": "Month View",
    "upcoming": "Upcoming Events",
    "all": "All Events",
}


def builtin_filter(query_key: str) -> FilterState:
    """Return the FilterState for a named builtin query.

    Raises:
        ValidationError: If the query key is unknown.
    """
    if query_key == "month":
        return FilterState(display=DisplayMode.MONTH)
    if query_key == "upcoming":
        return FilterState(upcoming_only=True)
    if query_key == "all":
        return FilterState()
    raise ValidationError(f"Unknown builtin query '{query_key}'")


def with_overrides(base: FilterState, **changes: Any) -> FilterState:
    """Copy a FilterState, replacing only the fields that are not None."""
    return replace(base, **{k: v for k, v in changes.items() if v is not None})


def select_month_year(
    explicit_month: int | None,
    explicit_year: int | None,
    filter_state: FilterState,
    now: Epoch,
    localize: Localize,
) -> tuple[int, int]:
    """Pick the month a calendar grid should show.

    Priority: explicit month and year (calendar navigation), then the month
    of range_start, then of range_end, then of now. Epochs are converted in
    the viewer's timezone via localize.

    Returns:
        Tuple of (month, year).

    Raises:
        ValidationError: If the explicit month is outside 1..12.
    """
    if explicit_month is not None and explicit_year is not None:
        if not 1 <= explicit_month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {explicit_month}")
        return explicit_month, explicit_year

    epoch = filter_state.range_start
    if epoch is None:
        epoch = filter_state.range_end
    if epoch is None:
        epoch = now

    year, month, _ = localize(epoch)
    return month, year


def month_bounds(month: int, year: int, tz: ViewerTimezone) -> tuple[Epoch, Epoch]:
    """Epochs of the first of the month and the first of the next month."""
    end_year, end_month = next_month(year, month)
    return tz.epoch_for(year, month, 1), tz.epoch_for(end_year, end_month, 1)


def resolve_range(
    filter_state: FilterState,
    now: Epoch,
    tz: ViewerTimezone,
    explicit_month: int | None = None,
    explicit_year: int | None = None,
) -> ResolvedRange:
    """Merge explicit and implicit date constraints into one range.

    In month display the range is clamped to the displayed month, so
    explicit bounds can tighten the grid but never widen it. With
    upcoming_only the lower bound is raised to now, never lowered.

    Args:
        filter_state: Decoded filter parameters.
        now: Current time.
        tz: Viewer timezone used for month boundaries.
        explicit_month: Month from calendar navigation, if any.
        explicit_year: Year from calendar navigation, if any.

    Returns:
        ResolvedRange; both bounds None means unconstrained. When the lower
        bound ends up past the upper one the range is marked empty.
    """
    min_range = filter_state.range_start
    max_range = filter_state.range_end

    if filter_state.display is DisplayMode.MONTH:
        month, year = select_month_year(explicit_month, explicit_year, filter_state, now, tz.localize)
        grid_start, grid_end = month_bounds(month, year, tz)

        if min_range is None or min_range < grid_start:
            min_range = grid_start
        if max_range is None or max_range > grid_end:
            max_range = grid_end

    if filter_state.upcoming_only:
        min_range = Epoch(max(now, min_range)) if min_range is not None else now

    # Upcoming-only can push the lower bound past the upper bound
    if min_range is not None and max_range is not None and min_range > max_range:
        return ResolvedRange(start=min_range, end=max_range, is_empty=True)

    return ResolvedRange(start=min_range, end=max_range)


def cancellation_flag(cancellation: CancellationFilter) -> bool | None:
    """Map the cancellation filter to the is_cancelled constraint."""
    if cancellation is CancellationFilter.ACTIVE:
        return False
    if cancellation is CancellationFilter.CANCELLED:
        return True
    return None


def build_constraints(filter_state: FilterState, resolved: ResolvedRange) -> EventConstraints:
    """Build the storage constraints for a filter and its resolved range."""
    return EventConstraints(
        date_range=None if resolved.is_unconstrained else resolved,
        invited_owners=filter_state.invited_owners,
        creator_owners=filter_state.creator_owners,
        is_cancelled=cancellation_flag(filter_state.cancellation),
    )


def owners_from(values: Iterable[str] | None) -> frozenset[OwnerID] | None:
    """Convert CLI-style owner lists to a frozenset, keeping None as None."""
    if not values:
        return None
    return frozenset(OwnerID(v) for v in values)
