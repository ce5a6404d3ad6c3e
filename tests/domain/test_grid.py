"""Tests for almanac.domain.grid pure functions."""

import pytest

from almanac.dates import viewer_timezone
from almanac.domain.events import EventRecord, EventStatus
from almanac.domain.grid import (
    CALENDAR_COLORS,
    FALLBACK_COLOR,
    assign_colors,
    build_month_grid,
    project_event,
)
from almanac.domain.models import Color, Epoch, OwnerID, RecordID
from almanac.errors import ConfigurationError, ValidationError

UTC = viewer_timezone("UTC")

JAN_1_2025 = Epoch(1735689600)
HOUR = 3600
DAY = 86400

RED, BLUE, GREEN = Color("red"), Color("blue"), Color("green")


def jan(day: int, hour: int = 0) -> Epoch:
    """Epoch for a day in January 2025 (UTC)."""
    return Epoch(JAN_1_2025 + (day - 1) * DAY + hour * HOUR)


def record(record_id: int, owner: str, start: Epoch, end: Epoch, **kwargs: object) -> EventRecord:
    return EventRecord(id=RecordID(record_id), owner_id=OwnerID(owner), start=start, end=end, **kwargs)  # type: ignore[arg-type]


def event_ids(grid_day: object) -> list[int]:
    return [e.record_id for e in grid_day.events]  # type: ignore[attr-defined]


class TestAssignColors:
    """Tests for assign_colors."""

    def test_first_appearance_order(self) -> None:
        """Should follow first appearance, not alphabetical order."""
        colors = assign_colors([OwnerID("B"), OwnerID("A"), OwnerID("B")], palette=[RED, BLUE, GREEN])

        assert colors == {"B": RED, "A": BLUE}
        assert list(colors) == ["B", "A"]

    def test_fallback_when_palette_exhausted(self) -> None:
        """Should give every owner the fallback color, not a partial cycle."""
        owners = [OwnerID(o) for o in "ABCDE"]
        colors = assign_colors(owners, palette=[RED, BLUE, GREEN], fallback=Color("sky"))

        assert set(colors.values()) == {"sky"}
        assert len(colors) == 5

    def test_exactly_palette_size_uses_palette(self) -> None:
        """Should still cycle when owners equal palette size."""
        colors = assign_colors([OwnerID(o) for o in "XYZ"], palette=[RED, BLUE, GREEN])
        assert list(colors.values()) == [RED, BLUE, GREEN]

    def test_empty_palette_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            assign_colors([OwnerID("A")], palette=[])

    def test_no_owners(self) -> None:
        assert assign_colors([]) == {}

    def test_default_palette_fallback(self) -> None:
        owners = [OwnerID(f"user{i}") for i in range(len(CALENDAR_COLORS) + 1)]
        assert set(assign_colors(owners).values()) == {FALLBACK_COLOR}


class TestProjectEvent:
    """Tests for project_event."""

    def test_description_combines_owner_and_status(self) -> None:
        rec = record(1, "PHID-alice", jan(2), jan(3), owner_name="alice", status=EventStatus.SPORADIC)
        event = project_event(rec, RED)

        assert event.description == "alice (Sporadic)"
        assert event.color == RED
        assert event.record_id == 1

    def test_owner_id_when_name_missing(self) -> None:
        event = project_event(record(1, "PHID-alice", jan(2), jan(3)), RED)
        assert event.description == "PHID-alice (Away)"

    def test_explicit_title_wins(self) -> None:
        rec = record(1, "alice", jan(2), jan(3), title="Offsite", description="Long text")
        assert project_event(rec, RED).title == "Offsite"

    def test_falls_back_to_truncated_description(self) -> None:
        """Should truncate the description to 64 code points."""
        rec = record(1, "alice", jan(2), jan(3), description="é" * 100)
        title = project_event(rec, RED).title

        assert len(title) == 64
        assert title.endswith("…")

    def test_short_description_untouched(self) -> None:
        rec = record(1, "alice", jan(2), jan(3), description="Dentist")
        assert project_event(rec, RED).title == "Dentist"

    def test_status_when_nothing_else(self) -> None:
        assert project_event(record(1, "alice", jan(2), jan(3)), RED).title == "Away"


class TestBuildMonthGrid:
    """Tests for build_month_grid."""

    def test_one_cell_per_day(self) -> None:
        """Should create a cell for every day of the month."""
        grid = build_month_grid(2, 2024, [], today=None, localize=UTC.localize)

        assert [cell.day for cell in grid.days] == list(range(1, 30))
        assert grid.label == "February 2024"

    def test_today_marker_in_displayed_month(self) -> None:
        grid = build_month_grid(1, 2025, [], today=jan(17, 15), localize=UTC.localize)
        assert grid.today == 17

    def test_no_today_marker_in_other_month(self) -> None:
        grid = build_month_grid(2, 2025, [], today=jan(17), localize=UTC.localize)
        assert grid.today is None

    def test_no_today_marker_same_month_other_year(self) -> None:
        grid = build_month_grid(1, 2024, [], today=jan(17), localize=UTC.localize)
        assert grid.today is None

    def test_single_day_event(self) -> None:
        grid = build_month_grid(1, 2025, [record(7, "alice", jan(5, 9), jan(5, 10))], None, UTC.localize)

        assert event_ids(grid.days[4]) == [7]
        assert sum(len(cell.events) for cell in grid.days) == 1

    def test_multi_day_event_fills_every_day(self) -> None:
        grid = build_month_grid(1, 2025, [record(7, "alice", jan(3, 9), jan(6, 17))], None, UTC.localize)

        assert [cell.day for cell in grid.days if cell.events] == [3, 4, 5, 6]

    def test_end_at_midnight_is_exclusive(self) -> None:
        """Should not touch the day that starts exactly at the end epoch."""
        grid = build_month_grid(1, 2025, [record(7, "alice", jan(2, 10), jan(3))], None, UTC.localize)

        assert [cell.day for cell in grid.days if cell.events] == [2]

    def test_zero_length_event_on_start_day(self) -> None:
        grid = build_month_grid(1, 2025, [record(7, "alice", jan(9, 12), jan(9, 12))], None, UTC.localize)

        assert [cell.day for cell in grid.days if cell.events] == [9]

    def test_event_spanning_month_end_is_clipped(self) -> None:
        """Should only place the part of the event inside the month."""
        grid = build_month_grid(1, 2025, [record(7, "alice", jan(30), jan(34))], None, UTC.localize)

        assert [cell.day for cell in grid.days if cell.events] == [30, 31]

    def test_event_outside_month_not_placed(self) -> None:
        grid = build_month_grid(1, 2025, [record(7, "alice", jan(40), jan(41))], None, UTC.localize)

        assert all(not cell.events for cell in grid.days)
        assert grid.colors == {"alice": CALENDAR_COLORS[0]}

    def test_days_follow_viewer_timezone(self) -> None:
        """Should place events on the viewer's local date."""
        tokyo = viewer_timezone("Asia/Tokyo")
        grid = build_month_grid(1, 2025, [record(7, "alice", jan(4, 20), jan(4, 21))], None, tokyo.localize)

        assert [cell.day for cell in grid.days if cell.events] == [5]

    def test_colors_assigned_per_owner(self) -> None:
        """Should give each event its owner's color."""
        records = [
            record(1, "bob", jan(2), jan(2, 1)),
            record(2, "alice", jan(3), jan(3, 1)),
            record(3, "bob", jan(4), jan(4, 1)),
        ]
        grid = build_month_grid(1, 2025, records, None, UTC.localize, palette=[RED, BLUE, GREEN])

        assert grid.colors == {"bob": RED, "alice": BLUE}
        assert [e.color for e in grid.days[1].events] == [RED]
        assert [e.color for e in grid.days[2].events] == [BLUE]
        assert [e.color for e in grid.days[3].events] == [RED]

    def test_palette_exhaustion_uses_fallback_for_every_event(self) -> None:
        records = [record(i, f"owner{i}", jan(i), jan(i, 1)) for i in range(1, 6)]
        grid = build_month_grid(
            1, 2025, records, None, UTC.localize, palette=[RED, BLUE, GREEN], fallback_color=Color("sky")
        )

        placed = [e for cell in grid.days for e in cell.events]
        assert len(placed) == 5
        assert {e.color for e in placed} == {"sky"}

    def test_overlapping_events_keep_input_order(self) -> None:
        records = [record(2, "bob", jan(8), jan(9)), record(1, "alice", jan(8), jan(9))]
        grid = build_month_grid(1, 2025, records, None, UTC.localize)

        assert event_ids(grid.days[7]) == [2, 1]

    def test_browse_uri_is_opaque(self) -> None:
        grid = build_month_grid(1, 2025, [], None, UTC.localize, browse_uri="/calendar/query/month/")
        assert grid.browse_uri == "/calendar/query/month/"

    def test_weeks_are_monday_first(self) -> None:
        """Should pad the first week up to the weekday of the 1st."""
        grid = build_month_grid(1, 2025, [], None, UTC.localize)
        weeks = grid.weeks()

        # 2025-01-01 is a Wednesday
        assert grid.first_weekday == 2
        assert weeks[0][:2] == [None, None]
        assert weeks[0][2] is not None and weeks[0][2].day == 1
        assert all(len(week) == 7 for week in weeks)
        assert sum(1 for week in weeks for cell in week if cell is not None) == 31

    def test_navigation_months(self) -> None:
        """Should link to the neighbouring months across year boundaries."""
        january = build_month_grid(1, 2025, [], None, UTC.localize)
        december = build_month_grid(12, 2025, [], None, UTC.localize)

        assert (january.previous, january.next) == ("2024-12", "2025-02")
        assert (december.previous, december.next) == ("2025-11", "2026-01")

    def test_colors_are_read_only(self) -> None:
        """Should not let callers change owner colors after the grid is built."""
        grid = build_month_grid(1, 2025, [record(1, "alice", jan(2), jan(3))], None, UTC.localize)

        with pytest.raises(TypeError):
            grid.colors["mallory"] = RED  # type: ignore[index]
        assert dict(grid.colors) == {"alice": CALENDAR_COLORS[0]}

    def test_identical_inputs_give_identical_grids(self) -> None:
        records = [record(i, f"owner{i % 3}", jan(i), jan(i + 2)) for i in range(1, 20)]

        first = build_month_grid(1, 2025, records, jan(10), UTC.localize)
        second = build_month_grid(1, 2025, list(records), jan(10), UTC.localize)

        assert first == second


class TestBuildMonthGridFailures:
    """Tests for build_month_grid failure semantics."""

    def test_empty_palette_rejected_before_processing(self) -> None:
        with pytest.raises(ConfigurationError):
            build_month_grid(1, 2025, [], None, UTC.localize, palette=[])

    def test_invalid_month(self) -> None:
        with pytest.raises(ValidationError):
            build_month_grid(13, 2025, [], None, UTC.localize)

    def test_missing_owner_rejected(self) -> None:
        records = [record(1, "alice", jan(2), jan(3)), record(2, "", jan(2), jan(3))]

        with pytest.raises(ValidationError, match="without an owner") as exc:
            build_month_grid(1, 2025, records, None, UTC.localize)
        assert exc.value.ids == (2,)

    def test_inverted_interval_rejected(self) -> None:
        records = [record(5, "alice", jan(3), jan(2)), record(6, "bob", jan(4), jan(1))]

        with pytest.raises(ValidationError, match="ending before") as exc:
            build_month_grid(1, 2025, records, None, UTC.localize)
        assert exc.value.ids == (5, 6)
