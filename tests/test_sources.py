"""Tests for almanac.sources loading functions."""

import json
from pathlib import Path

import pytest

from almanac.dates import viewer_timezone
from almanac.domain.events import EventStatus
from almanac.errors import ValidationError
from almanac.sources import (
    load_comments,
    load_documents,
    load_event_records,
    parse_comment,
    parse_event_row,
    parse_timestamp,
)

UTC = viewer_timezone("UTC")
JAN_1_2025 = 1735689600


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_integer_epoch(self) -> None:
        assert parse_timestamp(JAN_1_2025, UTC) == JAN_1_2025

    def test_integer_string(self) -> None:
        assert parse_timestamp(str(JAN_1_2025), UTC) == JAN_1_2025

    def test_compact_date_is_not_an_epoch(self) -> None:
        """Should read YYYYMMDD as a date rather than seconds since 1970."""
        assert parse_timestamp("20250115", UTC) == JAN_1_2025 + 14 * 86400

    def test_at_prefixed_epoch(self) -> None:
        assert parse_timestamp("@86400", UTC) == 86400
        assert parse_timestamp(f"@{JAN_1_2025}", UTC) == JAN_1_2025

    def test_bad_at_prefixed_epoch(self) -> None:
        with pytest.raises(ValueError, match="Could not parse"):
            parse_timestamp("@soon", UTC)

    def test_naive_iso_in_viewer_timezone(self) -> None:
        """Should read naive timestamps in the viewer's timezone."""
        assert parse_timestamp("2025-01-01 00:00", UTC) == JAN_1_2025
        assert parse_timestamp("2025-01-01", viewer_timezone("Asia/Tokyo")) == JAN_1_2025 - 9 * 3600

    def test_explicit_offset_wins(self) -> None:
        assert parse_timestamp("2025-01-01T01:00:00+01:00", viewer_timezone("Asia/Tokyo")) == JAN_1_2025

    def test_garbage_raises_valueerror(self) -> None:
        with pytest.raises(ValueError, match="Could not parse"):
            parse_timestamp("not a date", UTC)

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp(True, UTC)


class TestParseEventRow:
    """Tests for parse_event_row."""

    def test_full_row(self) -> None:
        row = {
            "id": "12",
            "owner": "alice",
            "owner_name": "Alice",
            "start": "2025-01-01 09:00",
            "end": "2025-01-01 10:00",
            "title": "Standup",
            "description": "Daily",
            "status": "Sporadic",
            "cancelled": "true",
            "invited": "bob; carol",
        }
        rec = parse_event_row(row, UTC)

        assert rec.id == 12
        assert rec.owner_id == "alice"
        assert rec.start == JAN_1_2025 + 9 * 3600
        assert rec.end == JAN_1_2025 + 10 * 3600
        assert rec.status is EventStatus.SPORADIC
        assert rec.is_cancelled is True
        assert rec.invited == {"bob", "carol"}

    def test_minimal_row_defaults(self) -> None:
        rec = parse_event_row({"id": 1, "owner": "alice", "start": 0, "end": 60}, UTC)

        assert rec.status is EventStatus.AWAY
        assert rec.is_cancelled is False
        assert rec.title == ""
        assert rec.invited == frozenset()

    def test_missing_id(self) -> None:
        with pytest.raises(ValidationError, match="numeric id"):
            parse_event_row({"owner": "alice", "start": 0, "end": 1}, UTC)

    def test_bad_timestamp(self) -> None:
        with pytest.raises(ValidationError, match="Event record 3"):
            parse_event_row({"id": 3, "owner": "alice", "start": "soon", "end": 1}, UTC)

    def test_bad_status(self) -> None:
        with pytest.raises(ValidationError, match="unknown status"):
            parse_event_row({"id": 3, "owner": "alice", "start": 0, "end": 1, "status": "busy"}, UTC)


class TestLoadEventRecords:
    """Tests for load_event_records."""

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "events.json"
        path.write_text(
            json.dumps(
                [
                    {"id": 2, "owner": "bob", "start": JAN_1_2025, "end": JAN_1_2025 + 60},
                    {"id": 1, "owner": "alice", "start": "2025-01-02", "end": "2025-01-03", "invited": ["bob"]},
                ]
            ),
            encoding="utf-8",
        )
        records = load_event_records(path, UTC)

        assert [r.id for r in records] == [2, 1]
        assert records[1].invited == {"bob"}

    def test_csv_file(self, tmp_path: Path) -> None:
        path = tmp_path / "events.csv"
        path.write_text(
            "id,owner,start,end,title,status\n"
            "5,alice,2025-01-01 09:00,2025-01-01 10:00,Standup,away\n"
            "6,bob,2025-01-02,2025-01-03,,\n",
            encoding="utf-8",
        )
        records = load_event_records(path, UTC)

        assert [r.id for r in records] == [5, 6]
        assert records[0].title == "Standup"
        assert records[1].title == ""
        assert records[1].status is EventStatus.AWAY

    def test_json_must_be_a_list(self, tmp_path: Path) -> None:
        path = tmp_path / "events.json"
        path.write_text(json.dumps({"id": 1}), encoding="utf-8")

        with pytest.raises(ValidationError, match="JSON list"):
            load_event_records(path, UTC)


class TestLoadComments:
    """Tests for comment and document loading."""

    def test_parse_comment(self) -> None:
        comment = parse_comment(
            {"id": 3, "document": 7, "line": 12, "length": 2, "new_file": True, "reply_to": 1, "content": "nit"}
        )

        assert comment.id == 3
        assert comment.document_id == 7
        assert comment.line_number == 12
        assert comment.line_length == 2
        assert comment.is_new_file is True
        assert comment.reply_to_id == 1
        assert comment.content == "nit"

    def test_parse_comment_missing_document(self) -> None:
        with pytest.raises(ValidationError, match="Malformed comment"):
            parse_comment({"id": 3})

    def test_load_files(self, tmp_path: Path) -> None:
        comments_path = tmp_path / "comments.json"
        comments_path.write_text(json.dumps([{"id": 1, "document": 2, "line": 4}]), encoding="utf-8")
        documents_path = tmp_path / "documents.json"
        documents_path.write_text(json.dumps([{"id": 2, "name": "src/app.py"}]), encoding="utf-8")

        assert [c.id for c in load_comments(comments_path)] == [1]
        assert load_documents(documents_path) == {2: "src/app.py"}

    def test_document_without_id(self, tmp_path: Path) -> None:
        path = tmp_path / "documents.json"
        path.write_text(json.dumps([{"name": "x"}]), encoding="utf-8")

        with pytest.raises(ValidationError, match="Malformed document"):
            load_documents(path)
