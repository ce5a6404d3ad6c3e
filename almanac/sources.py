"""Loading event records, comments and documents from files.

Event files may be JSON (a list of objects) or CSV (one record per row).
Comment and document files are JSON lists.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from almanac.dates import ViewerTimezone
from almanac.domain.comments import Comment
from almanac.domain.events import EventRecord, EventStatus
from almanac.domain.models import CommentID, DocumentID, Epoch, OwnerID, RecordID
from almanac.errors import ValidationError

logger = logging.getLogger(__name__)

# Shorter digit strings read as dates (YYYYMMDD), longer ones as epoch seconds
EPOCH_MIN_DIGITS = 9


def parse_timestamp(raw: Any, tz: ViewerTimezone) -> Epoch:
    """Parse a timestamp into an epoch.

    Numbers are taken as epochs, and so are strings written "@<seconds>"
    or made of at least EPOCH_MIN_DIGITS digits. Anything else, including
    compact dates such as "20250115", is parsed with pandas.to_datetime;
    naive values are read in the viewer's timezone.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(raw, bool):
        raise ValueError(f"Could not parse timestamp {raw!r}")
    if isinstance(raw, int | float):
        return Epoch(int(raw))

    text = str(raw).strip()
    if text.startswith("@"):
        try:
            return Epoch(int(text[1:]))
        except ValueError as e:
            raise ValueError(f"Could not parse timestamp '{text}'") from e
    if text.isdigit() and len(text) >= EPOCH_MIN_DIGITS:
        return Epoch(int(text))

    try:
        parsed = pd.to_datetime(text)
    except (ValueError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse timestamp '{text}': {e}") from e

    if pd.isna(parsed):
        raise ValueError(f"Could not parse timestamp '{text}'")
    if parsed.tzinfo is None:
        parsed = parsed.tz_localize(tz.tz)
    return Epoch(int(parsed.timestamp()))


def _split_owners(raw: Any) -> frozenset[OwnerID]:
    if not raw:
        return frozenset()
    if isinstance(raw, str):
        raw = raw.replace(";", ",").split(",")
    return frozenset(OwnerID(str(o).strip()) for o in raw if str(o).strip())


def _parse_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "y"}


def parse_event_row(row: dict[str, Any], tz: ViewerTimezone) -> EventRecord:
    """Parse one raw event row into an EventRecord.

    Raises:
        ValidationError: If the id, timestamps or status are unusable.
    """
    raw_id = row.get("id", "")
    try:
        record_id = RecordID(int(raw_id))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Event record has no numeric id: {raw_id!r}") from e

    try:
        start = parse_timestamp(row.get("start", ""), tz)
        end = parse_timestamp(row.get("end", ""), tz)
    except ValueError as e:
        raise ValidationError(f"Event record {record_id}: {e}") from e

    try:
        status = EventStatus(str(row.get("status") or EventStatus.AWAY.value).strip().lower())
    except ValueError as e:
        raise ValidationError(f"Event record {record_id} has unknown status {row.get('status')!r}") from e

    return EventRecord(
        id=record_id,
        owner_id=OwnerID(str(row.get("owner") or "").strip()),
        start=start,
        end=end,
        owner_name=str(row.get("owner_name") or ""),
        title=str(row.get("title") or ""),
        description=str(row.get("description") or ""),
        status=status,
        is_cancelled=_parse_flag(row.get("cancelled", False)),
        invited=_split_owners(row.get("invited")),
    )


def _read_json_list(path: Path) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValidationError(f"{path} must contain a JSON list of objects")
    return data


def load_event_records(path: Path, tz: ViewerTimezone) -> list[EventRecord]:
    """Load event records from a JSON or CSV file, keeping file order.

    Raises:
        ValidationError: If a row is malformed.
        OSError: If the file cannot be read.
    """
    if path.suffix.lower() == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        rows: list[dict[str, Any]] = df.to_dict("records")
    else:
        rows = _read_json_list(path)

    records = [parse_event_row(row, tz) for row in rows]
    logger.debug("Loaded %d event records from %s", len(records), path)
    return records


def parse_comment(item: dict[str, Any]) -> Comment:
    """Parse one raw comment object.

    Raises:
        ValidationError: If a numeric field is missing or not an integer.
    """
    try:
        reply_to = item.get("reply_to")
        return Comment(
            id=CommentID(int(item["id"])),
            document_id=DocumentID(int(item["document"])),
            line_number=int(item.get("line", 0)),
            line_length=int(item.get("length", 0)),
            is_new_file=bool(item.get("new_file", False)),
            reply_to_id=CommentID(int(reply_to)) if reply_to is not None else None,
            content=str(item.get("content", "")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed comment {item!r}: {e}") from e


def load_comments(path: Path) -> list[Comment]:
    comments = [parse_comment(item) for item in _read_json_list(path)]
    logger.debug("Loaded %d comments from %s", len(comments), path)
    return comments


def load_documents(path: Path) -> dict[DocumentID, str]:
    """Load document names keyed by document id.

    Raises:
        ValidationError: If an entry has no integer id.
    """
    documents: dict[DocumentID, str] = {}
    for item in _read_json_list(path):
        try:
            documents[DocumentID(int(item["id"]))] = str(item.get("name", ""))
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed document {item!r}: {e}") from e
    logger.debug("Loaded %d documents from %s", len(documents), path)
    return documents
