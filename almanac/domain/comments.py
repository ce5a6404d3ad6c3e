"""Pure functions for grouping and ordering inline review comments.

Inline comments are anchored to a line range of one document. For display
they are grouped per document, documents follow the caller's display order
and comments within a document are sorted by position.

This module has no I/O and never mutates its inputs.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from almanac.domain.models import CommentID, DocumentID
from almanac.errors import ConfigurationError, ValidationError

UINT32_MAX = 2**32 - 1


class StrayPolicy(Enum):
    """What to do with comments on documents outside the display order."""

    REJECT = "reject"
    DROP = "drop"


@dataclass(frozen=True)
class Comment:
    """Immutable inline comment.

    line_length is the number of extra lines covered; 0 anchors the
    comment to a single line.
    """

    id: CommentID
    document_id: DocumentID
    line_number: int = 0
    line_length: int = 0
    is_new_file: bool = False
    reply_to_id: CommentID | None = None
    content: str = ""

    @property
    def last_line(self) -> int:
        return self.line_number + self.line_length


def comment_sort_key(comment: Comment) -> tuple[int, int, int]:
    """Position key: line number, then line length, then id."""
    return (comment.line_number, comment.line_length, comment.id)


def display_order(document_names: Mapping[DocumentID, str]) -> list[DocumentID]:
    """Order documents alphabetically by name, ties broken by id."""
    return sorted(document_names, key=lambda doc_id: (document_names[doc_id], doc_id))


def validate_comments(comments: Iterable[Comment]) -> None:
    """Reject comments whose id or anchor is not an unsigned 32-bit value.

    Raises:
        ValidationError: Listing the ids of every offending comment.
    """
    bad = [
        c.id
        for c in comments
        if not (0 <= c.line_number <= UINT32_MAX and 0 <= c.line_length <= UINT32_MAX and c.id >= 0)
    ]
    if bad:
        raise ValidationError("Comments with out-of-range id or line anchor", bad)


def group_and_order(
    comments: Iterable[Comment],
    document_order: Iterable[DocumentID],
    strays: StrayPolicy = StrayPolicy.REJECT,
) -> dict[DocumentID, list[Comment]]:
    """Group comments by document and sort each group by position.

    Args:
        comments: Comments in any order.
        document_order: Display order of the known documents.
        strays: Policy for comments on documents not in document_order.

    Returns:
        Dictionary of document id to sorted comments. Keys follow
        document_order and only documents with comments are present.

    Raises:
        ConfigurationError: If there are comments but no documents.
        ValidationError: If a comment is malformed, or references an
            unknown document under StrayPolicy.REJECT.
    """
    comments = list(comments)
    order = list(dict.fromkeys(document_order))

    if comments and not order:
        raise ConfigurationError("Cannot group comments without a document display order")

    validate_comments(comments)

    known = set(order)
    stray_ids = sorted(c.id for c in comments if c.document_id not in known)
    if stray_ids and strays is StrayPolicy.REJECT:
        raise ValidationError("Comments reference documents outside the display order", stray_ids)

    buckets: dict[DocumentID, list[Comment]] = defaultdict(list)
    for comment in comments:
        buckets[comment.document_id].append(comment)

    return {doc_id: sorted(buckets[doc_id], key=comment_sort_key) for doc_id in order if doc_id in buckets}
