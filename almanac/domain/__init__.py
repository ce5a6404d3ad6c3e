"""Domain models and types for almanac.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations and no implicit clock reads
- Easy to test
- Query, grid and comment logic separated from the command line
"""

from almanac.domain.models import Color, CommentID, DocumentID, Epoch, Month, OwnerID, RecordID

__all__ = ["Epoch", "Month", "OwnerID", "RecordID", "DocumentID", "CommentID", "Color"]
