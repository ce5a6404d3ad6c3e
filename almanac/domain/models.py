"""Domain type definitions for almanac.

These NewTypes provide semantic clarity and help with type checking:
- Epoch: Unix timestamp in whole seconds
- Month: Month in YYYY-MM format
- OwnerID: Identifier of the user owning an event
- RecordID: Stable identifier of a stored calendar record
- DocumentID: Identifier of a reviewed document (file in a changeset)
- CommentID: Identifier of an inline comment
- Color: Palette color name understood by the renderer
"""

from typing import NewType

# Epochs are whole seconds since 1970-01-01 UTC
Epoch = NewType("Epoch", int)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

OwnerID = NewType("OwnerID", str)

RecordID = NewType("RecordID", int)

DocumentID = NewType("DocumentID", int)

CommentID = NewType("CommentID", int)

Color = NewType("Color", str)
