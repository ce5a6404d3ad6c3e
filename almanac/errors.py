"""Exception hierarchy for almanac.

Exception Hierarchy:
    Exception (built-in)
    └── AlmanacError - Base for every error raised by almanac
        ├── ValidationError - Malformed input (records, comments, filters)
        └── ConfigurationError - Unusable settings (palette, document order)

Domain functions raise these at call entry or as soon as bad input is
found; a failed call never returns a partial grid or grouping.
"""

from collections.abc import Iterable


class AlmanacError(Exception):
    """Base exception for almanac errors."""


class ValidationError(AlmanacError):
    """Input data violates the contract of a domain operation.

    Attributes:
        ids: Offending identifiers (record ids, comment ids), if any.
    """

    def __init__(self, message: str, ids: Iterable[object] = ()) -> None:
        self.ids = tuple(ids)
        if self.ids:
            message = f"{message}: {', '.join(str(i) for i in self.ids)}"
        super().__init__(message)


class ConfigurationError(AlmanacError):
    """Settings make an operation impossible before any input is processed."""
