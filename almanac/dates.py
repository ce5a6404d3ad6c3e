"""Date utilities for almanac.

Pure functions for month arithmetic, plus the viewer timezone used to turn
epochs into calendar dates and back.
"""

import calendar
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from almanac.domain.models import Epoch, Month

# Maps an epoch to the viewer's local (year, month, day)
Localize = Callable[[Epoch], tuple[int, int, int]]

LOCALTIME_PATH = Path("/etc/localtime")


def parse_month(month: Month) -> tuple[int, int]:
    """Split a YYYY-MM month into (year, month).

    Raises:
        ValueError: If the month is not a valid YYYY-MM string.
    """
    dt = datetime.strptime(month, "%Y-%m")
    return dt.year, dt.month


def next_month(year: int, month: int) -> tuple[int, int]:
    """Return the (year, month) following the given month.

    December rolls over to January of the next year.

    Raises:
        ValueError: If month is outside 1..12.
    """
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    if month == 12:
        return year + 1, 1
    return year, month + 1


def previous_month(year: int, month: int) -> tuple[int, int]:
    """Return the (year, month) preceding the given month."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    if month == 1:
        return year - 1, 12
    return year, month - 1


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_label(year: int, month: int) -> str:
    """Human-readable month (e.g., "January 2025")."""
    return date(year, month, 1).strftime("%B %Y")


def local_date(epoch: Epoch, localize: Localize) -> date:
    year, month, day = localize(epoch)
    return date(year, month, day)


@dataclass(frozen=True)
class ViewerTimezone:
    """Timezone in which the viewer reads calendar dates."""

    name: str
    tz: tzinfo

    def localize(self, epoch: Epoch) -> tuple[int, int, int]:
        """Convert an epoch to the viewer's local (year, month, day)."""
        local = datetime.fromtimestamp(epoch, self.tz)
        return local.year, local.month, local.day

    def epoch_for(self, year: int, month: int, day: int) -> Epoch:
        """Epoch of local midnight on the given date."""
        return Epoch(int(datetime(year, month, day, tzinfo=self.tz).timestamp()))

    def format(self, epoch: Epoch, fmt: str = "%Y-%m-%d %H:%M") -> str:
        return datetime.fromtimestamp(epoch, self.tz).strftime(fmt)


def local_tzinfo() -> tzinfo:
    """The machine's local zone, with its daylight saving rules.

    Looks at the TZ environment variable first, then /etc/localtime. Only
    when neither names a zone does it fall back to the current UTC offset.
    """
    key = os.environ.get("TZ", "").lstrip(":")
    if key:
        try:
            return ZoneInfo(key)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            # POSIX rule strings such as "CET-1CEST" are not zone keys
            return datetime.now().astimezone().tzinfo or timezone.utc

    if LOCALTIME_PATH.exists():
        with LOCALTIME_PATH.open("rb") as f:
            return ZoneInfo.from_file(f, key="localtime")

    return datetime.now().astimezone().tzinfo or timezone.utc


def viewer_timezone(name: str | None) -> ViewerTimezone:
    """Resolve a timezone name into a ViewerTimezone.

    Supported forms:
      - None / "" / "local" -> the machine's local timezone
      - "UTC" / "Z" / "GMT" -> UTC
      - IANA names, e.g. "Europe/London"

    Raises:
        ValueError: If the name is not a known timezone.
    """
    key = (name or "").strip()
    if key.lower() in {"", "local", "system"}:
        return ViewerTimezone(name="local", tz=local_tzinfo())
    if key.lower() in {"utc", "z", "gmt"}:
        return ViewerTimezone(name="UTC", tz=timezone.utc)

    try:
        return ViewerTimezone(name=key, tz=ZoneInfo(key))
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone '{key}'") from e
