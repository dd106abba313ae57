"""Time-window filtering for parsed log entries."""
from __future__ import annotations

from datetime import datetime
from typing import Iterator

from ..parsers.base import ParsedEntry

# Formats accepted for user-supplied window bounds, tried in order
_BOUND_FORMATS: list[str] = [
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M",
    "%m-%d-%Y %H:%M:%S",  # CMTrace date + time stubs
    "%Y-%m-%d",
]


def parse_datetime(raw: str) -> datetime | None:
    """Try each known format and return the first successful parse."""
    raw = raw.strip()
    for fmt in _BOUND_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None


def _naive(ts: datetime) -> datetime:
    return ts.replace(tzinfo=None)


class TimeWindow:
    """Keep entries whose timestamp lies between ``after`` and ``before``.

    Either bound may be ``None`` (open interval).  Bounds are exclusive: an
    entry stamped exactly ``after`` or exactly ``before`` is dropped.  Pass
    ``inclusive=True`` to keep boundary-equal entries.
    """

    def __init__(
        self,
        after: datetime | None = None,
        before: datetime | None = None,
        inclusive: bool = False,
    ) -> None:
        self.after = after
        self.before = before
        self.inclusive = inclusive

    @property
    def is_open(self) -> bool:
        """True when neither bound is set and every entry passes."""
        return self.after is None and self.before is None

    def matches(self, entry: ParsedEntry) -> bool:
        ts = _naive(entry.timestamp)
        if self.after is not None:
            after = _naive(self.after)
            if ts < after or (ts == after and not self.inclusive):
                return False
        if self.before is not None:
            before = _naive(self.before)
            if ts > before or (ts == before and not self.inclusive):
                return False
        return True

    def filter(self, entries: Iterator[ParsedEntry]) -> Iterator[ParsedEntry]:
        """Yield entries whose timestamp falls within the window."""
        for entry in entries:
            if self.matches(entry):
                yield entry

    def __repr__(self) -> str:
        mode = "inclusive" if self.inclusive else "exclusive"
        return f"TimeWindow(after={self.after!r}, before={self.before!r}, {mode})"
