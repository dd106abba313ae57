"""Regex search over message text."""
from __future__ import annotations

import re

from ..parsers.base import ParsedEntry


class MessageSearch:
    """Match parsed entries whose message contains ``pattern``.

    Case-insensitive by default; pass ``flags=0`` for exact-case matching.
    """

    def __init__(self, pattern: str, flags: int = re.IGNORECASE) -> None:
        self._regex = re.compile(pattern, flags)

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def matches(self, entry: ParsedEntry) -> bool:
        return self._regex.search(entry.message) is not None

    def filter(self, entries: list[ParsedEntry]) -> list[ParsedEntry]:
        """Return the subset of entries that match."""
        return [e for e in entries if self.matches(e)]
