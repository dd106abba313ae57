"""Parsed-entry type and the parser Protocol every line parser implements."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Iterator, Protocol, runtime_checkable


@dataclass(frozen=True)
class ParsedEntry:
    """Message text and timestamp extracted from one log line."""

    timestamp: datetime
    message: str


@runtime_checkable
class LogParser(Protocol):
    """Protocol for line parsers — duck-typed, no inheritance required."""

    def parse_line(self, line: str, source: str) -> ParsedEntry | None:
        """Parse a single log line. Returns None if the line should be skipped."""
        ...

    def parse_lines(self, lines: Iterable[str], source: str) -> Iterator[ParsedEntry]:
        """Parse lines in order, yielding only the entries that were not skipped."""
        ...

    @property
    def name(self) -> str:
        """Human-readable parser name (e.g. 'cmtrace')."""
        ...
