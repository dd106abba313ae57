"""Turn raw CMTrace lines into filtered, context-stamped log records.

``LogReader.read`` handles one log: parse every line in order, drop what the
time window or search rejects, stamp the rest with host/source/path and stop
once the shared count limit is reached.  ``LogReader.read_many`` runs the
same loop over several logs with a single limit, which is what makes
``--count`` a cap on the whole request rather than on each file.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, Sequence

from .config import settings
from .errors import CMTraceError, LogReadError
from .parsers.base import LogParser, ParsedEntry
from .parsers.cmtrace import CMTraceParser
from .search.count_limit import CountLimit
from .search.regex_search import MessageSearch
from .search.time_filter import TimeWindow

logger = logging.getLogger(__name__)

_ON_ERROR_POLICIES = ("raise", "warn")

Predicate = Callable[[ParsedEntry], bool]


@dataclass(frozen=True)
class LogRecord:
    """One emitted log entry together with where it came from."""

    computer_name: str
    source: str
    timestamp: datetime
    message: str
    path: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "computer_name": self.computer_name,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "path": self.path,
        }


@dataclass(frozen=True)
class LogSource:
    """Raw lines of one log file on one host, ready to be read."""

    lines: Sequence[str]
    source: str
    path: str = ""
    computer_name: str | None = None


class LogReader:
    """Parse, filter and cap CMTrace lines.

    Usage::

        reader = LogReader()
        limit = CountLimit(50)
        for record in reader.read_many(sources, window=TimeWindow(after=t0), limit=limit):
            print(record.timestamp, record.message)
    """

    def __init__(self, parser: LogParser | None = None) -> None:
        self._parser = parser if parser is not None else CMTraceParser()

    @property
    def parser(self) -> LogParser:
        return self._parser

    @staticmethod
    def _predicates(window: TimeWindow | None, search: MessageSearch | None) -> list[Predicate]:
        """Checks an entry must pass (all of them) to become a record."""
        predicates: list[Predicate] = []
        if window is not None and not window.is_open:
            predicates.append(window.matches)
        if search is not None:
            predicates.append(search.matches)
        return predicates

    def read(
        self,
        lines: Iterable[str],
        source: str,
        *,
        path: str = "",
        computer_name: str | None = None,
        window: TimeWindow | None = None,
        limit: CountLimit | None = None,
        search: MessageSearch | None = None,
    ) -> Iterator[LogRecord]:
        """Yield a :class:`LogRecord` for every kept line, in input order.

        Parser errors propagate immediately and end the iteration; lines
        after the bad one are never looked at.
        """
        host = computer_name or settings.computer_name
        predicates = self._predicates(window, search)

        for line in lines:
            if limit is not None and limit.reached:
                return
            entry: ParsedEntry | None = self._parser.parse_line(line, source)
            if entry is None or not all(p(entry) for p in predicates):
                continue
            if limit is not None and not limit.claim():
                return
            yield LogRecord(
                computer_name=host,
                source=source,
                timestamp=entry.timestamp,
                message=entry.message,
                path=path,
            )
            if limit is not None and limit.reached:
                return

    def read_many(
        self,
        sources: Iterable[LogSource],
        *,
        window: TimeWindow | None = None,
        limit: CountLimit | None = None,
        search: MessageSearch | None = None,
        on_error: str = "raise",
    ) -> Iterator[LogRecord]:
        """Read each source in turn, sharing one count limit across all of them.

        A malformed line aborts the rest of its source.  With
        ``on_error="raise"`` the failure surfaces as :class:`LogReadError`;
        with ``on_error="warn"`` it is logged and the next source is read.
        """
        if on_error not in _ON_ERROR_POLICIES:
            raise ValueError(f"on_error must be one of {_ON_ERROR_POLICIES}, got {on_error!r}")

        for src in sources:
            if limit is not None and limit.reached:
                return
            host = src.computer_name or settings.computer_name
            try:
                yield from self.read(
                    src.lines,
                    src.source,
                    path=src.path,
                    computer_name=host,
                    window=window,
                    limit=limit,
                    search=search,
                )
            except CMTraceError as exc:
                error = LogReadError(src.path, host, src.source, exc)
                if on_error == "raise":
                    raise error from exc
                logger.warning("Skipping rest of %s: %s", src.path or src.source, error)
