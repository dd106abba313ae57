"""CMTrace log-line parser.

A line written by the Configuration Manager client looks like::

    <![LOG[Message text]LOG]!><time="09:15:30.500+060" date="03-14-2024" component="AppEnforce" context="" type="1" thread="4212" file="appprovider.cpp:2074">

The message sits between ``[LOG[`` and ``]LOG]`` and may span several
physical lines; the metadata region starts with ``time=`` and ends at the
next ``>``.  Only ``time`` and ``date`` are used, every other attribute is
ignored.
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Iterable, Iterator

from ..errors import MetadataExtractionError, TimestampReconstructionError
from .base import ParsedEntry
from .reformat import ReformatRegistry, default_reformatters

# First [LOG[...]LOG] only; non-greedy so a second pair on the line is ignored
_MESSAGE_RE = re.compile(r"\[LOG\[(?P<message>.*?)\]LOG\]", re.DOTALL)

# <time="..." date="..." ...>; must start with time= so that the "<!" in
# front of [LOG[ is never taken for the metadata region
_METADATA_RE = re.compile(r"<(?P<metadata>time=[^>]*)>")

_TIMESTAMP_FORMAT = "%m-%d-%Y %H:%M:%S"

# Timezone bias on a time stub that carries no fractional seconds
_TZ_SUFFIX_RE = re.compile(r"[+-]\d+$")


def _attribute(tokens: list[str], key: str, line: str) -> str:
    """Return the unquoted value of the first ``key=`` token."""
    prefix = f"{key}="
    for token in tokens:
        if token.startswith(prefix):
            return token[len(prefix):].strip('"')
    raise MetadataExtractionError(f"No {key}= attribute in metadata", line)


def _time_stub(raw: str) -> str:
    """Reduce ``HH:MM:SS.fff+zzz`` to ``HH:MM:SS``."""
    stub = raw.split(".", 1)[0]
    return _TZ_SUFFIX_RE.sub("", stub)


class CMTraceParser:
    """Parse CMTrace-format lines into :class:`ParsedEntry` values.

    ``parse_line`` returns None for lines without message markers (the
    continuation lines of multi-line entries) and for blank messages.  A
    line that has a message but broken metadata raises instead, since that
    means the format assumption no longer holds.
    """

    def __init__(self, reformatters: ReformatRegistry | None = None) -> None:
        self._reformatters = reformatters if reformatters is not None else default_reformatters

    @property
    def name(self) -> str:
        return "cmtrace"

    @property
    def reformatters(self) -> ReformatRegistry:
        return self._reformatters

    def parse_line(self, line: str, source: str) -> ParsedEntry | None:
        m = _MESSAGE_RE.search(line)
        if not m:
            return None

        message = self._reformatters.apply(source, m.group("message")).strip()
        if not message:
            return None

        # Metadata always follows the message; never look inside the message text
        meta = _METADATA_RE.search(line, m.end())
        if not meta:
            raise MetadataExtractionError("No <time=... date=...> region", line)
        tokens = meta.group("metadata").split()

        time_stub = _time_stub(_attribute(tokens, "time", line))
        date_stub = _attribute(tokens, "date", line)
        try:
            timestamp = datetime.strptime(f"{date_stub} {time_stub}", _TIMESTAMP_FORMAT)
        except ValueError as exc:
            raise TimestampReconstructionError(date_stub, time_stub) from exc

        return ParsedEntry(timestamp=timestamp, message=message)

    def parse_lines(self, lines: Iterable[str], source: str) -> Iterator[ParsedEntry]:
        """Parse lines in order. Errors propagate and end the iteration."""
        for line in lines:
            entry = self.parse_line(line, source)
            if entry is not None:
                yield entry
