"""Exception hierarchy for CMTrace parsing and log retrieval.

Skipped lines are not errors: the parser returns ``None`` for those.
Everything raised here means the line grammar did not hold and the
current log should stop being processed.
"""
from __future__ import annotations


class CMTraceError(Exception):
    """Base class for all ccmlog errors."""


class MetadataExtractionError(CMTraceError):
    """A message was found but the ``<time=... date=...>`` region was not usable."""

    def __init__(self, reason: str, line: str) -> None:
        super().__init__(f"{reason}: {line[:200]!r}")
        self.reason = reason
        self.line = line


class TimestampReconstructionError(CMTraceError):
    """Date and time stubs were extracted but do not form a valid datetime."""

    def __init__(self, date_stub: str, time_stub: str) -> None:
        super().__init__(f"Cannot build timestamp from date={date_stub!r} time={time_stub!r}")
        self.date_stub = date_stub
        self.time_stub = time_stub


class LogReadError(CMTraceError):
    """A parse failure wrapped with the file/host context it happened in."""

    def __init__(
        self,
        path: str,
        computer_name: str,
        source: str,
        cause: CMTraceError,
    ) -> None:
        where = path or source
        super().__init__(f"{computer_name}: {where}: {cause}")
        self.path = path
        self.computer_name = computer_name
        self.source = source
        self.cause = cause
