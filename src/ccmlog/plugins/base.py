"""Plugin system Protocol definitions.

Third-party plugins implement one of these Protocols and register
themselves via the entry-points mechanism:

    [project.entry-points."ccmlog.plugins"]
    my_rule = "my_package.rules:ContentTransferReformatter"

The plugin registry discovers and validates plugins on ``discover()``.
"""
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..reader import LogRecord


@runtime_checkable
class ReformatterPlugin(Protocol):
    """Protocol for source-specific message reformatters."""

    @property
    def source(self) -> str:
        """Component name the rule applies to, e.g. 'AppIntentEval'."""
        ...

    def transform(self, message: str) -> str:
        """Return the reformatted message text."""
        ...


@runtime_checkable
class OutputPlugin(Protocol):
    """Protocol for custom output formatters."""

    @property
    def name(self) -> str: ...

    def render(self, records: Sequence[LogRecord]) -> str: ...
