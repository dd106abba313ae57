"""Source-specific message reformatting.

Some components write structured data as a flat delimited string.  A
reformatter turns such a message into something readable; which one runs is
looked up by source name, so new rules are added by registering a function
rather than by editing the parser.
"""
from __future__ import annotations

import logging
import re
from typing import Callable

logger = logging.getLogger(__name__)

Reformatter = Callable[[str], str]

# AppIntentEval writes "Key:- value, Key:- value"
_KEY_VALUE_SEPARATOR_RE = re.compile(r":- |, ")


def split_key_values(message: str) -> str:
    """Put every key and value of a ``":- "`` / ``", "`` delimited list on its own line."""
    return _KEY_VALUE_SEPARATOR_RE.sub("\n", message)


class ReformatRegistry:
    """Map source names to reformatters.

    Source names come from log file names, which are case-insensitive on the
    systems that write them, so lookups ignore case.

    Usage::

        registry = ReformatRegistry()
        registry.register("AppIntentEval", split_key_values)

        transform = registry.get("appintenteval")
    """

    def __init__(self) -> None:
        self._rules: dict[str, tuple[str, Reformatter]] = {}

    def register(self, source: str, reformatter: Reformatter) -> None:
        if not callable(reformatter):
            raise TypeError(f"{reformatter!r} is not callable")
        self._rules[source.casefold()] = (source, reformatter)
        logger.debug("Registered reformatter for source: %s", source)

    def unregister(self, source: str) -> None:
        self._rules.pop(source.casefold(), None)

    def get(self, source: str) -> Reformatter | None:
        rule = self._rules.get(source.casefold())
        return rule[1] if rule else None

    def apply(self, source: str, message: str) -> str:
        """Return ``message`` transformed by the rule for ``source``, if any."""
        reformatter = self.get(source)
        if reformatter is None:
            return message
        return reformatter(message)

    def list_sources(self) -> list[str]:
        return sorted(name for name, _ in self._rules.values())

    def __contains__(self, source: object) -> bool:
        return isinstance(source, str) and source.casefold() in self._rules

    def __len__(self) -> int:
        return len(self._rules)


def _builtin_registry() -> ReformatRegistry:
    registry = ReformatRegistry()
    registry.register("AppIntentEval", split_key_values)
    return registry


# Module-level default, shared by parsers that are not given their own
default_reformatters = _builtin_registry()
