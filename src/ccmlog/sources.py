"""Tail-bounded reads of local log files.

This is the only module that touches the file system.  It never walks
directories or expands globs: a target is either a path to an existing file
or a bare component name that maps to ``<log_dir>/<name>.log``.
"""
from __future__ import annotations

import re
from collections import deque
from pathlib import Path, PureWindowsPath

from .reader import LogSource

# Rolled-over logs are renamed Component-YYYYMMDD-HHMMSS.log
_ROLLOVER_SUFFIX_RE = re.compile(r"-\d{8}-\d{6}$")


def tail_lines(path: str | Path, n: int) -> list[str]:
    """Return the last ``n`` lines of ``path`` without trailing newlines.

    ``n <= 0`` reads the whole file.  Memory stays bounded by ``n`` lines.
    """
    with open(path, encoding="utf-8", errors="replace") as f:
        lines = (line.rstrip("\r\n") for line in f)
        if n <= 0:
            return list(lines)
        return list(deque(lines, maxlen=n))


def source_name_for(path: str | Path) -> str:
    """Derive the component name from a log file name.

    ``AppEnforce.log``, ``AppEnforce-20240314-091530.log`` and
    ``AppEnforce.lo_`` all give ``AppEnforce``.
    """
    # Accept both C:\...\X.log and /.../X.log regardless of host OS
    name = PureWindowsPath(str(path)).name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return _ROLLOVER_SUFFIX_RE.sub("", stem)


def resolve_target(target: str, log_dir: str) -> Path:
    """Map a CLI target to a file path.

    Existing paths are used as given; anything else is treated as a
    component name under ``log_dir``.
    """
    candidate = Path(target)
    if candidate.is_file():
        return candidate
    name = target if target.lower().endswith(".log") else f"{target}.log"
    resolved = Path(log_dir) / name
    if not resolved.is_file():
        raise FileNotFoundError(f"No log file for {target!r} (looked for {resolved})")
    return resolved


def load_source(
    path: str | Path,
    tail: int,
    source: str | None = None,
    computer_name: str | None = None,
) -> LogSource:
    """Read the tail of ``path`` into a :class:`LogSource`."""
    return LogSource(
        lines=tail_lines(path, tail),
        source=source or source_name_for(path),
        path=str(path),
        computer_name=computer_name,
    )
