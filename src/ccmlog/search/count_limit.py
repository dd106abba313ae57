"""Record cap shared by every log in a single retrieval."""
from __future__ import annotations

import threading


class CountLimit:
    """Cap the number of records emitted across a whole retrieval.

    One instance is handed to every per-log read of the same request, so the
    count keeps running from one file (or host) to the next instead of
    restarting.  Claims go through a lock so concurrent readers still get
    exactly ``limit`` records in total.
    """

    def __init__(self, limit: int) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"Count limit must be a positive integer, got {limit!r}")
        self.limit = limit
        self._emitted = 0
        self._lock = threading.Lock()

    @property
    def emitted(self) -> int:
        return self._emitted

    @property
    def remaining(self) -> int:
        return max(self.limit - self._emitted, 0)

    @property
    def reached(self) -> bool:
        return self._emitted >= self.limit

    def claim(self) -> bool:
        """Reserve one slot. Returns False once the cap has been reached."""
        with self._lock:
            if self._emitted >= self.limit:
                return False
            self._emitted += 1
            return True

    def __repr__(self) -> str:
        return f"CountLimit({self._emitted}/{self.limit})"
