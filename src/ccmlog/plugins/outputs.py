"""Built-in output plugins: JSON lines and CSV."""
from __future__ import annotations

import csv
import io
import json
from typing import Sequence

from ..reader import LogRecord

FIELDNAMES = ["computer_name", "source", "timestamp", "message", "path"]


class JsonLinesOutput:
    """Render records as one JSON object per line."""

    @property
    def name(self) -> str:
        return "json"

    def render(self, records: Sequence[LogRecord]) -> str:
        return "".join(json.dumps(r.to_dict()) + "\n" for r in records)


class CsvOutput:
    """Render records as a CSV string with a header row.

    Multi-line messages (e.g. reformatted AppIntentEval entries) are quoted
    by the csv module, so each record stays one logical row.
    """

    @property
    def name(self) -> str:
        return "csv"

    def render(self, records: Sequence[LogRecord]) -> str:
        if not records:
            return ""
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=FIELDNAMES, lineterminator="\n")
        writer.writeheader()
        writer.writerows(r.to_dict() for r in records)
        return buf.getvalue()
