"""Shared pytest fixtures for ccmlog tests."""
from __future__ import annotations

from pathlib import Path

import pytest


def cmtrace_line(
    message: str,
    time: str = "09:15:30.500+060",
    date: str = "03-14-2024",
    component: str = "AppEnforce",
) -> str:
    """Build a line the way the client agent writes it."""
    return (
        f'<![LOG[{message}]LOG]!><time="{time}" date="{date}" component="{component}" '
        f'context="" type="1" thread="4212" file="appprovider.cpp:2074">'
    )


@pytest.fixture()
def make_line():
    return cmtrace_line


@pytest.fixture()
def tmp_log_file(tmp_path: Path):
    """Return a factory that creates temporary log files."""

    def _make(lines: list[str], name: str = "AppEnforce.log") -> Path:
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p

    return _make


@pytest.fixture()
def appenforce_lines() -> list[str]:
    return [
        cmtrace_line("+++ Starting Install enforcement for App DT \"7-Zip\"", time="10:00:00.100+000"),
        cmtrace_line("    Prepared working directory: C:\\Windows\\ccmcache\\1", time="10:00:01.200+000"),
        "continuation of a multi-line entry with no markers",
        cmtrace_line("Executing Command line: \"msiexec.exe\" /i 7z.msi /qn", time="10:00:02.300+000"),
        cmtrace_line("   ", time="10:00:03.000+000"),
        cmtrace_line("Process 1234 terminated with exitcode: 0", time="10:00:04.400+000"),
    ]
