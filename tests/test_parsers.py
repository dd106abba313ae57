"""Tests for the CMTrace line parser and reformat rules."""
from __future__ import annotations

from datetime import datetime

import pytest

from ccmlog.errors import CMTraceError, MetadataExtractionError, TimestampReconstructionError
from ccmlog.parsers.base import LogParser, ParsedEntry
from ccmlog.parsers.cmtrace import CMTraceParser
from ccmlog.parsers.reformat import ReformatRegistry, split_key_values


# ---------------------------------------------------------------------------
# CMTraceParser — happy path
# ---------------------------------------------------------------------------

class TestCMTraceParser:
    def test_implements_protocol(self) -> None:
        assert isinstance(CMTraceParser(), LogParser)
        assert CMTraceParser().name == "cmtrace"

    def test_minimal_line(self) -> None:
        line = '[LOG[Hello World]LOG]<time="09:15:30.500+060" date="03-14-2024">'
        entry = CMTraceParser().parse_line(line, "AppEnforce")
        assert entry == ParsedEntry(timestamp=datetime(2024, 3, 14, 9, 15, 30), message="Hello World")

    def test_agent_written_line(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("Hello World"), "AppEnforce")
        assert entry is not None
        assert entry.message == "Hello World"
        assert entry.timestamp == datetime(2024, 3, 14, 9, 15, 30)

    def test_message_is_stripped(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("   padded message \t"), "AppEnforce")
        assert entry is not None
        assert entry.message == "padded message"

    def test_timezone_suffix_dropped(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("x", time="23:59:59.999-480"), "X")
        assert entry is not None
        assert entry.timestamp == datetime(2024, 3, 14, 23, 59, 59)

    def test_time_without_fraction(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("x", time="08:00:01+060"), "X")
        assert entry is not None
        assert entry.timestamp == datetime(2024, 3, 14, 8, 0, 1)

    def test_unpadded_date(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("x", date="3-4-2024"), "X")
        assert entry is not None
        assert entry.timestamp.date() == datetime(2024, 3, 4).date()

    def test_extra_metadata_attributes_ignored(self) -> None:
        line = (
            '<![LOG[msg]LOG]!><time="01:02:03.000+000" date="12-31-2023" '
            'component="CAS" context="NT AUTHORITY\\SYSTEM" type="2" thread="88" file="">'
        )
        entry = CMTraceParser().parse_line(line, "CAS")
        assert entry is not None
        assert entry.timestamp == datetime(2023, 12, 31, 1, 2, 3)

    def test_only_first_message_used(self) -> None:
        line = (
            '<![LOG[first]LOG]!><time="01:02:03.000+000" date="12-31-2023">'
            '<![LOG[second]LOG]!><time="04:05:06.000+000" date="12-31-2023">'
        )
        entry = CMTraceParser().parse_line(line, "X")
        assert entry is not None
        assert entry.message == "first"
        assert entry.timestamp == datetime(2023, 12, 31, 1, 2, 3)

    def test_message_with_embedded_newline(self) -> None:
        line = '<![LOG[line one\nline two]LOG]!><time="01:02:03.000+000" date="12-31-2023">'
        entry = CMTraceParser().parse_line(line, "X")
        assert entry is not None
        assert entry.message == "line one\nline two"

    def test_message_with_angle_brackets(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("<Policy> changed to <Enabled>"), "X")
        assert entry is not None
        assert entry.message == "<Policy> changed to <Enabled>"

    def test_parse_lines_skips_and_keeps_order(self, appenforce_lines) -> None:
        entries = list(CMTraceParser().parse_lines(appenforce_lines, "AppEnforce"))
        assert len(entries) == 4
        assert entries[0].message.startswith("+++ Starting Install")
        assert entries[-1].message.endswith("exitcode: 0")


# ---------------------------------------------------------------------------
# CMTraceParser — skips
# ---------------------------------------------------------------------------

class TestSkips:
    @pytest.mark.parametrize("line", [
        "",
        "plain text with no markers",
        "continuation of a previous entry",
        '<time="09:15:30.500+060" date="03-14-2024">',
        "[LOG[never closed",
    ])
    def test_no_markers_returns_none(self, line: str) -> None:
        assert CMTraceParser().parse_line(line, "AppEnforce") is None

    @pytest.mark.parametrize("message", ["", "   ", "\t\n "])
    def test_blank_message_returns_none(self, make_line, message: str) -> None:
        assert CMTraceParser().parse_line(make_line(message), "AppEnforce") is None

    def test_blank_message_skips_before_metadata(self) -> None:
        # No metadata at all, but the empty message wins
        assert CMTraceParser().parse_line("[LOG[  ]LOG]", "X") is None


# ---------------------------------------------------------------------------
# CMTraceParser — errors
# ---------------------------------------------------------------------------

class TestErrors:
    def test_missing_metadata_raises(self) -> None:
        with pytest.raises(MetadataExtractionError):
            CMTraceParser().parse_line("<![LOG[msg]LOG]!>", "X")

    def test_metadata_inside_message_not_used(self) -> None:
        line = '<![LOG[Applied <time="01:00:00.000+000" date="01-01-2020"> policy]LOG]!>'
        with pytest.raises(MetadataExtractionError):
            CMTraceParser().parse_line(line, "X")

    def test_region_not_starting_with_time_raises(self) -> None:
        line = '<![LOG[msg]LOG]!><date="03-14-2024" time="09:15:30.500+060">'
        with pytest.raises(MetadataExtractionError):
            CMTraceParser().parse_line(line, "X")

    def test_empty_time_value_raises(self) -> None:
        line = '<![LOG[msg]LOG]!><time= date="03-14-2024">'
        with pytest.raises(TimestampReconstructionError):
            CMTraceParser().parse_line(line, "X")

    def test_missing_date_token_raises(self) -> None:
        line = '<![LOG[msg]LOG]!><time="09:15:30.500+060" component="X">'
        with pytest.raises(MetadataExtractionError) as exc_info:
            CMTraceParser().parse_line(line, "X")
        assert exc_info.value.line == line

    def test_invalid_calendar_date_raises(self, make_line) -> None:
        with pytest.raises(TimestampReconstructionError) as exc_info:
            CMTraceParser().parse_line(make_line("x", date="02-30-2024"), "X")
        assert exc_info.value.date_stub == "02-30-2024"
        assert exc_info.value.time_stub == "09:15:30"

    def test_garbage_time_raises(self, make_line) -> None:
        with pytest.raises(TimestampReconstructionError):
            CMTraceParser().parse_line(make_line("x", time="noon"), "X")

    def test_errors_share_base_class(self) -> None:
        assert issubclass(MetadataExtractionError, CMTraceError)
        assert issubclass(TimestampReconstructionError, CMTraceError)


# ---------------------------------------------------------------------------
# Reformat rules
# ---------------------------------------------------------------------------

class TestReformat:
    def test_split_key_values(self) -> None:
        assert split_key_values("A:- 1, B:- 2") == "A\n1\nB\n2"

    def test_appintenteval_rule_applied(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("A:- 1, B:- 2"), "AppIntentEval")
        assert entry is not None
        assert entry.message == "A\n1\nB\n2"

    def test_rule_lookup_ignores_case(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("A:- 1, B:- 2"), "appintenteval")
        assert entry is not None
        assert entry.message == "A\n1\nB\n2"

    def test_other_sources_untouched(self, make_line) -> None:
        entry = CMTraceParser().parse_line(make_line("A:- 1, B:- 2"), "AppEnforce")
        assert entry is not None
        assert entry.message == "A:- 1, B:- 2"

    def test_custom_registry(self, make_line) -> None:
        registry = ReformatRegistry()
        registry.register("CAS", str.upper)
        parser = CMTraceParser(registry)
        entry = parser.parse_line(make_line("download done"), "CAS")
        assert entry is not None
        assert entry.message == "DOWNLOAD DONE"
        # The built-in AppIntentEval rule is not in this registry
        entry = parser.parse_line(make_line("A:- 1"), "AppIntentEval")
        assert entry is not None
        assert entry.message == "A:- 1"

    def test_reformat_to_blank_is_skipped(self, make_line) -> None:
        registry = ReformatRegistry()
        registry.register("Noise", lambda message: "")
        assert CMTraceParser(registry).parse_line(make_line("chatter"), "Noise") is None

    def test_register_non_callable_raises(self) -> None:
        with pytest.raises(TypeError):
            ReformatRegistry().register("X", "not callable")  # type: ignore[arg-type]

    def test_registry_listing(self) -> None:
        registry = ReformatRegistry()
        registry.register("b", str.strip)
        registry.register("A", str.strip)
        assert registry.list_sources() == ["A", "b"]
        assert "a" in registry
        assert len(registry) == 2
        registry.unregister("a")
        assert "A" not in registry
