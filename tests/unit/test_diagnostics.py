"""
Tests for diagnostics events and sinks.
"""

import logging

from locator_iq.core.diagnostics import (
    CollectingDiagnosticsSink,
    FanOutDiagnosticsSink,
    LoggingDiagnosticsSink,
)
from locator_iq.interfaces.diagnostics import DiagnosticEvent, DiagnosticKind


def make_event(kind=DiagnosticKind.NO_ELEMENT_MATCHED, candidates=("#a", "#b")):
    return DiagnosticEvent(
        kind=kind,
        message="No element matched 'Go'",
        page="Home",
        field_type="button",
        field_name="Go",
        key="loc.auto.site.home.button.go",
        pattern_code="site",
        candidates=list(candidates),
    )


class TestDiagnosticEvent:
    """Test DiagnosticEvent."""

    def test_to_dict(self):
        data = make_event().to_dict()

        assert data["kind"] == "no_element_matched"
        assert data["candidates"] == ["#a", "#b"]
        assert data["key"] == "loc.auto.site.home.button.go"
        assert "timestamp" in data


class TestLoggingDiagnosticsSink:
    """Test the logging sink."""

    def test_no_match_logged_as_error(self, caplog):
        """Test no-match events and each candidate are logged at ERROR."""
        log = logging.getLogger("tests.diagnostics")
        with caplog.at_level(logging.DEBUG, logger="tests.diagnostics"):
            LoggingDiagnosticsSink(log).emit(make_event())

        messages = [r.getMessage() for r in caplog.records]
        assert all(r.levelno == logging.ERROR for r in caplog.records)
        assert "key=loc.auto.site.home.button.go" in messages[0]
        assert messages[1:] == ["  candidate 1: #a", "  candidate 2: #b"]

    def test_missing_pattern_logged_as_warning(self, caplog):
        log = logging.getLogger("tests.diagnostics")
        with caplog.at_level(logging.DEBUG, logger="tests.diagnostics"):
            LoggingDiagnosticsSink(log).emit(make_event(DiagnosticKind.PATTERN_NOT_CONFIGURED, ()))

        assert [r.levelno for r in caplog.records] == [logging.WARNING]


class TestCollectingSinks:
    """Test collecting and fan-out sinks."""

    def test_collect_and_filter(self):
        sink = CollectingDiagnosticsSink()
        sink.emit(make_event())
        sink.emit(make_event(DiagnosticKind.PATTERN_NOT_CONFIGURED))

        assert len(sink.events) == 2
        assert len(sink.of_kind(DiagnosticKind.PATTERN_NOT_CONFIGURED)) == 1

        sink.clear()
        assert sink.events == []

    def test_fan_out(self):
        first, second = CollectingDiagnosticsSink(), CollectingDiagnosticsSink()

        FanOutDiagnosticsSink([first, second]).emit(make_event())

        assert len(first.events) == 1
        assert first.events == second.events
