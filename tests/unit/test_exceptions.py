"""
Tests for the exception hierarchy.
"""

import pytest

from locator_iq.exceptions import (
    ConfigurationError,
    InvalidCachedRecordError,
    LocatorIQError,
    LocatorTimeoutError,
    NoElementMatchedError,
    PatternNotConfiguredError,
    ResolutionError,
    SelectorSyntaxError,
    UnsupportedFieldTypeError,
)


class TestLocatorIQError:
    """Test the base exception."""

    def test_message_only(self):
        error = LocatorIQError("Something failed")
        assert str(error) == "Something failed"
        assert error.details == {}

    def test_with_details(self):
        error = LocatorIQError("Something failed", {"path": "x.yaml"})
        assert str(error) == "Something failed - Details: {'path': 'x.yaml'}"


class TestHierarchy:
    """Test every error can be caught as LocatorIQError."""

    @pytest.mark.parametrize("error", [
        ConfigurationError("bad config"),
        UnsupportedFieldTypeError("slider"),
        PatternNotConfiguredError("searchPage", "tab"),
        InvalidCachedRecordError("bad record", "loc.x"),
        NoElementMatchedError("button 'Go'", ["#go"]),
        SelectorSyntaxError("bad selector", "//["),
        LocatorTimeoutError("too slow", 1000),
    ])
    def test_base_class(self, error):
        assert isinstance(error, LocatorIQError)

    def test_resolution_errors(self):
        assert issubclass(NoElementMatchedError, ResolutionError)
        assert not issubclass(ConfigurationError, ResolutionError)


class TestNoElementMatchedError:
    """Test the no-match error."""

    def test_message_and_context(self):
        error = NoElementMatchedError(
            "button 'PROCEED'",
            ("#a", "#b"),
            key="loc.auto.s.searchPage.button.proceed",
            page="SearchPage",
            field_type="button",
            field_name="PROCEED",
            attempts=3,
        )

        assert error.message == "No element matched \"button 'PROCEED'\" after trying 2 candidate(s)"
        assert error.candidates == ["#a", "#b"]
        assert error.details["candidates"] == ["#a", "#b"]
        assert error.details["attempts"] == 3
        assert error.page == "SearchPage"

    def test_no_candidates(self):
        error = NoElementMatchedError("tab 'Results'", [])
        assert error.message.endswith("no candidates to try")


class TestUnsupportedFieldTypeError:
    """Test the unsupported type error."""

    def test_details(self):
        error = UnsupportedFieldTypeError("slider", ["button", "input"])

        assert error.field_type == "slider"
        assert error.supported == ["button", "input"]
        assert "'slider'" in error.message


def test_pattern_not_configured_message():
    error = PatternNotConfiguredError("searchPage", "tab")
    assert error.message == "No pattern configured for type 'tab' in page object 'searchPage'"
