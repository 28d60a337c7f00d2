"""
Pytest configuration and fixtures.
"""

from typing import Any, Dict, List, Optional, Sequence

import pytest

from locator_iq.exceptions import SelectorSyntaxError
from locator_iq.interfaces.document import IDocumentQuery


class FakeDocument(IDocumentQuery):
    """
    In-memory document.

    Maps selectors to element lists and records every selector that was
    evaluated, in order.
    """

    def __init__(
        self,
        elements: Optional[Dict[str, List[Any]]] = None,
        invalid: Sequence[str] = (),
        url: Optional[str] = "https://example.com/search",
    ):
        self.elements = elements or {}
        self.invalid = set(invalid)
        self.evaluated: List[str] = []
        self._url = url

    @property
    def url(self) -> Optional[str]:
        return self._url

    async def match_count(self, selector: str) -> int:
        self.evaluated.append(selector)
        if selector in self.invalid:
            raise SelectorSyntaxError(f"Invalid selector: {selector}", selector)
        return len(self.elements.get(selector, []))

    async def first_match(self, selector: str) -> Any:
        return self.elements[selector][0]


SEARCH_PATTERNS = {
    "searchPage": {
        "fields": {
            "button": [
                "xpath=//button[@id='${fieldName}']",
                "xpath=//button[text()='${fieldName}']",
                "xpath=//input[@type='submit' and @value='${fieldName}']",
                "xpath=//*[@role='button' and text()='${fieldName}']",
            ],
            "input": [
                "//label[text()='${fieldName}']/following::input[${fieldInstance}]",
                "//input[@placeholder='${fieldName}']",
            ],
            "radio": ["//input[@type='radio' and @name='${fieldName}' and @value='${fieldValue}']"],
            "link": ["//a[text()='${fieldName}']"],
            "text": ["//*[normalize-space()='${fieldName}' and '${pageName}'!='']"],
        },
        "sections": {
            "Login Form": ["//form[@aria-label='${section.name}']"],
            "form": ["//form[@id='${section.value}']"],
        },
        "locations": {
            "Main": ["//main"],
        },
    },
    "checkoutPage": {
        "fields": {
            "button": ["css=button.checkout-${fieldName.toLowerCase}"],
        },
    },
}


@pytest.fixture
def fake_document():
    """Provide an empty fake document."""
    return FakeDocument()


@pytest.fixture
def pattern_table():
    """Provide a pattern table with two page objects."""
    from locator_iq.patterns import PatternTable

    return PatternTable.from_dict(SEARCH_PATTERNS)


@pytest.fixture
def cache():
    """Provide an empty resolution cache."""
    from locator_iq.core import ResolutionCache

    return ResolutionCache()


@pytest.fixture
def diagnostics():
    """Provide a collecting diagnostics sink."""
    from locator_iq.core.diagnostics import CollectingDiagnosticsSink

    return CollectingDiagnosticsSink()


@pytest.fixture
def resolver(pattern_table, cache, diagnostics):
    """Provide a resolver defaulting to the searchPage page object."""
    from locator_iq.core import PatternResolver

    return PatternResolver(pattern_table, cache, diagnostics, default_pattern_code="searchPage")


@pytest.fixture
def service(resolver, diagnostics):
    """Provide a locator service without retries."""
    from locator_iq.config import MatcherSettings
    from locator_iq.core import LocatorService

    return LocatorService(
        resolver,
        diagnostics,
        page_mapping={"/checkout": "checkoutPage"},
        matcher_settings=MatcherSettings(retry_timeout_ms=0, retry_interval_ms=0),
    )
