"""
Playwright Document - Implementation of IDocumentQuery using Playwright.

This module adapts a Playwright async Page (or Frame) to the interface the
fallback matcher uses.
"""

import logging
from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError

from locator_iq.exceptions import SelectorSyntaxError
from locator_iq.interfaces.document import IDocumentQuery

logger = logging.getLogger(__name__)

# Fragments of Playwright error messages for selectors it cannot parse
_SYNTAX_MARKERS = (
    "failed to parse selector",
    "unexpected token",
    "is not a valid selector",
    "not a valid xpath",
    "unknown engine",
    "syntaxerror",
)


def is_selector_syntax_error(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _SYNTAX_MARKERS)


class PlaywrightDocument(IDocumentQuery):
    """
    Playwright implementation of IDocumentQuery.

    Wraps a Playwright Page or Frame; selectors are handed to
    page.locator() unchanged, so "xpath=", "css=" and ">>" chains work
    as Playwright defines them.
    """

    def __init__(self, page: Any):
        """
        Initialize the document wrapper.

        Args:
            page: Playwright Page or Frame object
        """
        self._page = page

    @property
    def url(self) -> Optional[str]:
        """Get current URL."""
        return self._page.url

    @property
    def page(self) -> Any:
        """Access the underlying Playwright page."""
        return self._page

    async def match_count(self, selector: str) -> int:
        """Count matching elements."""
        try:
            return await self._page.locator(selector).count()
        except PlaywrightError as e:
            if is_selector_syntax_error(e):
                raise SelectorSyntaxError(f"Invalid selector: {e.message}", selector) from e
            raise

    async def first_match(self, selector: str) -> Any:
        """Get a Locator for the first matching element."""
        return self._page.locator(selector).first
