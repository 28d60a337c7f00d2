"""
Document Query Interface - What the fallback matcher needs from a live page.

Locator IQ never evaluates selectors itself. A driver adapter (Playwright,
or a fake document in tests) answers two questions per selector: how many
elements match, and what is the first one.

Example:
    >>> from locator_iq.browsers import PlaywrightDocument
    >>> document = PlaywrightDocument(page)
    >>> await document.match_count("xpath=//button[text()='Go']")
    1
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class IDocumentQuery(ABC):
    """
    Abstract interface for selector evaluation against a live document.

    Implementations must raise SelectorSyntaxError when the driver rejects
    a selector as malformed, so the matcher can move on to the next
    candidate. Any other driver error propagates to the caller.
    """

    @property
    def url(self) -> Optional[str]:
        """Current document URL, if the driver knows it."""
        return None

    @abstractmethod
    async def match_count(self, selector: str) -> int:
        """
        Count the elements currently matching selector.

        Args:
            selector: Opaque selector string (XPath, CSS, chained, ...)

        Returns:
            Number of matching elements (0 if none)

        Raises:
            SelectorSyntaxError: If the selector is malformed
        """
        ...

    @abstractmethod
    async def first_match(self, selector: str) -> Any:
        """
        Get a handle to the first matching element, in document order.

        Args:
            selector: Selector already known to match

        Returns:
            Driver-specific element handle
        """
        ...
