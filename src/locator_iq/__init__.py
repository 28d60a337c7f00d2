"""
Locator IQ - Pattern-based element locators for UI test automation.

Tests name fields in business terms ("the PROCEED button on the
SearchPage"); Locator IQ turns that into ordered XPath/CSS candidates from
page object pattern files, caches the result, and tries the candidates
against the live page until one matches.

Example:
    >>> from locator_iq import LocatorService
    >>> service = LocatorService.from_settings()
    >>> resolution = service.button("SearchPage", "PROCEED")
    >>> matched = await service.locate(document, "button", "SearchPage", "PROCEED")
"""

__version__ = "0.1.0"

# Public API exports
from locator_iq.core.service import LocatorService
from locator_iq.core.resolver import PatternResolver, Resolution
from locator_iq.core.matcher import FallbackMatcher, MatchedElement
from locator_iq.core.cache import LocatorRecord, ResolutionCache
from locator_iq.core.keys import FieldType, build_key
from locator_iq.config.settings import Settings

__all__ = [
    "LocatorService",
    "PatternResolver",
    "Resolution",
    "FallbackMatcher",
    "MatchedElement",
    "LocatorRecord",
    "ResolutionCache",
    "FieldType",
    "build_key",
    "Settings",
    "__version__",
]
