"""
Browsers module - Document driver implementations.
"""

from locator_iq.browsers.playwright_document import PlaywrightDocument

__all__ = [
    "PlaywrightDocument",
]
