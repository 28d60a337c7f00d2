"""
Exceptions module - Custom exception hierarchy.

This module defines all custom exceptions used throughout Locator IQ,
providing clear error types for configuration, resolution and matching
failures.
"""

from locator_iq.exceptions.base import (
    LocatorIQError,
    ConfigurationError,
)
from locator_iq.exceptions.resolution import (
    ResolutionError,
    UnsupportedFieldTypeError,
    PatternNotConfiguredError,
    InvalidCachedRecordError,
    NoElementMatchedError,
    SelectorSyntaxError,
    LocatorTimeoutError,
)

__all__ = [
    # Base exceptions
    "LocatorIQError",
    "ConfigurationError",
    # Resolution exceptions
    "ResolutionError",
    "UnsupportedFieldTypeError",
    "PatternNotConfiguredError",
    "InvalidCachedRecordError",
    "NoElementMatchedError",
    "SelectorSyntaxError",
    "LocatorTimeoutError",
]
