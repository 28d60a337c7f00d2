"""
Core Module - Locator resolution and fallback matching.

This is the heart of Locator IQ, handling:
- Cache key derivation
- Placeholder parsing and substitution
- The resolution cache with static precedence
- Pattern resolution and ordered fallback matching
"""

from locator_iq.core.keys import FieldType, CacheKey, KeyNamespace, build_key, normalize_segment
from locator_iq.core.placeholders import PlaceholderContext, parse_field_descriptor, substitute
from locator_iq.core.cache import LocatorRecord, ResolutionCache
from locator_iq.core.diagnostics import LoggingDiagnosticsSink, CollectingDiagnosticsSink
from locator_iq.core.resolver import PatternResolver, Resolution, ResolutionSource, ResolutionState
from locator_iq.core.matcher import FallbackMatcher, MatchedElement
from locator_iq.core.service import LocatorService

__all__ = [
    # Keys
    "FieldType",
    "CacheKey",
    "KeyNamespace",
    "build_key",
    "normalize_segment",
    # Placeholders
    "PlaceholderContext",
    "parse_field_descriptor",
    "substitute",
    # Cache
    "LocatorRecord",
    "ResolutionCache",
    # Diagnostics
    "LoggingDiagnosticsSink",
    "CollectingDiagnosticsSink",
    # Resolution
    "PatternResolver",
    "Resolution",
    "ResolutionSource",
    "ResolutionState",
    # Matching
    "FallbackMatcher",
    "MatchedElement",
    "LocatorService",
]
