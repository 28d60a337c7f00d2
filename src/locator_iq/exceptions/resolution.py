"""
Resolution and matching exceptions.
"""

from typing import Optional, Sequence

from locator_iq.exceptions.base import LocatorIQError


class ResolutionError(LocatorIQError):
    """Base exception for locator resolution errors."""
    pass


class UnsupportedFieldTypeError(ResolutionError):
    """
    Field type is not one of the supported identifiers.

    Raised by the key builder before any cache or pattern lookup happens.
    This is a caller error and is never retried.
    """

    def __init__(self, field_type: str, supported: Sequence[str] = ()):
        super().__init__(
            f"Unsupported field type: {field_type!r}",
            {"field_type": field_type, "supported": list(supported)},
        )
        self.field_type = field_type
        self.supported = list(supported)


class PatternNotConfiguredError(ResolutionError):
    """
    No pattern templates are configured for a field type.

    The resolver never raises this. It is reported through the
    diagnostics sink and resolution continues with an empty record.
    """

    def __init__(self, pattern_code: str, field_type: str):
        super().__init__(
            f"No pattern configured for type {field_type!r} in page object {pattern_code!r}",
            {"pattern_code": pattern_code, "field_type": field_type},
        )
        self.pattern_code = pattern_code
        self.field_type = field_type


class InvalidCachedRecordError(ResolutionError):
    """
    A stored locator record could not be parsed.

    The cache treats such an entry as a miss so that it is regenerated.
    """

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message, {"key": key})
        self.key = key


class NoElementMatchedError(ResolutionError):
    """
    None of the candidate selectors matched the live document.

    Carries the full resolution context so callers never have to
    re-derive which selectors were tried.

    Attributes:
        candidates: Every attempted selector, in the order it was tried
        description: Description of the field being located
        key: Resolved cache key
        page: Page name from the request
        field_type: Field type from the request
        field_name: Field name from the request
        attempts: Number of full passes made over the candidates
    """

    def __init__(
        self,
        description: str,
        candidates: Sequence[str],
        key: Optional[str] = None,
        page: Optional[str] = None,
        field_type: Optional[str] = None,
        field_name: Optional[str] = None,
        attempts: int = 1,
    ):
        candidates = list(candidates)
        if candidates:
            message = f"No element matched {description!r} after trying {len(candidates)} candidate(s)"
        else:
            message = f"No element matched {description!r}: no candidates to try"
        super().__init__(
            message,
            {
                "key": key,
                "page": page,
                "field_type": field_type,
                "field_name": field_name,
                "candidates": candidates,
                "attempts": attempts,
            },
        )
        self.description = description
        self.candidates = candidates
        self.key = key
        self.page = page
        self.field_type = field_type
        self.field_name = field_name
        self.attempts = attempts


class SelectorSyntaxError(ResolutionError):
    """
    The document driver rejected a selector as malformed.

    The fallback matcher treats this as "no match" for that candidate.
    """

    def __init__(self, message: str, selector: str):
        super().__init__(message, {"selector": selector})
        self.selector = selector


class LocatorTimeoutError(ResolutionError):
    """
    A resolve-and-match cycle exceeded its timeout.

    Carries the same request context as NoElementMatchedError, with the
    candidates that were queued for matching when time ran out.
    """

    def __init__(
        self,
        message: str,
        timeout_ms: int,
        key: Optional[str] = None,
        page: Optional[str] = None,
        field_type: Optional[str] = None,
        field_name: Optional[str] = None,
        candidates: Sequence[str] = (),
    ):
        candidates = list(candidates)
        super().__init__(
            message,
            {
                "timeout_ms": timeout_ms,
                "key": key,
                "page": page,
                "field_type": field_type,
                "field_name": field_name,
                "candidates": candidates,
            },
        )
        self.timeout_ms = timeout_ms
        self.key = key
        self.page = page
        self.field_type = field_type
        self.field_name = field_name
        self.candidates = candidates
