"""
Fallback Matcher - Try candidate selectors in order against a live document.

The first candidate that matches at least one element wins; later
candidates are never evaluated. When every candidate misses, the error
lists all of them in order together with the field context.

Optionally the matcher repeats full passes until a retry timeout
elapses, for elements that appear after the page settles.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from locator_iq.core.cache import LocatorRecord
from locator_iq.core.resolver import Resolution
from locator_iq.exceptions import NoElementMatchedError, SelectorSyntaxError
from locator_iq.interfaces.diagnostics import DiagnosticEvent, DiagnosticKind, IDiagnosticsSink
from locator_iq.interfaces.document import IDocumentQuery

logger = logging.getLogger(__name__)


@dataclass
class MatchedElement:
    """
    A successful match.

    Attributes:
        element: Driver element handle (first match of the winning selector)
        selector: The winning candidate
        index: Position of the winning candidate (0-based)
        attempts: Number of passes made before the match
    """
    element: Any
    selector: str
    index: int
    attempts: int = 1


class FallbackMatcher:
    """
    Ordered candidate matching against an IDocumentQuery.

    The matcher only reads records; it never touches the cache, so a
    caller may cancel it at any point without side effects.

    Example:
        >>> matcher = FallbackMatcher(PlaywrightDocument(page))
        >>> element = await matcher.resolve_element(resolution.record)
    """

    def __init__(
        self,
        document: IDocumentQuery,
        diagnostics: Optional[IDiagnosticsSink] = None,
        *,
        retry_timeout_ms: int = 0,
        retry_interval_ms: int = 0,
    ):
        self._document = document
        self._diagnostics = diagnostics
        self.retry_timeout_ms = retry_timeout_ms
        self.retry_interval_ms = retry_interval_ms

    @property
    def document(self) -> IDocumentQuery:
        return self._document

    async def resolve_element(
        self,
        record: LocatorRecord,
        *,
        resolution: Optional[Resolution] = None,
    ) -> Any:
        """Return the element handle of the first matching candidate."""
        matched = await self.match(record, resolution=resolution)
        return matched.element

    async def match(
        self,
        record: LocatorRecord,
        *,
        resolution: Optional[Resolution] = None,
    ) -> MatchedElement:
        """
        Find the first candidate of record that matches the document.

        Args:
            record: Candidates to try, in priority order
            resolution: Request context attached to failures

        Returns:
            MatchedElement for the winning candidate

        Raises:
            NoElementMatchedError: If no candidate matches (immediately,
                without driver calls, when there are no candidates)
        """
        attempts = 0
        if record.candidates:
            deadline = time.monotonic() + self.retry_timeout_ms / 1000
            while True:
                attempts += 1
                matched = await self._single_pass(record, attempts)
                if matched is not None:
                    return matched
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                pause = min(self.retry_interval_ms / 1000, remaining)
                logger.debug(f"No candidate matched (pass {attempts}); retrying in {pause:.1f}s")
                await asyncio.sleep(pause)

        raise self._no_match(record, resolution, attempts)

    async def _single_pass(self, record: LocatorRecord, attempt: int) -> Optional[MatchedElement]:
        total = len(record.candidates)
        for index, selector in enumerate(record.candidates):
            logger.debug(f"Trying candidate {index + 1}/{total}: {selector}")
            try:
                count = await self._document.match_count(selector)
                if count < 1:
                    continue
                element = await self._document.first_match(selector)
            except SelectorSyntaxError as e:
                logger.debug(f"Candidate {index + 1} rejected by driver: {e.message}")
                continue
            logger.info(f"Matched {record.description or 'field'} with candidate {index + 1}: {selector}")
            return MatchedElement(element=element, selector=selector, index=index, attempts=attempt)
        return None

    def _no_match(
        self,
        record: LocatorRecord,
        resolution: Optional[Resolution],
        attempts: int,
    ) -> NoElementMatchedError:
        error = NoElementMatchedError(
            description=record.description,
            candidates=record.candidates,
            key=str(resolution.key) if resolution else None,
            page=resolution.page if resolution else None,
            field_type=resolution.field_type if resolution else None,
            field_name=resolution.field_name if resolution else None,
            attempts=attempts,
        )
        logger.warning(error.message)
        if self._diagnostics is not None:
            self._diagnostics.emit(
                DiagnosticEvent(
                    kind=DiagnosticKind.NO_ELEMENT_MATCHED,
                    message=error.message,
                    page=error.page,
                    field_type=error.field_type,
                    field_name=error.field_name,
                    key=error.key,
                    pattern_code=resolution.pattern_code if resolution else None,
                    candidates=list(error.candidates),
                )
            )
        return error
