"""
Locator Service - Entry point for step implementations.

One method per field type resolves a field to a key and a locator record;
locate() additionally matches it against a live document:

    service = LocatorService.from_settings()
    resolution = service.button("SearchPage", "PROCEED")
    matched = await service.locate(document, "button", "SearchPage", "PROCEED")
    await matched.element.click()

Field names that already are selectors ("xpath=...", "css=...",
"chain=...", "//...", "(//...)", "a >> b") bypass pattern resolution, and names of the form
"loc.<code>.<page>.<type>.<name>" refer to a static locator directly.
"""

import asyncio
import logging
import re
from typing import Callable, Dict, Mapping, Optional, Union

from locator_iq.config import get_settings
from locator_iq.config.settings import MatcherSettings, Settings
from locator_iq.core.cache import LocatorRecord, ResolutionCache
from locator_iq.core.diagnostics import LoggingDiagnosticsSink
from locator_iq.core.keys import FieldType, build_key, parse_key_path
from locator_iq.core.matcher import FallbackMatcher, MatchedElement
from locator_iq.core.resolver import PatternResolver, Resolution, ResolutionSource
from locator_iq.exceptions import ConfigurationError, LocatorTimeoutError
from locator_iq.interfaces.diagnostics import DiagnosticEvent, DiagnosticKind, IDiagnosticsSink
from locator_iq.interfaces.document import IDocumentQuery
from locator_iq.patterns.loader import load_patterns, load_static_locators
from locator_iq.patterns.table import PatternTable

logger = logging.getLogger(__name__)

_ENGINE_PREFIX = re.compile(r"^(xpath|css|chain)\s*=\s*")
_GROUPED_XPATH = re.compile(r"^\(+\s*/")
CHAIN_MARKER = ">>"
DIRECT_CODE = "direct"


def direct_selector(field_name: str) -> Optional[str]:
    """
    Return the selector if field_name already is one, else None.

    "chain=" is stripped; "xpath=" and "css=" are kept because the
    driver understands them. Bare XPath ("//a", "(//a)[2]") and
    ">>"-chained selectors pass through unchanged.
    """
    name = field_name.strip()
    match = _ENGINE_PREFIX.match(name)
    if match:
        engine, body = match.group(1), name[match.end():].strip()
        return body if engine == "chain" else f"{engine}={body}"
    if name.startswith("//") or _GROUPED_XPATH.match(name) or CHAIN_MARKER in name:
        return name
    return None


Handler = Callable[["LocatorService", str, str, Optional[str], Optional[str]], Resolution]

# Closed dispatch table: one handler per field type.
FIELD_HANDLERS: Dict[FieldType, Handler] = {
    FieldType.BUTTON: lambda s, page, name, value, code: s.button(page, name, pattern_code=code),
    FieldType.INPUT: lambda s, page, name, value, code: s.input(page, name, pattern_code=code),
    FieldType.SELECT: lambda s, page, name, value, code: s.select(page, name, value, pattern_code=code),
    FieldType.CHECKBOX: lambda s, page, name, value, code: s.checkbox(page, name, value, pattern_code=code),
    FieldType.RADIO: lambda s, page, name, value, code: s.radio(page, name, value, pattern_code=code),
    FieldType.TEXT: lambda s, page, name, value, code: s.text(page, name, pattern_code=code),
    FieldType.LINK: lambda s, page, name, value, code: s.link(page, name, pattern_code=code),
    FieldType.LABEL: lambda s, page, name, value, code: s.label(page, name, pattern_code=code),
    FieldType.HEADER: lambda s, page, name, value, code: s.header(page, name, pattern_code=code),
    FieldType.TAB: lambda s, page, name, value, code: s.tab(page, name, pattern_code=code),
    FieldType.TEXTAREA: lambda s, page, name, value, code: s.textarea(page, name, pattern_code=code),
}


class LocatorService:
    """
    Resolves and matches fields for step implementations.

    Attributes:
        resolver: Pattern resolver (owns the pattern table and cache)
        page_mapping: URL substring -> pattern code
        matcher_settings: Retry and timeout settings for locate()
    """

    def __init__(
        self,
        resolver: PatternResolver,
        diagnostics: Optional[IDiagnosticsSink] = None,
        *,
        page_mapping: Optional[Mapping[str, str]] = None,
        matcher_settings: Optional[MatcherSettings] = None,
        cache_path: Optional[str] = None,
    ):
        self.resolver = resolver
        self._diagnostics = diagnostics
        self.page_mapping = dict(page_mapping or {})
        self.matcher_settings = matcher_settings or MatcherSettings()
        self.cache_path = cache_path

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        *,
        patterns: Optional[PatternTable] = None,
        diagnostics: Optional[IDiagnosticsSink] = None,
    ) -> "LocatorService":
        """
        Build a service from settings, loading pattern, static and cache files.

        Args:
            settings: Settings to use (defaults to the global settings)
            patterns: Pattern table to use instead of settings.resolver.patterns_path
            diagnostics: Diagnostics sink (defaults to logging)
        """
        if settings is None:
            settings = get_settings()
        rs = settings.resolver

        if patterns is None:
            patterns = load_patterns(rs.patterns_path) if rs.patterns_path else PatternTable()

        cache = ResolutionCache()
        if rs.static_locators_path:
            cache.seed_static(load_static_locators(rs.static_locators_path))
        if rs.cache_path:
            cache.load_generated(rs.cache_path)

        sink = diagnostics if diagnostics is not None else LoggingDiagnosticsSink()
        resolver = PatternResolver(
            patterns,
            cache,
            sink,
            default_pattern_code=rs.default_pattern_code,
            key_prefix=rs.key_prefix,
            wrap_xpath_instance=rs.wrap_xpath_instance,
        )
        return cls(
            resolver,
            sink,
            page_mapping=rs.page_mapping,
            matcher_settings=settings.matcher,
            cache_path=rs.cache_path,
        )

    @property
    def cache(self) -> ResolutionCache:
        return self.resolver.cache

    # ------------------------------------------------------------------
    # Page object selection
    # ------------------------------------------------------------------

    def select_pattern_code(self, url: Optional[str] = None, override: Optional[str] = None) -> Optional[str]:
        """
        Pick the page object for a request.

        Order: explicit override, first page_mapping entry whose key occurs
        in url, then the resolver's default.
        """
        if override and override.strip():
            return override.strip()
        if url:
            for fragment, code in self.page_mapping.items():
                if fragment in url:
                    logger.debug(f"Page object {code!r} selected for {url} via {fragment!r}")
                    return code
        return self.resolver.default_pattern_code

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        field_type: Union[FieldType, str],
        page: str,
        field_name: str,
        field_value: Optional[str] = None,
        *,
        pattern_code: Optional[str] = None,
        url: Optional[str] = None,
    ) -> Resolution:
        """
        Resolve any field type through the dispatch table.

        Raises:
            UnsupportedFieldTypeError: If field_type is not supported
            ConfigurationError: If no page object can be determined, or a
                static reference names a missing locator
        """
        ftype = FieldType.parse(field_type)
        code = self.select_pattern_code(url, pattern_code)

        selector = direct_selector(field_name)
        if selector is not None:
            return self._direct(ftype, page, field_name, selector, code)

        if field_name.strip().startswith(self.resolver.key_prefix + "."):
            return self._static_reference(ftype, page, field_name)

        return FIELD_HANDLERS[ftype](self, page, field_name, field_value, code)

    def button(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.BUTTON, page, name, pattern_code=pattern_code)

    def input(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.INPUT, page, name, pattern_code=pattern_code)

    def select(
        self, page: str, name: str, value: Optional[str] = None, *, pattern_code: Optional[str] = None
    ) -> Resolution:
        return self.resolver.resolve(FieldType.SELECT, page, name, value, pattern_code=pattern_code)

    def checkbox(
        self, page: str, name: str, value: Optional[str] = None, *, pattern_code: Optional[str] = None
    ) -> Resolution:
        return self.resolver.resolve(FieldType.CHECKBOX, page, name, value, pattern_code=pattern_code)

    def radio(
        self, page: str, name: str, value: Optional[str] = None, *, pattern_code: Optional[str] = None
    ) -> Resolution:
        """Radio groups are named by the group and picked by value."""
        return self.resolver.resolve(FieldType.RADIO, page, name, value, pattern_code=pattern_code)

    def text(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.TEXT, page, name, pattern_code=pattern_code)

    def link(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.LINK, page, name, pattern_code=pattern_code)

    def label(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.LABEL, page, name, pattern_code=pattern_code)

    def header(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.HEADER, page, name, pattern_code=pattern_code)

    def tab(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.TAB, page, name, pattern_code=pattern_code)

    def textarea(self, page: str, name: str, *, pattern_code: Optional[str] = None) -> Resolution:
        return self.resolver.resolve(FieldType.TEXTAREA, page, name, pattern_code=pattern_code)

    def _direct(
        self,
        ftype: FieldType,
        page: str,
        field_name: str,
        selector: str,
        code: Optional[str],
    ) -> Resolution:
        key = build_key(
            page, ftype, field_name,
            pattern_code=code or DIRECT_CODE,
            prefix=self.resolver.key_prefix,
        )
        logger.debug(f"Using {field_name!r} as a direct selector")
        return Resolution(
            key=key,
            record=LocatorRecord((selector,), description=f"{ftype.value} selector {selector}"),
            source=ResolutionSource.DIRECT,
            pattern_code=code or "",
            page=page,
            field_type=ftype.value,
            field_name=field_name,
        )

    def _static_reference(self, ftype: FieldType, page: str, field_name: str) -> Resolution:
        key = parse_key_path(field_name, prefix=self.resolver.key_prefix)
        record = self.cache.lookup(key)
        if record is None:
            raise ConfigurationError(
                f"Locator {field_name!r} not found",
                {"key": str(key), "page": page, "field_type": ftype.value},
            )
        source = ResolutionSource.CACHED if key.is_generated else ResolutionSource.STATIC
        return Resolution(
            key=key,
            record=record,
            source=source,
            page=page,
            field_type=ftype.value,
            field_name=field_name,
        )

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def matcher_for(self, document: IDocumentQuery) -> FallbackMatcher:
        return FallbackMatcher(
            document,
            self._diagnostics,
            retry_timeout_ms=self.matcher_settings.retry_timeout_ms,
            retry_interval_ms=self.matcher_settings.retry_interval_ms,
        )

    async def locate(
        self,
        document: IDocumentQuery,
        field_type: Union[FieldType, str],
        page: str,
        field_name: str,
        field_value: Optional[str] = None,
        *,
        pattern_code: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> MatchedElement:
        """
        Resolve a field and match it against document.

        Raises:
            NoElementMatchedError: If no candidate matches
            LocatorTimeoutError: If the cycle exceeds its timeout
        """
        resolution = self.resolve(
            field_type, page, field_name, field_value,
            pattern_code=pattern_code, url=document.url,
        )
        limit_ms = timeout_ms or self.matcher_settings.resolution_timeout_ms
        try:
            return await asyncio.wait_for(
                self.matcher_for(document).match(resolution.record, resolution=resolution),
                timeout=limit_ms / 1000,
            )
        except asyncio.TimeoutError:
            error = LocatorTimeoutError(
                f"Locating {resolution.record.description or field_name!r} timed out after {limit_ms}ms",
                timeout_ms=limit_ms,
                key=str(resolution.key),
                page=resolution.page,
                field_type=resolution.field_type,
                field_name=resolution.field_name,
                candidates=resolution.candidates,
            )
            if self._diagnostics is not None:
                self._diagnostics.emit(
                    DiagnosticEvent(
                        kind=DiagnosticKind.LOCATOR_TIMEOUT,
                        message=error.message,
                        page=error.page,
                        field_type=error.field_type,
                        field_name=error.field_name,
                        key=error.key,
                        pattern_code=resolution.pattern_code or None,
                        candidates=list(error.candidates),
                    )
                )
            raise error from None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_cache(self) -> int:
        """Persist generated records to cache_path, if configured."""
        if not self.cache_path:
            return 0
        return self.cache.save_generated(self.cache_path)
