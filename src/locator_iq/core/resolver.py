"""
Pattern Resolver - Turn (page, field type, field name) into a locator record.

Resolution walks a small state machine:

    CHECK_STATIC -> CHECK_CACHE -> GENERATE -> STORE -> RESOLVED

A static (human-authored) record always wins. A generated record is
written once and then served from the cache for the rest of the run.
Missing pattern templates never abort a resolution: a diagnostic is
emitted and an empty record is returned, so the failure surfaces at
matching time with full context.
"""

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union

from locator_iq.core.cache import LocatorRecord, ResolutionCache
from locator_iq.core.keys import FIELD_TRAITS, CacheKey, FieldType, build_key
from locator_iq.core.placeholders import (
    FieldDescriptor,
    PlaceholderContext,
    parse_field_descriptor,
    references_token,
    substitute,
)
from locator_iq.exceptions import ConfigurationError, PatternNotConfiguredError
from locator_iq.interfaces.diagnostics import DiagnosticEvent, DiagnosticKind, IDiagnosticsSink
from locator_iq.patterns.table import PatternTable

logger = logging.getLogger(__name__)

CHAIN_SEPARATOR = " >> "
XPATH_PREFIX = "xpath="


class ResolutionState(Enum):
    """States of one resolution."""
    CHECK_STATIC = "check_static"
    CHECK_CACHE = "check_cache"
    GENERATE = "generate"
    STORE = "store"
    RESOLVED = "resolved"


class ResolutionSource(Enum):
    """Where the returned record came from."""
    STATIC = "static"
    CACHED = "cached"
    GENERATED = "generated"
    DIRECT = "direct"


@dataclass
class Resolution:
    """
    Result of a resolution request.

    The key, not the record, is what composite actions pass forward so
    later lookups hit the same cache entry.
    """
    key: CacheKey
    record: LocatorRecord
    source: ResolutionSource
    pattern_code: str = ""
    page: str = ""
    field_type: str = ""
    field_name: str = ""
    states: List[ResolutionState] = field(default_factory=list)

    @property
    def candidates(self) -> Sequence[str]:
        return self.record.candidates


def is_xpath(selector: str) -> bool:
    body = selector.strip()
    if body.startswith(XPATH_PREFIX):
        return True
    return body.startswith("//") or body.startswith("(")


def wrap_instance(selector: str, instance: str) -> str:
    """
    Select the n-th match of an XPath: "//button" -> "(//button)[2]".

    Selectors that are not XPath, or already start with "(", are returned
    unchanged.
    """
    body = selector.strip()
    prefix = ""
    if body.startswith(XPATH_PREFIX):
        prefix, body = XPATH_PREFIX, body[len(XPATH_PREFIX):].strip()
    if not body.startswith("//"):
        return selector
    return f"{prefix}({body})[{instance}]"


class PatternResolver:
    """
    Resolves field requests against a pattern table, memoizing in a cache.

    Every call builds its own PlaceholderContext, so independent callers
    (e.g. parallel test contexts sharing one cache) never see each other's
    values.

    Example:
        >>> resolver = PatternResolver(table, ResolutionCache(), default_pattern_code="search")
        >>> resolution = resolver.resolve("button", "SearchPage", "PROCEED")
        >>> str(resolution.key)
        'loc.auto.search.searchPage.button.proceed'
    """

    def __init__(
        self,
        patterns: PatternTable,
        cache: ResolutionCache,
        diagnostics: Optional[IDiagnosticsSink] = None,
        *,
        default_pattern_code: Optional[str] = None,
        key_prefix: str = "loc",
        wrap_xpath_instance: bool = True,
    ):
        self._patterns = patterns
        self._cache = cache
        self._diagnostics = diagnostics
        self.default_pattern_code = default_pattern_code
        self.key_prefix = key_prefix
        self.wrap_xpath_instance = wrap_xpath_instance

    @property
    def patterns(self) -> PatternTable:
        return self._patterns

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def resolve(
        self,
        field_type: Union[FieldType, str],
        page: str,
        field_name: str,
        field_value: Optional[str] = None,
        *,
        pattern_code: Optional[str] = None,
    ) -> Resolution:
        """
        Resolve a field to a locator record.

        Args:
            field_type: Field type identifier
            page: Page name
            field_name: Field name, optionally "{{Location}} {Section} Name[n]"
            field_value: Value for value-bearing field types
            pattern_code: Page object to use (defaults to default_pattern_code)

        Returns:
            Resolution holding the key and the (possibly empty) record

        Raises:
            UnsupportedFieldTypeError: If field_type is not supported
            ConfigurationError: If no pattern code is given or configured
        """
        ftype = FieldType.parse(field_type)
        code = (pattern_code or self.default_pattern_code or "").strip()
        if not code:
            raise ConfigurationError(
                "No pattern code given and no default page object configured",
                {"page": page, "field_type": ftype.value, "field_name": field_name},
            )

        key = build_key(
            page, ftype, field_name,
            pattern_code=code, prefix=self.key_prefix, field_value=field_value,
        )
        states = [ResolutionState.CHECK_STATIC]

        def _done(k: CacheKey, record: LocatorRecord, source: ResolutionSource) -> Resolution:
            states.append(ResolutionState.RESOLVED)
            logger.debug(f"Resolved {k} from {source.value} ({len(record.candidates)} candidate(s))")
            return Resolution(
                key=k,
                record=record,
                source=source,
                pattern_code=code,
                page=page,
                field_type=ftype.value,
                field_name=field_name,
                states=states,
            )

        record = self._cache.lookup(key)
        if record is not None:
            return _done(key, record, ResolutionSource.STATIC)

        states.append(ResolutionState.CHECK_CACHE)
        key = key.generated()
        record = self._cache.lookup(key)
        if record is not None:
            return _done(key, record, ResolutionSource.CACHED)

        states.append(ResolutionState.GENERATE)
        record = self._generate(code, ftype, page, field_name, field_value, key)

        states.append(ResolutionState.STORE)
        record = self._cache.store_generated(key, record)
        return _done(key, record, ResolutionSource.GENERATED)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _generate(
        self,
        code: str,
        ftype: FieldType,
        page: str,
        field_name: str,
        field_value: Optional[str],
        key: CacheKey,
    ) -> LocatorRecord:
        context = PlaceholderContext()
        context.reset()
        descriptor = parse_field_descriptor(field_name)
        value = field_value if FIELD_TRAITS[ftype].value_bearing else None
        context.populate(descriptor, page, value)

        description = f"{ftype.value} '{field_name}' on {page} ({code})"
        templates = [t for t in self._patterns.templates(code, ftype) if t.strip()]
        if not templates:
            self._report_missing_pattern(code, ftype, page, field_name, key)
            return LocatorRecord((), description)

        fields = [self._expand(t, context, descriptor) for t in templates]
        prefixes = self._scope_prefixes(code, descriptor, context)

        candidates: List[str] = []
        for field_selector, prefix in itertools.product(fields, prefixes):
            candidate = f"{prefix}{CHAIN_SEPARATOR}{field_selector}" if prefix else field_selector
            if candidate not in candidates:
                candidates.append(candidate)

        logger.debug(f"Generated {len(candidates)} candidate(s) for {key}")
        return LocatorRecord(tuple(candidates), description)

    def _expand(self, template: str, context: PlaceholderContext, descriptor: FieldDescriptor) -> str:
        selector = substitute(template, context).strip()
        if (
            self.wrap_xpath_instance
            and descriptor.explicit_instance
            and not descriptor.is_scoped
            and not references_token(template, "fieldInstance")
            and is_xpath(selector)
        ):
            selector = wrap_instance(selector, descriptor.instance)
        return selector

    def _scope_prefixes(
        self,
        code: str,
        descriptor: FieldDescriptor,
        context: PlaceholderContext,
    ) -> List[str]:
        """Chained location/section prefixes, or [""] for an unscoped field."""
        locations = self._scope_templates(code, "location", descriptor.location_name, context)
        sections = self._scope_templates(code, "section", descriptor.section_name, context)
        return [
            CHAIN_SEPARATOR.join(part for part in (loc, sec) if part)
            for loc, sec in itertools.product(locations, sections)
        ]

    def _scope_templates(
        self,
        code: str,
        kind: str,
        name: str,
        context: PlaceholderContext,
    ) -> List[str]:
        if not name:
            return [""]
        if kind == "location":
            templates = self._patterns.location_templates(code, name)
        else:
            templates = self._patterns.section_templates(code, name)
        resolved = [substitute(t, context).strip() for t in templates if t.strip()]
        if not resolved:
            logger.warning(f"No {kind} named {name!r} in page object {code!r}; ignoring scope")
            return [""]
        return resolved

    def _report_missing_pattern(
        self,
        code: str,
        ftype: FieldType,
        page: str,
        field_name: str,
        key: CacheKey,
    ) -> None:
        error = PatternNotConfiguredError(code, ftype.value)
        logger.warning(error.message)
        if self._diagnostics is None:
            return
        self._diagnostics.emit(
            DiagnosticEvent(
                kind=DiagnosticKind.PATTERN_NOT_CONFIGURED,
                message=error.message,
                page=page,
                field_type=ftype.value,
                field_name=field_name,
                key=str(key),
                pattern_code=code,
            )
        )
