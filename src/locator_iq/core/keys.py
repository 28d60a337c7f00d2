"""
Key Builder - Canonical cache keys for (page, field type, field name).

Every segment is normalized to camelCase so that "First Name",
"first-name" and "FIRST_NAME" all land on the same key:

    >>> str(build_key("SearchPage", "button", "PROCEED", pattern_code="search"))
    'loc.search.searchPage.button.proceed'

Generated and static keys share the same path and differ only in their
KeyNamespace tag.
"""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Union

from locator_iq.core.placeholders import parse_field_descriptor
from locator_iq.exceptions import UnsupportedFieldTypeError


class FieldType(str, Enum):
    """Supported field types. Add a member (and its traits) to extend."""
    BUTTON = "button"
    INPUT = "input"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    TEXT = "text"
    LINK = "link"
    LABEL = "label"
    HEADER = "header"
    TAB = "tab"
    TEXTAREA = "textarea"

    @classmethod
    def parse(cls, value: Union["FieldType", str]) -> "FieldType":
        """
        Convert a field type identifier to a FieldType.

        Raises:
            UnsupportedFieldTypeError: If the identifier is not supported
        """
        if isinstance(value, FieldType):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedFieldTypeError(str(value), [m.value for m in cls]) from None


@dataclass(frozen=True)
class FieldTraits:
    """Per-type behaviour switches."""
    value_bearing: bool = False


FIELD_TRAITS: Dict[FieldType, FieldTraits] = {
    FieldType.BUTTON: FieldTraits(),
    FieldType.INPUT: FieldTraits(),
    FieldType.SELECT: FieldTraits(value_bearing=True),
    FieldType.CHECKBOX: FieldTraits(value_bearing=True),
    FieldType.RADIO: FieldTraits(value_bearing=True),
    FieldType.TEXT: FieldTraits(),
    FieldType.LINK: FieldTraits(),
    FieldType.LABEL: FieldTraits(),
    FieldType.HEADER: FieldTraits(),
    FieldType.TAB: FieldTraits(),
    FieldType.TEXTAREA: FieldTraits(),
}


class KeyNamespace(Enum):
    """Which partition of the resolution cache a key addresses."""
    STATIC = "static"
    GENERATED = "generated"


GENERATED_MARKER = "auto"


@dataclass(frozen=True)
class CacheKey:
    """
    A normalized cache key.

    Attributes:
        path: Dotted key path, e.g. "loc.search.searchPage.button.proceed"
        namespace: Static (human-authored) or generated partition
    """
    path: str
    namespace: KeyNamespace = KeyNamespace.STATIC

    @property
    def is_generated(self) -> bool:
        return self.namespace is KeyNamespace.GENERATED

    def generated(self) -> "CacheKey":
        """Same path, generated namespace."""
        return replace(self, namespace=KeyNamespace.GENERATED)

    def static(self) -> "CacheKey":
        """Same path, static namespace."""
        return replace(self, namespace=KeyNamespace.STATIC)

    def __str__(self) -> str:
        if not self.is_generated:
            return self.path
        prefix, _, rest = self.path.partition(".")
        return f"{prefix}.{GENERATED_MARKER}.{rest}"


_SEPARATORS = re.compile(r"[\W_]+")


def _split_words(chunk: str) -> List[str]:
    """Split one separator-free chunk on case and digit boundaries."""
    words: List[str] = []
    start = 0
    for i in range(1, len(chunk)):
        prev, cur = chunk[i - 1], chunk[i]
        nxt = chunk[i + 1] if i + 1 < len(chunk) else ""
        boundary = (
            (prev.islower() and cur.isupper())
            or (prev.isupper() and cur.isupper() and nxt.islower())
            or (prev.isdigit() != cur.isdigit())
        )
        if boundary:
            words.append(chunk[start:i])
            start = i
    words.append(chunk[start:])
    return [w for w in words if w]


def normalize_segment(value: str) -> str:
    """
    Normalize one key segment to camelCase.

    Runs of non-alphanumeric characters become word separators, case
    changes split words, then the first word is lowercased and the rest
    are capitalized. Applying it twice gives the same result as once.
    """
    words: List[str] = []
    for chunk in _SEPARATORS.sub(" ", value).split():
        words.extend(_split_words(chunk))
    if not words:
        return ""
    head, *tail = (w.lower() for w in words)
    return head + "".join(w[:1].upper() + w[1:] for w in tail)


def field_segments(
    ftype: FieldType,
    field_name: str,
    field_value: Optional[str] = None,
) -> List[str]:
    """
    Key segments identifying the field itself.

    The bare name comes first. Descriptor parts that change the generated
    candidates follow as their own segments, so "Address[2]" and
    "Address2" never share a key:

        "Address[2]"               -> ["address", "i2"]
        "{Login Form} Username"    -> ["username", "inLoginForm"]
        "{{Main}} Save"            -> ["save", "atMain"]
        radio "Gender", "Female"   -> ["gender", "vFemale"]
    """
    descriptor = parse_field_descriptor(field_name)
    segments = [normalize_segment(descriptor.name)]
    if descriptor.location_name:
        segments.append(normalize_segment(f"at {descriptor.location_name} {descriptor.location_value}"))
    if descriptor.section_name:
        segments.append(normalize_segment(f"in {descriptor.section_name} {descriptor.section_value}"))
    if descriptor.explicit_instance:
        segments.append(f"i{descriptor.instance}")
    if FIELD_TRAITS[ftype].value_bearing and field_value is not None and normalize_segment(field_value):
        segments.append(normalize_segment(f"v {field_value}"))
    return segments


def build_key(
    page: str,
    field_type: Union[FieldType, str],
    field_name: str,
    *,
    pattern_code: str,
    prefix: str = "loc",
    field_value: Optional[str] = None,
) -> CacheKey:
    """
    Derive the static-namespace cache key for a resolution request.

    Args:
        page: Page context (e.g. "SearchPage")
        field_type: Field type identifier
        field_name: Field name as authored, including any descriptor syntax
        pattern_code: Page object / pattern code the key belongs to
        prefix: First key segment
        field_value: Value of a radio, select or checkbox; ignored for other types

    Returns:
        CacheKey in the static namespace

    Raises:
        UnsupportedFieldTypeError: If field_type is not supported
    """
    ftype = FieldType.parse(field_type)
    segments = [
        prefix,
        normalize_segment(pattern_code),
        normalize_segment(page),
        ftype.value,
        *field_segments(ftype, field_name, field_value),
    ]
    return CacheKey(".".join(segments))


def normalize_key_path(path: str) -> Optional[str]:
    """
    Normalize a hand-written key path segment by segment.

    The prefix and field type segments are kept as written (the field type
    lowercased); every other segment is camelCased. Returns None when the
    path has fewer than five segments, an unsupported field type, or a
    segment that normalizes to nothing.

        >>> normalize_key_path("loc.searchPage.SearchPage.button.PROCEED")
        'loc.searchPage.searchPage.button.proceed'
    """
    parts = [p.strip() for p in path.strip().split(".")]
    if len(parts) < 5:
        return None
    prefix, code, page, ftype, *rest = parts
    try:
        ftype = FieldType.parse(ftype).value
    except UnsupportedFieldTypeError:
        return None
    normalized = [normalize_segment(p) for p in (code, page, *rest)]
    if not prefix or not all(normalized):
        return None
    return ".".join([prefix, normalized[0], normalized[1], ftype, *normalized[2:]])


def parse_key_path(path: str, prefix: str = "loc") -> CacheKey:
    """
    Parse a dotted key reference such as "loc.search.searchPage.button.proceed".

    A reference carrying the generated marker ("loc.auto....") maps to the
    generated namespace. Well-formed paths are normalized, so
    "loc.search.SearchPage.button.PROCEED" names the same key.
    """
    parts = path.strip().split(".")
    namespace = KeyNamespace.STATIC
    if len(parts) > 1 and parts[0] == prefix and parts[1] == GENERATED_MARKER:
        parts = [parts[0]] + parts[2:]
        namespace = KeyNamespace.GENERATED
    raw = ".".join(parts)
    return CacheKey(normalize_key_path(raw) or raw, namespace)
