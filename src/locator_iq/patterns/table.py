"""
Pattern Table - Read-only templates per (pattern code, field type).

A pattern code names a page object. Each page object maps field types
to ordered template lists, and optionally names sections and locations
that scope a field ("{Login Form} Username").
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from locator_iq.core.keys import FieldType

Templates = Tuple[str, ...]


def _freeze(entries: Mapping[str, Sequence[str]]) -> Mapping[str, Templates]:
    return MappingProxyType({k: tuple(v) for k, v in entries.items()})


@dataclass(frozen=True)
class PatternPage:
    """Templates for one page object."""
    code: str
    fields: Mapping[FieldType, Templates] = field(default_factory=dict)
    sections: Mapping[str, Templates] = field(default_factory=dict)
    locations: Mapping[str, Templates] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        code: str,
        fields: Mapping[Union[FieldType, str], Sequence[str]],
        sections: Mapping[str, Sequence[str]] = (),
        locations: Mapping[str, Sequence[str]] = (),
    ) -> "PatternPage":
        """
        Create an immutable page from plain mappings.

        Raises:
            UnsupportedFieldTypeError: If a field type key is not supported
        """
        typed = {FieldType.parse(k): tuple(v) for k, v in fields.items()}
        return cls(
            code=code,
            fields=MappingProxyType(typed),
            sections=_freeze(dict(sections)),
            locations=_freeze(dict(locations)),
        )


class PatternTable:
    """
    Immutable view over all loaded page objects.

    Example:
        >>> table = PatternTable([PatternPage.build("search", {"button": ["//button"]})])
        >>> table.templates("search", "button")
        ('//button',)
        >>> table.templates("search", "link")
        ()
    """

    def __init__(self, pages: Iterable[PatternPage] = ()):
        self._pages: Dict[str, PatternPage] = {}
        for page in pages:
            self._pages[page.code] = page

    @classmethod
    def from_dict(cls, data: Mapping[str, Mapping[str, Mapping[str, Sequence[str]]]]) -> "PatternTable":
        """Build from {code: {"fields": {...}, "sections": {...}, "locations": {...}}}."""
        return cls(
            PatternPage.build(
                code,
                body.get("fields", {}),
                body.get("sections", {}),
                body.get("locations", {}),
            )
            for code, body in data.items()
        )

    def merged(self, other: "PatternTable") -> "PatternTable":
        """New table with other's page objects replacing same-named ones."""
        return PatternTable([*self._pages.values(), *other._pages.values()])

    def has_code(self, code: str) -> bool:
        return code in self._pages

    def codes(self) -> List[str]:
        return sorted(self._pages)

    def page(self, code: str) -> PatternPage:
        return self._pages[code]

    def templates(self, code: str, field_type: Union[FieldType, str]) -> Templates:
        """Ordered templates for a field type, or () when not configured."""
        page = self._pages.get(code)
        if page is None:
            return ()
        return page.fields.get(FieldType.parse(field_type), ())

    def section_templates(self, code: str, name: str) -> Templates:
        page = self._pages.get(code)
        return page.sections.get(name, ()) if page else ()

    def location_templates(self, code: str, name: str) -> Templates:
        page = self._pages.get(code)
        return page.locations.get(name, ()) if page else ()

    def __len__(self) -> int:
        return len(self._pages)
