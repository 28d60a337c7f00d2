"""
Placeholder Context - Per-resolution values substituted into pattern templates.

Templates reference context values with ``${token}``:

    ${fieldName}              Field name without instance or scope syntax
    ${fieldName.toLowerCase}  Lowercased field name
    ${fieldInstance}          Instance number, "1" unless "Name[n]" was used
    ${fieldValue}             Value for value-bearing types (radio, select, ...)
    ${pageName}               Page name of the request
    ${location.name}          "{{Main Content}} Name"  -> "Main Content"
    ${location.value}         "{{region::main}} Name"  -> "main"
    ${section.name}           "{Login Form} Name"      -> "Login Form"
    ${section.value}          "{form::login} Name"     -> "login"

Unknown tokens are left untouched; known tokens with no value become "".
"""

import re
from dataclasses import dataclass, fields
from typing import Callable, Dict, Optional

DEFAULT_INSTANCE = "1"

# "{{Location::value}} {Section::value} Name[n]"
_DESCRIPTOR = re.compile(
    r"^(?:\{\{([^:}]+)(?:::(.+?))?\}\}\s*)?"
    r"(?:\{([^:}]+)(?:::(.+?))?\}\s*)?"
    r"(.+?)"
    r"(?:\[(\d+)\])?$"
)

# "/{{", "/{" and "/[" keep literal brackets inside a field name
_ESCAPES = (("/{{", "\x01"), ("/{", "\x02"), ("/[", "\x03"))
_RESTORE = (("\x01", "{{"), ("\x02", "{"), ("\x03", "["))

_TOKEN = re.compile(r"\$\{([A-Za-z][\w.]*)\}")


@dataclass
class FieldDescriptor:
    """A parsed field name."""
    name: str
    instance: str = DEFAULT_INSTANCE
    explicit_instance: bool = False
    location_name: str = ""
    location_value: str = ""
    section_name: str = ""
    section_value: str = ""

    @property
    def is_scoped(self) -> bool:
        return bool(self.location_name or self.section_name)


def _restore(text: str) -> str:
    for marker, literal in _RESTORE:
        text = text.replace(marker, literal)
    return text


def parse_field_descriptor(raw: str) -> FieldDescriptor:
    """
    Parse "{{Location::value}} {Section::value} Name[n]" into its parts.

    Only the name is required:

        >>> parse_field_descriptor("Address[2]")
        FieldDescriptor(name='Address', instance='2', explicit_instance=True, ...)
    """
    text = raw.strip()
    for escape, marker in _ESCAPES:
        text = text.replace(escape, marker)

    match = _DESCRIPTOR.match(text)
    if not match:
        return FieldDescriptor(name=_restore(text))

    loc_name, loc_value, sec_name, sec_value, name, instance = match.groups()
    return FieldDescriptor(
        name=_restore(name.strip()),
        instance=instance or DEFAULT_INSTANCE,
        explicit_instance=instance is not None,
        location_name=(loc_name or "").strip(),
        location_value=(loc_value or "").strip(),
        section_name=(sec_name or "").strip(),
        section_value=(sec_value or "").strip(),
    )


@dataclass
class PlaceholderContext:
    """
    Transient values for one resolution.

    The resolver resets it at the start of every request and never
    stores it, so nothing leaks into the next resolution.
    """
    field_name: str = ""
    field_instance: str = DEFAULT_INSTANCE
    field_value: str = ""
    page_name: str = ""
    location_name: str = ""
    location_value: str = ""
    section_name: str = ""
    section_value: str = ""

    def reset(self) -> None:
        """Restore every value to its default."""
        for f in fields(self):
            setattr(self, f.name, f.default)

    def populate(
        self,
        descriptor: FieldDescriptor,
        page_name: str,
        field_value: Optional[str] = None,
    ) -> None:
        """Fill the context from a parsed field descriptor."""
        self.field_name = descriptor.name
        self.field_instance = descriptor.instance
        self.page_name = page_name
        self.location_name = descriptor.location_name
        self.location_value = descriptor.location_value
        self.section_name = descriptor.section_name
        self.section_value = descriptor.section_value
        if field_value is not None:
            self.field_value = field_value

    def tokens(self) -> Dict[str, str]:
        """Current token -> value table."""
        return {token: getter(self) for token, getter in _TOKEN_GETTERS.items()}


_TOKEN_GETTERS: Dict[str, Callable[[PlaceholderContext], str]] = {
    "fieldName": lambda c: c.field_name,
    "fieldName.toLowerCase": lambda c: c.field_name.lower(),
    "fieldInstance": lambda c: c.field_instance,
    "fieldValue": lambda c: c.field_value,
    "pageName": lambda c: c.page_name,
    "location.name": lambda c: c.location_name,
    "location.value": lambda c: c.location_value,
    "section.name": lambda c: c.section_name,
    "section.value": lambda c: c.section_value,
}

RECOGNIZED_TOKENS = frozenset(_TOKEN_GETTERS)


def substitute(template: str, context: PlaceholderContext) -> str:
    """
    Replace every recognized ${token} in template with its context value.

    Substitution is a single textual pass, so values that happen to
    contain "${...}" are not expanded again.
    """
    values = context.tokens()

    def _replace(match: "re.Match[str]") -> str:
        token = match.group(1)
        if token not in values:
            return match.group(0)
        return values[token] or ""

    return _TOKEN.sub(_replace, template)


def references_token(template: str, token: str) -> bool:
    """Whether template mentions ${token}."""
    return any(m.group(1) == token for m in _TOKEN.finditer(template))
