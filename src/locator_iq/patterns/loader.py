"""
Pattern Loader - Read pattern files and static locator files from YAML.

Pattern file layout (one or more page objects per file):

    searchPage:
      fields:
        button:
          - "xpath=//button[text()='${fieldName}']"
          - "xpath=//span[text()='${fieldName}']"
        link: "//a[text()='${fieldName}'];a[title='${fieldName}']"
      sections:
        Login Form: ["//form[@id='login']"]
      locations:
        Main Content: ["//main"]

A template list may also be given as one string with ";" separators.

Static locator file layout (key path -> candidates):

    loc.searchPage.searchPage.button.proceed:
      - "#proceed"
      - "xpath=//button[@name='proceed']"
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from locator_iq.exceptions import ConfigurationError, UnsupportedFieldTypeError
from locator_iq.patterns.table import PatternPage, PatternTable

logger = logging.getLogger(__name__)

PATTERN_SUFFIXES = (".yaml", ".yml")


def _split_templates(value: Union[str, List[str]]) -> List[str]:
    """Accept a list or a ";"-separated string, dropping blanks."""
    items = value.split(";") if isinstance(value, str) else value
    return [item.strip() for item in items if item and item.strip()]


class PatternPageModel(BaseModel):
    """Schema of one page object in a pattern file."""
    field_templates: Dict[str, List[str]] = Field(default_factory=dict, alias="fields")
    sections: Dict[str, List[str]] = Field(default_factory=dict)
    locations: Dict[str, List[str]] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("field_templates", "sections", "locations", mode="before")
    @classmethod
    def _normalize_templates(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        return {str(k): _split_templates(v) if isinstance(v, (str, list)) else v for k, v in value.items()}


def _read_yaml(path: Path) -> Any:
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}", {"path": str(path)}) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", {"path": str(path)}) from e


def parse_pattern_data(data: Any, source: str = "<memory>") -> PatternTable:
    """
    Validate raw pattern data and build a PatternTable.

    Raises:
        ConfigurationError: If the data does not follow the pattern layout
    """
    if data is None:
        return PatternTable()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Pattern file {source} must contain a mapping", {"path": source})

    pages = []
    for code, body in data.items():
        try:
            model = PatternPageModel.model_validate(body or {})
            pages.append(PatternPage.build(str(code), model.field_templates, model.sections, model.locations))
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid page object {code!r} in {source}: {e}",
                {"path": source, "pattern_code": code},
            ) from e
        except UnsupportedFieldTypeError as e:
            raise ConfigurationError(
                f"Page object {code!r} in {source} uses unsupported field type {e.field_type!r}",
                {"path": source, "pattern_code": code},
            ) from e
    return PatternTable(pages)


def load_patterns(path: Union[str, Path]) -> PatternTable:
    """
    Load a pattern file, or every pattern file in a directory.

    Files in a directory are read in name order; a later file replaces
    page objects of the same name from an earlier one.

    Raises:
        ConfigurationError: If the path is missing or a file is invalid
    """
    root = Path(path).expanduser()
    if not root.exists():
        raise ConfigurationError(f"Pattern path not found: {root}", {"path": str(root)})

    files = (
        sorted(p for p in root.iterdir() if p.suffix in PATTERN_SUFFIXES)
        if root.is_dir()
        else [root]
    )

    table = PatternTable()
    for file in files:
        table = table.merged(parse_pattern_data(_read_yaml(file), str(file)))
        logger.debug(f"Loaded pattern file {file}")

    logger.info(f"Loaded {len(table)} page object(s) from {root}")
    return table


def load_static_locators(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load human-authored locators as a {key path: record value} mapping.

    Values are validated later by the cache; this only checks the layout.

    Raises:
        ConfigurationError: If the file is missing or not a mapping
    """
    file = Path(path).expanduser()
    if not file.exists():
        raise ConfigurationError(f"Static locator file not found: {file}", {"path": str(file)})
    data = _read_yaml(file)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Static locator file {file} must contain a mapping", {"path": str(file)})
    return {str(k): v for k, v in data.items()}
