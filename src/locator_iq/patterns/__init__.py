"""
Patterns module - Page object pattern tables and their loaders.
"""

from locator_iq.patterns.table import PatternPage, PatternTable
from locator_iq.patterns.loader import (
    load_patterns,
    load_static_locators,
    parse_pattern_data,
)

__all__ = [
    "PatternPage",
    "PatternTable",
    "load_patterns",
    "load_static_locators",
    "parse_pattern_data",
]
