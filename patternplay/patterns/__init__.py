"""Built-in pattern catalogue."""

from patternplay.patterns.catalog import get_pattern, list_patterns

__all__ = [
    "get_pattern",
    "list_patterns",
]
