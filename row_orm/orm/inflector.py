"""Naming conventions for table names and foreign keys.

>>> underscore("orderType")
'order_type'
>>> tableize("orderType")
'order_types'
"""

from __future__ import annotations

import re
from functools import lru_cache

_IRREGULARS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
}


@lru_cache(maxsize=512)
def underscore(word: str) -> str:
    """Convert ``camelCase`` / ``PascalCase`` / dashed words to snake_case."""
    word = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", word)
    word = re.sub(r"([a-z\d])([A-Z])", r"\1_\2", word)
    word = re.sub(r"[-\s]+", "_", word)
    return word.lower()


def pluralize(word: str) -> str:
    """Simple English pluralization of a single lower-case word."""
    if word in _IRREGULARS:
        return _IRREGULARS[word]
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if word.endswith("y") and word[-2:-1] not in ("a", "e", "i", "o", "u", ""):
        return word[:-1] + "ies"
    return word + "s"


@lru_cache(maxsize=512)
def tableize(name: str) -> str:
    """Derive a table name from an alias: underscore it, pluralize the last word."""
    head, _, last = underscore(name).rpartition("_")
    plural = pluralize(last)
    return f"{head}_{plural}" if head else plural
