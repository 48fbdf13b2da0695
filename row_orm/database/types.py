"""Semantic column types.

Schemas describe columns with a small set of semantic types ("integer",
"string", "datetime", ...). This module maps driver-declared SQL types onto
them and converts values in both directions.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

# Checked in order; the first substring found in the lower-cased SQL type wins.
_SQL_TYPE_PATTERNS: tuple[tuple[str, str], ...] = (
    ("bool", "boolean"),
    ("int", "integer"),
    ("serial", "integer"),
    ("timestamp", "datetime"),
    ("datetime", "datetime"),
    ("date", "date"),
    ("time", "time"),
    ("char", "string"),
    ("text", "text"),
    ("clob", "text"),
    ("real", "float"),
    ("floa", "float"),
    ("doub", "float"),
    ("dec", "decimal"),
    ("numeric", "decimal"),
    ("blob", "binary"),
    ("bytea", "binary"),
)


def column_type(sql_type: str) -> str:
    """Map a declared SQL column type to a semantic type.

    Unknown or empty declarations map to "string".
    """
    lowered = sql_type.lower()
    for needle, semantic in _SQL_TYPE_PATTERNS:
        if needle in lowered:
            return semantic
    return "string"


def to_python(value: Any, type_name: str | None) -> Any:
    """Convert a value read from the driver to its Python representation."""
    if value is None or type_name is None:
        return value
    if type_name == "integer" and not isinstance(value, int):
        return int(value)
    if type_name == "float" and not isinstance(value, float):
        return float(value)
    if type_name == "decimal" and not isinstance(value, Decimal):
        return Decimal(str(value))
    if type_name == "boolean" and not isinstance(value, bool):
        if isinstance(value, str):
            return value.strip().lower() in ("1", "t", "true", "y", "yes")
        return bool(value)
    if type_name == "datetime" and isinstance(value, str):
        return datetime.fromisoformat(value)
    if type_name == "date" and isinstance(value, str):
        return date.fromisoformat(value)
    if type_name == "time" and isinstance(value, str):
        return time.fromisoformat(value)
    return value


def to_database(value: Any, type_name: str | None) -> Any:
    """Convert a Python value to what the driver should bind."""
    if value is None or type_name is None:
        return value
    if type_name == "integer" and isinstance(value, (str, float, Decimal)):
        return int(value)
    if type_name == "float" and isinstance(value, (str, int, Decimal)):
        return float(value)
    if type_name in ("string", "text") and not isinstance(value, str):
        return str(value)
    if type_name == "boolean" and not isinstance(value, bool):
        return bool(value)
    return value


class TypeMap:
    """Maps field names to semantic types and casts whole rows."""

    def __init__(self, defaults: Mapping[str, str] | None = None) -> None:
        self._defaults: dict[str, str] = dict(defaults or {})

    def defaults(self, types: Mapping[str, str] | None = None) -> dict[str, str]:
        """Merge *types* into the default map and return the current map."""
        if types is not None:
            self._defaults.update(types)
        return dict(self._defaults)

    def type(self, field: str) -> str | None:
        return self._defaults.get(field)

    def cast_row(self, row: dict[str, Any]) -> dict[str, Any]:
        for key, value in row.items():
            type_name = self._defaults.get(key)
            if type_name is not None:
                row[key] = to_python(value, type_name)
        return row

    def __bool__(self) -> bool:
        return bool(self._defaults)

    def __len__(self) -> int:
        return len(self._defaults)
