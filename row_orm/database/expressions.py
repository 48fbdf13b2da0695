"""Condition and ordering expressions.

Conditions are plain Python values:

* a raw SQL string, used verbatim (``"client.id = foo.client_id"``);
* a mapping of ``"field"`` or ``"field <operator>"`` to a value
  (``{"id": 2}``, ``{"article.author_id IN": [1, 2]}``), where the keys
  ``"OR"``, ``"AND"`` and ``"NOT"`` group nested conditions;
* a list of any of the above, combined with ``AND``.

Every value is bound through a :class:`ValueBinder`; nothing user-supplied
is interpolated into the SQL text.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Union

Conditions = Union[str, Mapping[str, Any], Sequence[Any]]

# Longest operators first so "NOT IN" is not mistaken for "IN".
_OPERATORS: tuple[str, ...] = (
    "NOT IN",
    "IN",
    "IS NOT",
    "IS",
    "NOT LIKE",
    "LIKE",
    ">=",
    "<=",
    "!=",
    "<>",
    "=",
    ">",
    "<",
)
_GROUPS = ("AND", "OR", "NOT")
_DIRECTIONS = ("ASC", "DESC")


class ValueBinder:
    """Collects bound values and hands out ``:c<N>`` placeholders."""

    def __init__(self, prefix: str = "c") -> None:
        self._prefix = prefix
        self._bindings: dict[str, tuple[Any, str | None]] = {}

    def bind(self, value: Any, type_name: str | None = None) -> str:
        """Register *value* and return the placeholder that refers to it."""
        placeholder = f":{self._prefix}{len(self._bindings)}"
        self._bindings[placeholder] = (value, type_name)
        return placeholder

    def bindings(self) -> dict[str, tuple[Any, str | None]]:
        return dict(self._bindings)

    def attach_to(self, statement: Any) -> None:
        """Bind every collected value on *statement*."""
        for placeholder, (value, type_name) in self._bindings.items():
            statement.bind_value(placeholder, value, type_name)

    def reset(self) -> None:
        self._bindings.clear()

    def __len__(self) -> int:
        return len(self._bindings)


def split_operator(key: str) -> tuple[str, str]:
    """Split ``"field op"`` into ``(field, OP)``; the default operator is ``=``."""
    key = key.strip()
    upper = key.upper()
    for operator in _OPERATORS:
        if upper.endswith(" " + operator):
            return key[: -len(operator)].strip(), operator
    return key, "="


def compile_conditions(
    conditions: Conditions | None,
    binder: ValueBinder,
    types: Mapping[str, str] | None = None,
) -> str:
    """Compile *conditions* into a SQL boolean expression (empty string if none)."""
    return " AND ".join(_compile_parts(conditions, binder, types or {}))


def _compile_parts(
    conditions: Conditions | None,
    binder: ValueBinder,
    types: Mapping[str, str],
) -> list[str]:
    if conditions is None:
        return []
    if isinstance(conditions, str):
        return [conditions] if conditions.strip() else []
    if isinstance(conditions, Mapping):
        parts: list[str] = []
        for key, value in conditions.items():
            group = key.strip().upper()
            if group in _GROUPS:
                compiled = _compile_group(group, value, binder, types)
                if compiled:
                    parts.append(compiled)
            else:
                parts.append(_compile_comparison(key, value, binder, types))
        return parts
    if isinstance(conditions, Sequence):
        parts = []
        for item in conditions:
            parts.extend(_compile_parts(item, binder, types))
        return parts
    raise TypeError(f"Unsupported condition: {conditions!r}")


def _compile_group(
    group: str,
    value: Any,
    binder: ValueBinder,
    types: Mapping[str, str],
) -> str:
    # Under OR each list element is one AND-ed alternative; mapping entries are
    # alternatives on their own.
    if isinstance(value, Mapping) or isinstance(value, str):
        members = _compile_parts(value, binder, types)
    else:
        members = []
        for item in value:
            inner = _compile_parts(item, binder, types)
            if len(inner) > 1:
                members.append("(" + " AND ".join(inner) + ")")
            elif inner:
                members.append(inner[0])
    if not members:
        return ""
    if group == "NOT":
        return "NOT (" + " AND ".join(members) + ")"
    return "(" + f" {group} ".join(members) + ")"


def _compile_comparison(
    key: str,
    value: Any,
    binder: ValueBinder,
    types: Mapping[str, str],
) -> str:
    field, operator = split_operator(key)
    type_name = types.get(field)

    if operator == "=" and isinstance(value, (list, tuple, set, frozenset)):
        operator = "IN"

    if operator in ("IN", "NOT IN"):
        values = list(value) if not isinstance(value, (str, bytes)) else [value]
        if not values:
            return "1 = 0" if operator == "IN" else "1 = 1"
        placeholders = ", ".join(binder.bind(item, type_name) for item in values)
        return f"{field} {operator} ({placeholders})"

    if value is None:
        if operator in ("=", "IS"):
            return f"{field} IS NULL"
        if operator in ("!=", "<>", "IS NOT"):
            return f"{field} IS NOT NULL"

    return f"{field} {operator} {binder.bind(value, type_name)}"


def qualify_field(field: str, alias: str) -> str:
    """Prefix an unqualified column name with *alias*.

    Dotted names and expressions (anything with parentheses or spaces) are
    returned unchanged.
    """
    if "." in field or "(" in field or " " in field.strip():
        return field
    return f"{alias}.{field}"


def qualify_conditions(conditions: Conditions | None, alias: str) -> Any:
    """Qualify the field keys of mapping conditions with *alias*."""
    if conditions is None or isinstance(conditions, str):
        return conditions
    if isinstance(conditions, Mapping):
        qualified: dict[str, Any] = {}
        for key, value in conditions.items():
            if key.strip().upper() in _GROUPS:
                if isinstance(value, (Mapping, str)):
                    qualified[key] = qualify_conditions(value, alias)
                else:
                    qualified[key] = [qualify_conditions(item, alias) for item in value]
                continue
            field, _ = split_operator(key)
            suffix = key.strip()[len(field):]
            qualified[qualify_field(field, alias) + suffix] = value
        return qualified
    return [qualify_conditions(item, alias) for item in conditions]


def normalize_order(fields: str | Sequence[str] | Mapping[str, str]) -> list[tuple[str, str | None]]:
    """Turn an ORDER BY specification into ``(field, direction)`` pairs."""
    if isinstance(fields, str):
        fields = [fields]
    if isinstance(fields, Mapping):
        pairs = []
        for field, direction in fields.items():
            upper = str(direction).strip().upper()
            if upper not in _DIRECTIONS:
                raise ValueError(f"Invalid sort direction for '{field}': {direction!r}")
            pairs.append((field, upper))
        return pairs
    return [(field, None) for field in fields]


def qualify_order(fields: str | Sequence[str] | Mapping[str, str], alias: str) -> list[str] | dict[str, str]:
    """Qualify the fields of an ORDER BY specification, keeping its shape."""
    if isinstance(fields, str):
        fields = [fields]
    if isinstance(fields, Mapping):
        return {qualify_field(field, alias): direction for field, direction in fields.items()}
    return [qualify_field(field, alias) for field in fields]


def compile_order(order: Sequence[tuple[str, str | None]]) -> str:
    return ", ".join(field if direction is None else f"{field} {direction}" for field, direction in order)
