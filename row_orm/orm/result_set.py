"""Nested result rows.

The main statement returns flat rows keyed ``<alias>__<column>``.
``ResultSet`` turns each into a nested mapping: repository columns at the top
level, joined entities under their association property along the
containment path.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from row_orm.database.statement import ResultPipeline

Row = dict[str, Any]


class ResultSet:
    """Lazily nests the rows of a result pipeline.

    Rows are nested one at a time as iteration pulls them and are kept in
    order; every iteration replays the kept rows before pulling more.

    Args:
        pipeline: Pipeline over the executed statement.
        root_alias: Alias of the repository table.
        paths: Property path of each joined alias, parents before children.
        primary_keys: Primary key column of each joined alias.
    """

    def __init__(
        self,
        pipeline: ResultPipeline,
        root_alias: str,
        paths: Mapping[str, tuple[str, ...]] | None = None,
        primary_keys: Mapping[str, str] | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._root_alias = root_alias
        self._paths = dict(paths or {})
        self._primary_keys = dict(primary_keys or {})
        self._rows: list[Row] = []
        self._source: Iterator[Any] | None = None
        self._exhausted = False

    @property
    def pipeline(self) -> ResultPipeline:
        return self._pipeline

    def nest(self, row: Mapping[str, Any]) -> Row:
        result: Row = {}
        entities: dict[str, Row] = {}
        for key, value in row.items():
            alias, sep, column = key.partition("__")
            if not sep:
                result[key] = value
            elif alias == self._root_alias:
                result[column] = value
            elif alias in self._paths:
                entities.setdefault(alias, {})[column] = value
            else:
                result[key] = value

        for alias, path in self._paths.items():
            if alias not in entities:
                continue
            values = entities[alias]
            entity = None if self._is_null(alias, values) else values
            parent: Any = result
            for step in path[:-1]:
                parent = parent.setdefault(step, {})
                if not isinstance(parent, dict):
                    break
            else:
                parent[path[-1]] = entity
        return result

    def _is_null(self, alias: str, values: Row) -> bool:
        if not values:
            return False
        primary_key = self._primary_keys.get(alias)
        if primary_key in values:
            return values[primary_key] is None
        return all(value is None for value in values.values())

    def _fetch_next(self) -> bool:
        """Nest one more row from the pipeline into the cache."""
        if self._exhausted:
            return False
        if self._source is None:
            self._source = iter(self._pipeline)
        raw = next(self._source, None)
        if raw is None:
            self._exhausted = True
            return False
        self._rows.append(self.nest(raw))
        return True

    def __iter__(self) -> Iterator[Row]:
        index = 0
        while index < len(self._rows) or self._fetch_next():
            yield self._rows[index]
            index += 1

    def to_array(self) -> list[Row]:
        return list(self)

    def first(self) -> Row | None:
        """Return the first nested row, or None for an empty result."""
        if self._rows or self._fetch_next():
            return self._rows[0]
        return None
