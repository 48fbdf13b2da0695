"""SQL SELECT query builder.

Clauses are stored as plain Python structures and compiled on demand:

* ``select``: ``{alias_or_index: expression}``; integer keys are unaliased
* ``from``: ``{alias_or_index: table}``
* ``join``: ``{alias: {"table": ..., "type": ..., "conditions": ...}}``
* ``where``: a list of condition values, combined with ``AND``
* ``order``: a list of ``(field, direction)`` pairs

Every literal value in a condition is bound through a :class:`ValueBinder`
and attached to the prepared statement at execution time.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from row_orm.core.enums import JoinType
from row_orm.core.exceptions import EngineNotSetError
from row_orm.database.expressions import (
    Conditions,
    ValueBinder,
    compile_conditions,
    compile_order,
    normalize_order,
)
from row_orm.database.statement import ResultPipeline, Statement
from row_orm.database.types import TypeMap

if TYPE_CHECKING:
    from row_orm.core.engine import Engine

_CLAUSES = ("select", "from", "join", "where", "order", "limit", "offset")


class Query:
    """Fluent builder for a single SELECT statement."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine
        self._parts: dict[str, Any] = {
            "select": {},
            "from": {},
            "join": {},
            "where": [],
            "order": [],
            "limit": None,
            "offset": None,
        }
        self._type_map = TypeMap()

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, engine: Engine | None) -> None:
        self._engine = engine

    @property
    def type_map(self) -> TypeMap:
        return self._type_map

    # --- Clause builders ---

    def select(
        self,
        fields: str | Sequence[str] | Mapping[str, str] | None = None,
        overwrite: bool = False,
    ) -> Query:
        """Add fields to the SELECT clause.

        Strings and sequences add unaliased expressions; mappings add
        ``alias -> expression`` pairs. ``overwrite`` replaces the clause.
        """
        if overwrite:
            self._parts["select"] = {}
        if fields is None:
            return self
        select = self._parts["select"]
        if isinstance(fields, str):
            fields = [fields]
        if isinstance(fields, Mapping):
            select.update(fields)
            return self
        for field in fields:
            select[self._next_index(select)] = field
        return self

    def from_(self, tables: str | Sequence[str] | Mapping[str, str], overwrite: bool = False) -> Query:
        if overwrite:
            self._parts["from"] = {}
        source = self._parts["from"]
        if isinstance(tables, str):
            tables = [tables]
        if isinstance(tables, Mapping):
            source.update(tables)
            return self
        for table in tables:
            source[self._next_index(source)] = table
        return self

    def join(self, tables: Mapping[str, Mapping[str, Any]], overwrite: bool = False) -> Query:
        """Add joins keyed by alias.

        Each value holds ``table``, an optional ``type`` (``LEFT`` by default)
        and optional ``conditions``. Joining an alias again replaces it.
        """
        if overwrite:
            self._parts["join"] = {}
        for alias, options in tables.items():
            self._parts["join"][alias] = {
                "table": options["table"],
                "type": JoinType.parse(options.get("type", JoinType.LEFT)).value,
                "conditions": options.get("conditions", []),
            }
        return self

    def where(self, conditions: Conditions | None = None, overwrite: bool = False) -> Query:
        if overwrite:
            self._parts["where"] = []
        if conditions:
            self._parts["where"].append(conditions)
        return self

    def and_where(self, conditions: Conditions) -> Query:
        return self.where(conditions)

    def order(
        self,
        fields: str | Sequence[str] | Mapping[str, str] | None = None,
        overwrite: bool = False,
    ) -> Query:
        if overwrite:
            self._parts["order"] = []
        if fields:
            self._parts["order"].extend(normalize_order(fields))
        return self

    def limit(self, limit: int | None) -> Query:
        self._parts["limit"] = None if limit is None else int(limit)
        return self

    def offset(self, offset: int | None) -> Query:
        self._parts["offset"] = None if offset is None else int(offset)
        return self

    def clause(self, name: str) -> Any:
        """Return a copy of the named clause."""
        if name not in _CLAUSES:
            raise ValueError(f"Unknown clause '{name}'. Valid: {', '.join(_CLAUSES)}")
        part = self._parts[name]
        if isinstance(part, dict):
            return dict(part)
        if isinstance(part, list):
            return list(part)
        return part

    def default_types(self, types: Mapping[str, str] | None = None) -> Any:
        """Without arguments return the field type map; otherwise merge *types* into it."""
        if types is None:
            return self._type_map.defaults()
        self._type_map.defaults(types)
        return self

    # --- Compilation ---

    def sql(self, binder: ValueBinder | None = None) -> str:
        """Compile the query, binding literal values on *binder*."""
        if binder is None:
            binder = ValueBinder()
        self._transform_query()
        types = self._type_map.defaults()
        parts = [self._compile_select(), self._compile_from()]

        for alias, join in self._parts["join"].items():
            on = compile_conditions(join["conditions"], binder, types) or "1 = 1"
            parts.append(f"{join['type']} JOIN {join['table']} {alias} ON {on}")

        where = compile_conditions(self._parts["where"], binder, types)
        if where:
            parts.append(f"WHERE {where}")
        if self._parts["order"]:
            parts.append(f"ORDER BY {compile_order(self._parts['order'])}")
        if self._parts["limit"] is not None:
            parts.append(f"LIMIT {self._parts['limit']}")
        if self._parts["offset"] is not None:
            parts.append(f"OFFSET {self._parts['offset']}")
        return " ".join(parts)

    def _transform_query(self) -> None:
        """Hook run before compiling; the base builder compiles as-is."""

    def _compile_select(self) -> str:
        select = self._parts["select"]
        if not select:
            return "SELECT *"
        fields = [
            expression if isinstance(key, int) else f"{expression} AS {key}"
            for key, expression in select.items()
        ]
        return "SELECT " + ", ".join(fields)

    def _compile_from(self) -> str:
        tables = [
            table if isinstance(alias, int) else f"{table} {alias}"
            for alias, table in self._parts["from"].items()
        ]
        return "FROM " + ", ".join(tables)

    # --- Execution ---

    def execute(self) -> Any:
        """Compile, bind and execute the query through the engine.

        Returns:
            A :class:`ResultPipeline` over the executed statement.

        Raises:
            EngineNotSetError: If no engine is set.
        """
        if self._engine is None:
            raise EngineNotSetError()
        binder = ValueBinder()
        sql = self.sql(binder)
        statement = self._engine.prepare(sql)
        binder.attach_to(statement)
        statement.execute()
        return self._decorate_results(statement)

    def _decorate_results(self, statement: Statement) -> ResultPipeline:
        pipeline = ResultPipeline(statement)
        if self._type_map:
            pipeline.add_stage(self._type_map.cast_row)
        return pipeline

    @staticmethod
    def _next_index(clause: dict[str | int, str]) -> int:
        indexes = [key for key in clause if isinstance(key, int)]
        return max(indexes) + 1 if indexes else 0
