"""ORM query - a query builder bound to a repository table.

Before compiling, the query transforms itself: it selects FROM the
repository table under its alias, selects every schema column when no
fields were given, aliases all fields as ``<alias>__<column>`` and adds the
containments. Joinable containments become joins of this statement; the
rest are eager loaded after it executes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from row_orm.core.exceptions import RepositoryNotSetError
from row_orm.database.query import Query as DatabaseQuery
from row_orm.database.statement import ResultPipeline, Statement
from row_orm.orm.containment import ContainSpec, build_specs, merge_specs, normalize_tree
from row_orm.orm.eager_loader import EagerLoader
from row_orm.orm.plan import ContainPlan
from row_orm.orm.planner import nested_deferred, plan_containments
from row_orm.orm.result_set import ResultSet

if TYPE_CHECKING:
    from row_orm.core.engine import Engine
    from row_orm.orm.table import Table

logger = logging.getLogger(__name__)


class Query(DatabaseQuery):
    """Query over a repository table with associated data.

    Example::

        authors = Table.build("author", engine=engine)
        authors.has_many("article", property="articles")
        rows = authors.query().contain({"article": {"sort": {"id": "DESC"}}}).to_array()
    """

    def __init__(self, engine: Engine | None = None, table: Table | None = None) -> None:
        super().__init__(engine)
        self._repository: Table | None = None
        self._containments: dict[str, ContainSpec] = {}
        self._has_fields = False
        self._derived_fields: set[str | int] = set()
        self._derived_joins: set[str] = set()
        self._plan: ContainPlan | None = None
        if table is not None:
            self.repository(table)

    def repository(self, table: Table | None = None) -> Any:
        """Bind *table* and return the query, or return the bound table.

        Raises:
            RepositoryNotSetError: When reading and no table is bound.
        """
        if table is None:
            if self._repository is None:
                raise RepositoryNotSetError("read the repository")
            return self._repository
        self._repository = table
        if self._engine is None:
            self._engine = table.engine
        self._plan = None
        return self

    def contain(self, associations: Any = None) -> Any:
        """Merge *associations* into the containments, or return them.

        Repeated calls merge: options given later win, nested associations
        accumulate.
        """
        if associations is None:
            return dict(self._containments)
        self._containments = merge_specs(self._containments, build_specs(associations))
        self._plan = None
        return self

    # --- Field aliasing ---

    def alias_field(self, field: str, alias: str | None = None) -> dict[str, str]:
        """Return ``{"<alias>__<column>": "<alias>.<column>"}`` for *field*.

        A dotted field keeps its own alias.
        """
        if "." in field:
            alias, _, column = field.rpartition(".")
            return {f"{alias}__{column}": field}
        if alias is None:
            if self._repository is None:
                raise RepositoryNotSetError("alias fields")
            alias = self._repository.alias
        return {f"{alias}__{field}": f"{alias}.{field}"}

    def alias_fields(
        self,
        fields: Sequence[str] | Mapping[str | int, str],
        default_alias: str | None = None,
    ) -> dict[str | int, str]:
        """Alias every unaliased field; already aliased entries are kept.

        On a key conflict the first entry wins. Expressions such as
        ``COUNT(*)`` are left unaliased.
        """
        items = fields.items() if isinstance(fields, Mapping) else enumerate(fields)
        aliased: dict[str | int, str] = {}
        expressions: list[str] = []
        for key, field in items:
            if not isinstance(key, int):
                aliased.setdefault(key, field)
            elif "(" in field or " " in field.strip():
                expressions.append(field)
            else:
                for alias_key, expression in self.alias_field(field, default_alias).items():
                    aliased.setdefault(alias_key, expression)
        for index, expression in enumerate(expressions):
            aliased[index] = expression
        return aliased

    def aliased_table(self, alias: str) -> Table | None:
        """Return the table behind a SQL alias of this query, if any."""
        table = self.repository()
        if alias == table.alias:
            return table
        for entry in self.join_plan().joins:
            if entry.alias == alias:
                return entry.association.target()
        return None

    def join_plan(self) -> ContainPlan:
        """The containment plan, transforming the query first if needed."""
        if self._plan is None:
            self._transform_query()
        return self._plan or ContainPlan()

    # --- Transformation ---

    def _transform_query(self) -> None:
        if self._repository is None:
            return
        table = self._repository
        self._reset_derived()
        self._has_fields = bool(self._parts["select"])
        self.from_({table.alias: table.table}, overwrite=True)
        if table.has_schema():
            self.default_types(table.aliased_types())
        self._add_default_fields()
        self._add_containments()

    def _reset_derived(self) -> None:
        """Drop the fields and joins added by the previous transformation."""
        for key in self._derived_fields:
            self._parts["select"].pop(key, None)
        for alias in self._derived_joins:
            self._parts["join"].pop(alias, None)
        self._derived_fields = set()
        self._derived_joins = set()

    def _add_default_fields(self) -> None:
        table = self.repository()
        if self._parts["select"]:
            self.select(self.alias_fields(self._parts["select"], table.alias), overwrite=True)
            return
        self.select(self.alias_fields(table.columns(), table.alias))
        self._derived_fields.update(self._parts["select"])

    def _add_containments(self) -> None:
        table = self.repository()
        if not self._containments:
            self._plan = ContainPlan()
            return

        fields_before = set(self._parts["select"])
        joins_before = set(self._parts["join"])
        nodes = normalize_tree(table, self._containments)
        plan = plan_containments(nodes, table.alias)
        for entry in plan.joins:
            entry.association.attach_to(
                self,
                entry.config,
                include_fields=not self._has_fields,
                source_alias=entry.source_alias,
            )
        for entry in plan.deferred:
            for node in (entry.node, *nested_deferred(entry.node)):
                node.instance.validate_fields(node.config)
            key = entry.key_column
            if key not in self._parts["select"]:
                alias, _, column = key.partition("__")
                self.select({key: f"{alias}.{column}"})
        self._derived_fields.update(set(self._parts["select"]) - fields_before)
        self._derived_joins.update(set(self._parts["join"]) - joins_before)
        self._plan = plan

    # --- Execution ---

    def execute(self) -> ResultSet:
        """Run the query and return its nested rows."""
        pipeline = super().execute()
        plan = self.join_plan()
        table = self.repository()
        paths = {entry.alias: entry.path for entry in plan.joins}
        primary_keys = {entry.alias: entry.association.target().primary_key for entry in plan.joins}
        return ResultSet(pipeline, table.alias, paths, primary_keys)

    def _decorate_results(self, statement: Statement) -> ResultPipeline:
        pipeline = super()._decorate_results(statement)
        plan = self.join_plan()
        if plan.requires_eager_loading:
            logger.debug(
                f"Eager loading {len(plan.deferred)} associations of '{self.repository().alias}'"
            )
            EagerLoader(plan.deferred, engine=self._engine).load(pipeline)
        return pipeline

    def to_array(self) -> list[dict[str, Any]]:
        return self.execute().to_array()

    def first(self) -> dict[str, Any] | None:
        return self.execute().first()

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.execute())
