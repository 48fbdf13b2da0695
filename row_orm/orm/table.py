"""Table - an entity collection with a schema and declared associations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from row_orm.core.exceptions import SchemaError, UnknownAssociationError
from row_orm.orm.association.base import Association
from row_orm.orm.association.belongs_to import BelongsTo
from row_orm.orm.association.has_many import HasMany
from row_orm.orm.association.has_one import HasOne
from row_orm.orm.inflector import tableize
from row_orm.orm.registry import TableRegistry, default_registry

if TYPE_CHECKING:
    from row_orm.core.engine import Engine
    from row_orm.orm.query import Query

Schema = dict[str, dict[str, str]]


def _normalize_schema(schema: Mapping[str, Any]) -> Schema:
    """Accept ``{"id": "integer"}`` or ``{"id": {"type": "integer"}}``."""
    normalized: Schema = {}
    for column, definition in schema.items():
        if isinstance(definition, str):
            normalized[column] = {"type": definition}
        elif isinstance(definition, Mapping):
            normalized[column] = {"type": "string", **definition}
        else:
            raise TypeError(f"Invalid definition for column '{column}': {definition!r}")
    return normalized


class Table:
    """A database table addressed by an alias.

    The table name defaults to ``tableize(alias)`` (``orderType`` becomes
    ``order_types``). The schema is either given explicitly or reflected
    from the engine the first time it is needed.

    Subclasses declare their associations in :meth:`initialize`::

        class Authors(Table):
            def initialize(self) -> None:
                self.has_many("article", property="articles")

    Args:
        alias: SQL alias and registry key.
        table: Table name in the database.
        schema: Ordered column definitions.
        primary_key: Primary key column.
        engine: Engine used by queries on this table.
        registry: Registry that resolves association targets.
    """

    def __init__(
        self,
        alias: str,
        *,
        table: str | None = None,
        schema: Mapping[str, Any] | None = None,
        primary_key: str = "id",
        engine: Engine | None = None,
        registry: TableRegistry | None = None,
    ) -> None:
        self._alias = alias
        self._table = table or tableize(alias)
        self._schema = _normalize_schema(schema) if schema is not None else None
        self._primary_key = primary_key
        self._engine = engine
        self._registry = registry if registry is not None else default_registry
        self._associations: dict[str, Association] = {}
        self.initialize()

    def initialize(self) -> None:
        """Hook for subclasses to declare associations."""

    # --- Registry shortcuts ---

    @classmethod
    def build(cls, alias: str, **options: Any) -> Table:
        """Build (or fetch) *alias* in the default registry as an instance of this class."""
        if cls is not Table:
            options.setdefault("table_class", cls)
        return default_registry.build(alias, **options)

    @classmethod
    def config(cls, alias: str | None = None, **options: Any) -> dict[str, Any]:
        return default_registry.config(alias, **options)

    @classmethod
    def clear_registry(cls) -> None:
        default_registry.clear()

    # --- Attributes ---

    @property
    def alias(self) -> str:
        return self._alias

    @property
    def table(self) -> str:
        return self._table

    @property
    def primary_key(self) -> str:
        return self._primary_key

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, engine: Engine | None) -> None:
        self._engine = engine

    @property
    def registry(self) -> TableRegistry:
        return self._registry

    def schema(self, schema: Mapping[str, Any] | None = None) -> Schema:
        """Return the schema, setting it first when *schema* is given.

        Raises:
            SchemaError: If no schema was given and there is no engine to
                reflect it from.
        """
        if schema is not None:
            self._schema = _normalize_schema(schema)
        if self._schema is None:
            if self._engine is None:
                raise SchemaError(self._alias)
            self._schema = self._engine.describe(self._table)
        return {column: dict(definition) for column, definition in self._schema.items()}

    def has_schema(self, reflect: bool = True) -> bool:
        """Whether a schema is known, or (with *reflect*) can be reflected."""
        return self._schema is not None or (reflect and self._engine is not None)

    def columns(self) -> list[str]:
        return list(self.schema())

    def aliased_types(self, alias: str | None = None) -> dict[str, str]:
        """Column types keyed by both ``alias.column`` and ``alias__column``."""
        alias = alias or self._alias
        types: dict[str, str] = {}
        for column, definition in self.schema().items():
            types[f"{alias}.{column}"] = definition["type"]
            types[f"{alias}__{column}"] = definition["type"]
        return types

    # --- Associations ---

    def association(self, name: str) -> Association:
        """Return the association declared under *name*.

        Raises:
            UnknownAssociationError: If no such association is declared.
        """
        try:
            return self._associations[name]
        except KeyError:
            raise UnknownAssociationError(self._alias, name) from None

    def has_association(self, name: str) -> bool:
        return name in self._associations

    def associations(self) -> dict[str, Association]:
        return dict(self._associations)

    def add_association(self, association: Association) -> Association:
        association.source(self)
        self._associations[association.name] = association
        return association

    def belongs_to(self, name: str, **options: Any) -> BelongsTo:
        return self.add_association(BelongsTo(name, **options))

    def has_one(self, name: str, **options: Any) -> HasOne:
        return self.add_association(HasOne(name, **options))

    def has_many(self, name: str, **options: Any) -> HasMany:
        return self.add_association(HasMany(name, **options))

    # --- Queries ---

    def query(self) -> Query:
        """Start an ORM query bound to this table."""
        from row_orm.orm.query import Query

        return Query(self._engine).repository(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(alias={self._alias!r}, table={self._table!r})"
