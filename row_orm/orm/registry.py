"""Table registry - an alias-indexed arena of Table instances.

Associations refer to their target by registry key and resolve it on first
use, so a graph of tables that refer to each other never holds direct
references until they are needed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from row_orm.core.exceptions import TableNotFoundError
from row_orm.orm.inflector import tableize

if TYPE_CHECKING:
    from row_orm.orm.table import Table

# Options a new alias inherits from the table its class_name points at.
_BORROWED_OPTIONS = ("table", "schema", "primary_key", "engine")


class TableRegistry:
    """Builds and caches one Table per alias.

    ``build`` is idempotent: the first call for an alias creates the table
    (applying any defaults registered through ``config``), later calls
    return the same instance and ignore their options.
    """

    def __init__(self) -> None:
        self._instances: dict[str, Table] = {}
        self._config: dict[str, dict[str, Any]] = {}

    def config(self, alias: str | None = None, **options: Any) -> dict[str, Any]:
        """Register default options for *alias* and return its merged defaults.

        With no alias, returns every registered default keyed by alias.
        """
        if alias is None:
            return {key: dict(value) for key, value in self._config.items()}
        defaults = self._config.setdefault(alias, {})
        defaults.update(options)
        return dict(defaults)

    def build(
        self,
        alias: str,
        *,
        table_class: type[Table] | None = None,
        class_name: str | type[Table] | None = None,
        **options: Any,
    ) -> Table:
        """Return the table registered under *alias*, creating it if needed.

        Args:
            alias: Registry key and SQL alias of the table.
            table_class: Table subclass to instantiate.
            class_name: Registry key of another table to borrow its table
                name, schema, primary key and engine from, or a Table subclass.
            **options: Constructor options, layered over ``config`` defaults.
        """
        if alias in self._instances:
            return self._instances[alias]

        from row_orm.orm.table import Table

        if isinstance(class_name, type):
            table_class = table_class or class_name
            class_name = None

        merged = dict(self._config.get(alias, {}))
        if class_name is not None and class_name != alias:
            for key, value in self._borrowed_options(class_name).items():
                merged.setdefault(key, value)
        merged.update(options)
        table_class = table_class or merged.pop("table_class", None) or Table
        merged.pop("table_class", None)

        instance = table_class(alias, registry=self, **merged)
        self._instances[alias] = instance
        return instance

    def _borrowed_options(self, class_name: str) -> dict[str, Any]:
        if class_name in self._instances:
            source = self._instances[class_name]
            borrowed: dict[str, Any] = {
                "table": source.table,
                "primary_key": source.primary_key,
                "engine": source.engine,
            }
            if source.has_schema(reflect=False):
                borrowed["schema"] = source.schema()
            return borrowed
        borrowed = {
            key: value
            for key, value in self._config.get(class_name, {}).items()
            if key in _BORROWED_OPTIONS
        }
        borrowed.setdefault("table", tableize(class_name))
        return borrowed

    def get(self, alias: str) -> Table:
        """Return an already-built table.

        Raises:
            TableNotFoundError: If *alias* has not been built.
        """
        try:
            return self._instances[alias]
        except KeyError:
            raise TableNotFoundError(alias) from None

    def has(self, alias: str) -> bool:
        return alias in self._instances

    def set(self, alias: str, table: Table) -> Table:
        """Register an existing table instance under *alias*."""
        self._instances[alias] = table
        return table

    @property
    def aliases(self) -> list[str]:
        """Built aliases, in build order."""
        return list(self._instances)

    def clear(self) -> None:
        """Forget every built table and registered default."""
        self._instances.clear()
        self._config.clear()

    def __contains__(self, alias: object) -> bool:
        return alias in self._instances

    def __len__(self) -> int:
        return len(self._instances)


default_registry = TableRegistry()
