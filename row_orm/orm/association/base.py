"""Association base class.

An association links a source table to a target table and knows how to
fetch the target's rows either by joining them into the source query
(:meth:`Association.attach_to`) or with one follow-up query per result set
(:meth:`Association.eager_loader`).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from row_orm.core.enums import JoinType
from row_orm.core.exceptions import MissingForeignKeyError
from row_orm.database.expressions import Conditions, qualify_conditions, qualify_order
from row_orm.orm.containment import ContainConfig
from row_orm.orm.registry import default_registry

if TYPE_CHECKING:
    from row_orm.core.engine import Engine
    from row_orm.orm.query import Query
    from row_orm.orm.table import Table

logger = logging.getLogger(__name__)

Row = dict[str, Any]
MergeFunction = Callable[[Row], Row]


def _identity(row: Row) -> Row:
    return row


def _condition_list(conditions: Conditions | None) -> list[Any]:
    if not conditions:
        return []
    if isinstance(conditions, (str, Mapping)):
        return [conditions]
    return list(conditions)


class Association:
    """Relationship between a source table and a target table.

    Args:
        name: Association name; also the SQL alias of the target when joined.
        class_name: Registry key of the target table (defaults to *name*),
            or a Table subclass.
        foreign_key: Linking column; each kind derives a default.
        conditions: Conditions always applied when fetching the target.
        dependent: Whether target records depend on the source record.
        source_table: Owning table.
        target_table: Target table; resolved through the registry when omitted.
        join_type: ``LEFT``, ``INNER`` or ``RIGHT``.
        property: Key under which target data is nested (defaults to *name*).

    Any other options are passed to :meth:`_init_options`.
    """

    default_join_type = JoinType.LEFT
    one_to_many = False
    _can_be_joined = False

    def __init__(self, name: str, **options: Any) -> None:
        self._name = name
        self._class_name: Any = options.pop("class_name", None) or name
        self._foreign_key: str | None = options.pop("foreign_key", None)
        self._conditions: Conditions | None = options.pop("conditions", None)
        self._dependent = bool(options.pop("dependent", False))
        self._source_table: Table | None = options.pop("source_table", None)
        self._target_table: Table | None = options.pop("target_table", None)
        self._join_type = JoinType.parse(options.pop("join_type", self.default_join_type))
        self._property = options.pop("property", None) or name
        self._init_options(options)

    def _init_options(self, options: dict[str, Any]) -> None:
        """Hook for subclasses that accept extra options."""

    # --- Properties ---

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, name: str) -> None:
        self._name = name

    @property
    def class_name(self) -> Any:
        return self._class_name

    @property
    def foreign_key(self) -> str:
        if self._foreign_key is None:
            return self._default_foreign_key()
        return self._foreign_key

    @foreign_key.setter
    def foreign_key(self, key: str | None) -> None:
        self._foreign_key = key

    @property
    def conditions(self) -> Conditions | None:
        return self._conditions

    @conditions.setter
    def conditions(self, conditions: Conditions | None) -> None:
        self._conditions = conditions

    @property
    def dependent(self) -> bool:
        return self._dependent

    @dependent.setter
    def dependent(self, dependent: bool) -> None:
        self._dependent = bool(dependent)

    @property
    def join_type(self) -> str:
        return self._join_type.value

    @join_type.setter
    def join_type(self, join_type: str | JoinType) -> None:
        self._join_type = JoinType.parse(join_type)

    @property
    def property(self) -> str:
        return self._property

    @property.setter
    def property(self, name: str) -> None:
        self._property = name or self._name

    def source(self, table: Table | None = None) -> Table | None:
        """Get the source table, or set it when *table* is given."""
        if table is not None:
            self._source_table = table
        return self._source_table

    def target(self, table: Table | None = None) -> Table:
        """Get the target table, resolving it through the registry on first use.

        A resolved target without an engine uses the source table's engine.
        """
        if table is not None:
            self._target_table = table
        if self._target_table is None:
            source = self._source_table
            registry = source.registry if source is not None else default_registry
            target = registry.build(self._name, class_name=self._class_name)
            if target.engine is None and source is not None:
                target.engine = source.engine
            self._target_table = target
        return self._target_table

    def can_be_joined(self) -> bool:
        return self._can_be_joined

    # --- Key columns, per kind ---

    def _default_foreign_key(self) -> str:
        raise NotImplementedError

    def _join_condition(self, source_alias: str, foreign_key: str) -> str:
        raise NotImplementedError

    def parent_key(self, config: ContainConfig | Mapping[str, Any] | None = None) -> str:
        """Column on the source whose values identify the target rows."""
        raise NotImplementedError

    def link_key(self, config: ContainConfig | Mapping[str, Any] | None = None) -> str:
        """Column on the target matched against :meth:`parent_key` values."""
        raise NotImplementedError

    def _resolved_foreign_key(self, config: ContainConfig) -> str:
        return config.foreign_key or self.foreign_key

    # --- Joining ---

    def attach_to(
        self,
        query: Query,
        config: ContainConfig | Mapping[str, Any] | None = None,
        *,
        include_fields: bool = True,
        source_alias: str | None = None,
    ) -> None:
        """Join the target into *query* under this association's name.

        Join conditions are the static conditions, the ``conditions``
        override and the key equality predicate, in that order. Target
        fields are selected as ``<name>__<column>``: the ``fields`` override
        if given, every schema column if *include_fields*, none if
        ``fields`` is ``False``.
        """
        config = ContainConfig.coerce(config)
        if source_alias is None:
            source_alias = self.source().alias
        target = self.target()
        foreign_key = self._resolved_foreign_key(config)

        conditions = _condition_list(qualify_conditions(self._conditions, self._name))
        conditions.extend(_condition_list(qualify_conditions(config.conditions, self._name)))
        conditions.append(self._join_condition(source_alias, foreign_key))

        query.join({
            self._name: {
                "table": target.table,
                "type": self.join_type,
                "conditions": conditions,
            }
        })
        if target.has_schema():
            query.default_types(target.aliased_types(self._name))

        if config.fields is False:
            return
        if config.fields:
            query.select(query.alias_fields(config.fields, self._name))
        elif include_fields:
            query.select(query.alias_fields(target.columns(), self._name))

    # --- Eager loading ---

    def validate_fields(self, config: ContainConfig | Mapping[str, Any] | None = None) -> None:
        """Check that a ``fields`` override keeps the column rows are matched on.

        Raises:
            MissingForeignKeyError: If the link column is not selected.
        """
        config = ContainConfig.coerce(config)
        if not config.fields:
            return
        alias = self.target().alias
        link = self.link_key(config)
        accepted = {link, f"{alias}.{link}", f"{alias}__{link}"}
        if not accepted.intersection(config.fields):
            raise MissingForeignKeyError(f"{alias}.{link}")

    def eager_loader(
        self,
        parent_keys: Sequence[Any],
        config: ContainConfig | Mapping[str, Any] | None = None,
        *,
        source_alias: str | None = None,
        contain: Any = None,
        engine: Engine | None = None,
    ) -> MergeFunction:
        """Fetch the target rows for *parent_keys* with a single query.

        Returns a function that, given a parent row, sets
        ``<source_alias>__<property>`` to the matching target rows. Parents
        without a match are returned unchanged.

        Args:
            parent_keys: Values of :meth:`parent_key` read from the parent rows.
            config: ``fields`` / ``conditions`` / ``sort`` / ``foreign_key`` overrides.
            source_alias: Alias of the parent row columns.
            contain: Containments nested under this association.
            engine: Engine used when neither table has one.

        Raises:
            MissingForeignKeyError: If ``fields`` omits the link column.
        """
        config = ContainConfig.coerce(config)
        if source_alias is None:
            source_alias = self.source().alias
        self.validate_fields(config)

        key_column = f"{source_alias}__{self.parent_key(config)}"
        property_key = f"{source_alias}__{self._property}"
        keys = list(dict.fromkeys(parent_keys))
        if not keys:
            logger.debug(f"Skipping eager load of '{self._name}': no parent keys")
            return _identity

        target = self.target()
        link = self.link_key(config)
        query = target.query()
        if query.engine is None:
            source = self.source()
            query.engine = engine or (source.engine if source is not None else None)

        query.where({f"{target.alias}.{link} IN": keys})
        for conditions in (self._conditions, config.conditions):
            if conditions:
                query.where(qualify_conditions(conditions, target.alias))
        if config.fields:
            query.select(config.fields)
        if config.sort:
            query.order(qualify_order(config.sort, target.alias))
        if contain:
            query.contain(contain)

        logger.debug(f"Eager loading '{self._name}' for {len(keys)} parent keys")
        grouped: dict[Any, list[Row]] = {}
        for row in query.to_array():
            grouped.setdefault(row.get(link), []).append(row)

        one_to_many = self.one_to_many

        def merge(row: Row) -> Row:
            matches = grouped.get(row.get(key_column))
            if matches:
                if one_to_many:
                    row[property_key] = [dict(match) for match in matches]
                else:
                    row[property_key] = dict(matches[0])
            return row

        return merge

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._name!r})"
